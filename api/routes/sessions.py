"""
Route handlers for login sessions.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status

from api.deps import get_session_service
from api.schemas import CreateSessionRequest, SessionResponse
from api.services.session_service import (
    InvalidCredentialsError,
    SessionService,
    SessionStoreUnavailableError,
)
from shared.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/sessions", tags=["sessions"])

SessionsDep = Annotated[SessionService, Depends(get_session_service)]


def _unavailable() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Sessions are unavailable",
    )


@router.post(
    "",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Log in",
)
def create_session(request: CreateSessionRequest, sessions: SessionsDep) -> SessionResponse:
    try:
        session = sessions.create_session(request.username, request.password)
    except InvalidCredentialsError:
        logger.warning("session_creation_rejected", username=request.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )
    except SessionStoreUnavailableError:
        logger.error("session_store_unavailable")
        raise _unavailable()

    return SessionResponse.model_validate(session)


@router.get("/{token}", response_model=SessionResponse, summary="Get a session")
def get_session(token: str, sessions: SessionsDep) -> SessionResponse:
    try:
        session = sessions.get_session(token)
    except SessionStoreUnavailableError:
        raise _unavailable()

    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return SessionResponse.model_validate(session)


@router.delete("/{token}", status_code=status.HTTP_204_NO_CONTENT, summary="Log out")
def delete_session(token: str, sessions: SessionsDep) -> Response:
    try:
        revoked = sessions.revoke_session(token)
    except SessionStoreUnavailableError:
        raise _unavailable()

    if not revoked:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

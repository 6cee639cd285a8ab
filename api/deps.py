"""
FastAPI dependencies: service context, repositories, sessions and the
authenticated user.
"""

from __future__ import annotations

from typing import Annotated, Any, Optional

from fastapi import Depends, Header, HTTPException, Request, status

from api.services.session_service import SessionService, SessionStoreUnavailableError
from shared.context import ServiceContext
from shared.logging import bind_request_context
from shared.repositories import (
    OrganisationRepository,
    PermissionsRepository,
    ProjectRepository,
    RepositoryName,
    UserRepository,
)


def get_context(request: Request) -> ServiceContext:
    return request.app.state.context


ContextDep = Annotated[ServiceContext, Depends(get_context)]


def get_users(context: ContextDep) -> UserRepository:
    return context.database.get_repository(RepositoryName.USERS)


def get_organisations(context: ContextDep) -> OrganisationRepository:
    return context.database.get_repository(RepositoryName.ORGANISATIONS)


def get_projects(context: ContextDep) -> ProjectRepository:
    return context.database.get_repository(RepositoryName.PROJECTS)


def get_permissions(context: ContextDep) -> PermissionsRepository:
    return context.database.get_repository(RepositoryName.PERMISSIONS)


def get_session_service(
    context: ContextDep,
    users: Annotated[UserRepository, Depends(get_users)],
) -> SessionService:
    return SessionService(context.cache, users, context.config.session_ttl_seconds)


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_session_token(
    authorization: Annotated[Optional[str], Header()] = None,
) -> Optional[str]:
    return _bearer_token(authorization)


SessionToken = Annotated[Optional[str], Depends(get_session_token)]


def get_current_user(
    sessions: Annotated[SessionService, Depends(get_session_service)],
    users: Annotated[UserRepository, Depends(get_users)],
    token: SessionToken,
) -> dict[str, Any]:
    """Resolve `Authorization: Bearer <token>` to the session's user, or answer 401."""
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        session = sessions.get_session(token)
    except SessionStoreUnavailableError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Sessions are unavailable",
        )

    user = users.get(session["user_id"]) if session else None
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired session",
            headers={"WWW-Authenticate": "Bearer"},
        )

    bind_request_context(user_id=user["id"])
    return user


CurrentUser = Annotated[dict[str, Any], Depends(get_current_user)]

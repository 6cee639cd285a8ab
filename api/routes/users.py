"""
Route handlers for user accounts.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.exc import IntegrityError

from api.deps import (
    CurrentUser,
    SessionToken,
    get_permissions,
    get_session_service,
    get_users,
)
from api.schemas import CreateUserRequest, UserResponse
from api.services.session_service import SessionService
from shared.logging import get_logger
from shared.repositories import PermissionsRepository, UserRepository

logger = get_logger(__name__)
router = APIRouter(prefix="/users", tags=["users"])

UsersDep = Annotated[UserRepository, Depends(get_users)]


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user",
)
def create_user(request: CreateUserRequest, users: UsersDep) -> UserResponse:
    if users.get_by_username(request.username) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Username '{request.username}' is already taken",
        )

    try:
        user = users.create(
            username=request.username,
            password=request.password,
            email=request.email,
            description=request.description,
        )
    except IntegrityError as e:
        logger.warning("user_creation_conflict", username=request.username, error=str(e.orig))
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username or email is already in use",
        )

    logger.info("user_created", user_id=user["id"])
    return UserResponse.model_validate(user)


@router.get("/{user_id}", response_model=UserResponse, summary="Get a user")
def get_user(user_id: str, users: UsersDep) -> UserResponse:
    user = users.get(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User {user_id} not found",
        )
    return UserResponse.model_validate(user)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete your own account",
)
def delete_user(
    user_id: str,
    current_user: CurrentUser,
    token: SessionToken,
    users: UsersDep,
    permissions: Annotated[PermissionsRepository, Depends(get_permissions)],
    sessions: Annotated[SessionService, Depends(get_session_service)],
) -> Response:
    """
    Delete the caller's account, its permission grants and the session used for
    the request. Other sessions of the account stop resolving once the user is
    gone and expire with their TTL. Organisations and projects it owns are kept.
    """
    if current_user["id"] != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only delete your own account",
        )

    users.delete(user_id)
    permissions.revoke_all_for_user(user_id)
    if token is not None:
        sessions.revoke_session(token)
    logger.info("user_deleted", user_id=user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

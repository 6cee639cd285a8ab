"""
Route handlers for per-project permission grants.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status

from api.deps import CurrentUser, get_permissions, get_projects, get_users
from api.routes.projects import get_project_or_404
from api.schemas import PermissionsResponse, UpdatePermissionsRequest
from shared.logging import get_logger
from shared.repositories import (
    Permission,
    PermissionsRepository,
    ProjectRepository,
    UserRepository,
)

logger = get_logger(__name__)
router = APIRouter(prefix="/projects/{project_id}/permissions", tags=["permissions"])

ProjectsDep = Annotated[ProjectRepository, Depends(get_projects)]
PermissionsDep = Annotated[PermissionsRepository, Depends(get_permissions)]


def _require_manage(
    permissions: PermissionsRepository,
    current_user_id: str,
    project_id: str,
) -> None:
    if not permissions.has(current_user_id, project_id, Permission.MANAGE):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Managing permissions requires the manage permission",
        )


@router.get("/{user_id}", response_model=PermissionsResponse, summary="Get a user's permissions")
def get_user_permissions(
    project_id: str,
    user_id: str,
    projects: ProjectsDep,
    permissions: PermissionsDep,
) -> PermissionsResponse:
    get_project_or_404(projects, project_id)
    bits = permissions.get_permissions(user_id, project_id)
    return PermissionsResponse.from_bits(user_id, project_id, int(bits))


@router.put("/{user_id}", response_model=PermissionsResponse, summary="Set a user's permissions")
def set_user_permissions(
    project_id: str,
    user_id: str,
    request: UpdatePermissionsRequest,
    current_user: CurrentUser,
    projects: ProjectsDep,
    permissions: PermissionsDep,
    users: Annotated[UserRepository, Depends(get_users)],
) -> PermissionsResponse:
    get_project_or_404(projects, project_id)
    _require_manage(permissions, current_user["id"], project_id)
    if users.get(user_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User {user_id} not found",
        )

    grant = permissions.grant(user_id, project_id, request.permissions)
    logger.info(
        "permissions_granted",
        project_id=project_id,
        target_user_id=user_id,
        permissions=grant["bits"],
    )
    return PermissionsResponse.from_bits(user_id, project_id, grant["bits"])


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Revoke a user's permissions",
)
def revoke_user_permissions(
    project_id: str,
    user_id: str,
    current_user: CurrentUser,
    projects: ProjectsDep,
    permissions: PermissionsDep,
) -> Response:
    get_project_or_404(projects, project_id)
    _require_manage(permissions, current_user["id"], project_id)

    if not permissions.revoke(user_id, project_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No permissions to revoke")

    logger.info("permissions_revoked", project_id=project_id, target_user_id=user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

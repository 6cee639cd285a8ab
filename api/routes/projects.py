"""
Route handlers for projects.

The creator of a project receives every permission on it.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Response, status

from api.deps import CurrentUser, get_organisations, get_permissions, get_projects
from api.schemas import CreateProjectRequest, ProjectResponse
from shared.logging import get_logger
from shared.repositories import (
    OrganisationRepository,
    Permission,
    PermissionsRepository,
    ProjectRepository,
)

logger = get_logger(__name__)
router = APIRouter(prefix="/projects", tags=["projects"])

ProjectsDep = Annotated[ProjectRepository, Depends(get_projects)]
PermissionsDep = Annotated[PermissionsRepository, Depends(get_permissions)]


def get_project_or_404(projects: ProjectRepository, project_id: str) -> dict[str, Any]:
    project = projects.get(project_id)
    if project is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Project {project_id} not found",
        )
    return project


@router.post(
    "",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a project",
)
def create_project(
    request: CreateProjectRequest,
    current_user: CurrentUser,
    projects: ProjectsDep,
    permissions: PermissionsDep,
    organisations: Annotated[OrganisationRepository, Depends(get_organisations)],
) -> ProjectResponse:
    if request.organisation_id is not None:
        organisation = organisations.get(request.organisation_id)
        if organisation is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Organisation {request.organisation_id} not found",
            )
        if organisation["owner_id"] != current_user["id"]:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only the organisation owner can add projects to it",
            )

    project = projects.create(
        name=request.name,
        owner_id=current_user["id"],
        organisation_id=request.organisation_id,
        description=request.description,
    )
    permissions.grant(current_user["id"], project["id"], Permission.all())

    logger.info(
        "project_created",
        project_id=project["id"],
        organisation_id=request.organisation_id,
    )
    return ProjectResponse.model_validate(project)


@router.get("/{project_id}", response_model=ProjectResponse, summary="Get a project")
def get_project(project_id: str, projects: ProjectsDep) -> ProjectResponse:
    return ProjectResponse.model_validate(get_project_or_404(projects, project_id))


@router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a project",
)
def delete_project(
    project_id: str,
    current_user: CurrentUser,
    projects: ProjectsDep,
    permissions: PermissionsDep,
) -> Response:
    project = get_project_or_404(projects, project_id)
    is_owner = project["owner_id"] == current_user["id"]
    if not is_owner and not permissions.has(current_user["id"], project_id, Permission.ADMIN):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not allowed to delete this project",
        )

    projects.delete(project_id)
    permissions.revoke_all(project_id)
    logger.info("project_deleted", project_id=project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

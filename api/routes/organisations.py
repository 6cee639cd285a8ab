"""
Route handlers for organisations.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.exc import IntegrityError

from api.deps import CurrentUser, get_organisations, get_projects
from api.schemas import CreateOrganisationRequest, OrganisationResponse
from shared.logging import get_logger
from shared.repositories import OrganisationRepository, ProjectRepository

logger = get_logger(__name__)
router = APIRouter(prefix="/organisations", tags=["organisations"])

OrganisationsDep = Annotated[OrganisationRepository, Depends(get_organisations)]
ProjectsDep = Annotated[ProjectRepository, Depends(get_projects)]


def _response(organisation: dict[str, Any], projects: ProjectRepository) -> OrganisationResponse:
    return OrganisationResponse.model_validate(
        {**organisation, "projects": projects.count_for_organisation(organisation["id"])}
    )


def _get_or_404(organisations: OrganisationRepository, organisation_id: str) -> dict[str, Any]:
    organisation = organisations.get(organisation_id)
    if organisation is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Organisation {organisation_id} not found",
        )
    return organisation


@router.post(
    "",
    response_model=OrganisationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an organisation",
)
def create_organisation(
    request: CreateOrganisationRequest,
    current_user: CurrentUser,
    organisations: OrganisationsDep,
    projects: ProjectsDep,
) -> OrganisationResponse:
    conflict = HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=f"Organisation '{request.name}' already exists",
    )
    if organisations.get_by_name(request.name) is not None:
        raise conflict

    try:
        organisation = organisations.create(
            name=request.name,
            owner_id=current_user["id"],
            description=request.description,
        )
    except IntegrityError as e:
        logger.warning("organisation_creation_conflict", name=request.name, error=str(e.orig))
        raise conflict

    logger.info("organisation_created", organisation_id=organisation["id"])
    return _response(organisation, projects)


@router.get(
    "/{organisation_id}",
    response_model=OrganisationResponse,
    summary="Get an organisation",
)
def get_organisation(
    organisation_id: str,
    organisations: OrganisationsDep,
    projects: ProjectsDep,
) -> OrganisationResponse:
    return _response(_get_or_404(organisations, organisation_id), projects)


@router.delete(
    "/{organisation_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an organisation",
)
def delete_organisation(
    organisation_id: str,
    current_user: CurrentUser,
    organisations: OrganisationsDep,
) -> Response:
    organisation = _get_or_404(organisations, organisation_id)
    if organisation["owner_id"] != current_user["id"]:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the owner can delete an organisation",
        )

    organisations.delete(organisation_id)
    logger.info("organisation_deleted", organisation_id=organisation_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

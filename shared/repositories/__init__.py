"""
Entity repositories and the typed name registry used by DatabaseManager.
"""

from __future__ import annotations

from enum import Enum

from shared.repositories.organisations import OrganisationRepository
from shared.repositories.permissions import Permission, PermissionsRepository
from shared.repositories.projects import ProjectRepository
from shared.repositories.users import UserRepository
from shared.repository import Repository


class RepositoryName(str, Enum):
    ORGANISATIONS = "organisations"
    PERMISSIONS = "permissions"
    PROJECTS = "projects"
    USERS = "users"


# Registration order is the order tables are checked and created in.
REPOSITORIES: dict[RepositoryName, type[Repository]] = {
    RepositoryName.ORGANISATIONS: OrganisationRepository,
    RepositoryName.PROJECTS: ProjectRepository,
    RepositoryName.USERS: UserRepository,
    RepositoryName.PERMISSIONS: PermissionsRepository,
}

__all__ = [
    "REPOSITORIES",
    "OrganisationRepository",
    "Permission",
    "PermissionsRepository",
    "ProjectRepository",
    "RepositoryName",
    "UserRepository",
]

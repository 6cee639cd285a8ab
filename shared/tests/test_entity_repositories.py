"""
Tests for the entity repositories against a connected SQLite database.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
from sqlalchemy.exc import IntegrityError

from shared.repositories import Permission, PermissionsRepository, RepositoryName


@pytest.fixture
def users(connected):
    return connected.get_repository(RepositoryName.USERS)


@pytest.fixture
def owner(users):
    return users.create(username="august", password="correct horse", email="a@floofy.dev")


def test_create_user_hashes_password(users):
    user = users.create(username="noel", password="correct horse")

    assert user["password"] != "correct horse"
    assert user["password"].startswith("$argon2")
    assert user["created_at"] is not None
    assert users.get(user["id"]) == user


def test_get_by_username_is_case_insensitive(users, owner):
    assert users.get_by_username("AUGUST")["id"] == owner["id"]
    assert users.get_by_username("nobody") is None


def test_duplicate_username_violates_unique_constraint(users, owner):
    with pytest.raises(IntegrityError):
        users.create(username="august", password="another password")


def test_authenticate(users, owner):
    assert users.authenticate("august", "correct horse")["id"] == owner["id"]
    assert users.authenticate("august", "wrong") is None
    assert users.authenticate("nobody", "correct horse") is None


def test_update_and_delete_user(users, owner):
    updated = users.update(owner["id"], description="maintainer")

    assert updated["description"] == "maintainer"
    assert users.delete(owner["id"]) is True
    assert users.delete(owner["id"]) is False
    assert users.update(owner["id"], description="gone") is None


def test_organisation_lookup_by_name(connected, owner):
    organisations = connected.get_repository(RepositoryName.ORGANISATIONS)
    organisation = organisations.create(name="Floofy", owner_id=owner["id"])

    assert organisations.get_by_name("floofy")["id"] == organisation["id"]
    assert organisations.count_owned_by(owner["id"]) == 1
    assert organisations.count_owned_by("someone-else") == 0


def test_projects_counted_per_organisation(connected, owner):
    organisations = connected.get_repository(RepositoryName.ORGANISATIONS)
    projects = connected.get_repository(RepositoryName.PROJECTS)
    organisation = organisations.create(name="floofy", owner_id=owner["id"])

    projects.create(name="arisu", owner_id=owner["id"], organisation_id=organisation["id"])
    projects.create(name="monori", owner_id=owner["id"], organisation_id=organisation["id"])
    projects.create(name="personal", owner_id=owner["id"])

    assert projects.count_for_organisation(organisation["id"]) == 2
    assert connected.count(RepositoryName.PROJECTS) == 3


def test_permission_grants(connected, owner):
    permissions = connected.get_repository(RepositoryName.PERMISSIONS)

    assert permissions.get_permissions(owner["id"], "project-1") == Permission(0)

    permissions.grant(owner["id"], "project-1", Permission.VIEW | Permission.EDIT)
    assert permissions.has(owner["id"], "project-1", Permission.VIEW)
    assert permissions.has(owner["id"], "project-1", Permission.VIEW | Permission.EDIT)
    assert not permissions.has(owner["id"], "project-1", Permission.MANAGE)

    grant = permissions.grant(owner["id"], "project-1", Permission.ADMIN)
    assert grant["bits"] == int(Permission.ADMIN)
    assert permissions.has(owner["id"], "project-1", Permission.MANAGE)
    assert connected.count(RepositoryName.PERMISSIONS) == 1

    assert permissions.revoke(owner["id"], "project-1") is True
    assert permissions.revoke(owner["id"], "project-1") is False
    assert permissions.get_grant(owner["id"], "project-1") is None


def test_one_grant_per_user_and_project(connected, owner):
    permissions = connected.get_repository(RepositoryName.PERMISSIONS)
    permissions.grant(owner["id"], "project-1", Permission.VIEW)

    with pytest.raises(IntegrityError):
        permissions._insert(user_id=owner["id"], project_id="project-1", bits=1)


def test_grant_updates_row_inserted_concurrently(connected, owner):
    permissions = connected.get_repository(RepositoryName.PERMISSIONS)
    permissions.grant(owner["id"], "project-1", Permission.VIEW)
    lookups = [None]

    def stale_get_grant(user_id, project_id):
        if lookups:
            return lookups.pop()
        return PermissionsRepository.get_grant(permissions, user_id, project_id)

    with patch.object(permissions, "get_grant", side_effect=stale_get_grant):
        grant = permissions.grant(owner["id"], "project-1", Permission.MANAGE)

    assert grant["bits"] == int(Permission.MANAGE)
    assert connected.count(RepositoryName.PERMISSIONS) == 1


def test_revoke_all_for_project_and_user(connected, owner):
    permissions = connected.get_repository(RepositoryName.PERMISSIONS)
    permissions.grant(owner["id"], "project-1", Permission.VIEW)
    permissions.grant("someone-else", "project-1", Permission.EDIT)
    permissions.grant(owner["id"], "project-2", Permission.ADMIN)

    assert permissions.revoke_all("project-1") is True
    assert permissions.get_grant("someone-else", "project-1") is None
    assert connected.count(RepositoryName.PERMISSIONS) == 1

    assert permissions.revoke_all_for_user(owner["id"]) is True
    assert permissions.revoke_all_for_user(owner["id"]) is False
    assert connected.count(RepositoryName.PERMISSIONS) == 0

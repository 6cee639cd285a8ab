"""
Per-project permission grants.

A grant stores a bit set of `Permission` flags for one (user, project) pair.
`ADMIN` implies every other flag.
"""

from __future__ import annotations

from enum import IntFlag
from typing import Any, Optional

from sqlalchemy import and_, select
from sqlalchemy.exc import IntegrityError

from shared.repository import ColumnDefinition, ColumnType, Repository


class Permission(IntFlag):
    VIEW = 1
    EDIT = 2
    MANAGE = 4
    ADMIN = 8

    @classmethod
    def all(cls) -> "Permission":
        return cls.VIEW | cls.EDIT | cls.MANAGE | cls.ADMIN


class PermissionsRepository(Repository):
    table = "permissions"
    columns = (
        ColumnDefinition("id", ColumnType.STRING, length=36, primary_key=True),
        ColumnDefinition("user_id", ColumnType.STRING, length=36, nullable=False),
        ColumnDefinition("project_id", ColumnType.STRING, length=36, nullable=False),
        ColumnDefinition("bits", ColumnType.INTEGER, nullable=False, default="0"),
        ColumnDefinition(
            "created_at", ColumnType.TIMESTAMP, nullable=False, default="CURRENT_TIMESTAMP"
        ),
    )
    unique_together = (("user_id", "project_id"),)

    def _where(self, user_id: str, project_id: str):
        return and_(
            self.sql_table.c.user_id == user_id,
            self.sql_table.c.project_id == project_id,
        )

    def get_grant(self, user_id: str, project_id: str) -> Optional[dict[str, Any]]:
        stmt = select(self.sql_table).where(self._where(user_id, project_id))
        return self.database.query(stmt)

    def get_permissions(self, user_id: str, project_id: str) -> Permission:
        grant = self.get_grant(user_id, project_id)
        return Permission(grant["bits"]) if grant else Permission(0)

    def grant(self, user_id: str, project_id: str, bits: int) -> dict[str, Any]:
        """Set the permission bits for a user on a project, replacing any existing grant."""
        bits = int(Permission(bits))
        existing = self.get_grant(user_id, project_id)
        if existing is None:
            try:
                return self._insert(user_id=user_id, project_id=project_id, bits=bits)
            except IntegrityError:
                # Another grant for the same pair was inserted first.
                existing = self.get_grant(user_id, project_id)
                if existing is None:
                    raise
        return self.update(existing["id"], bits=bits) or existing

    def _delete_where(self, clause) -> bool:
        stmt = self.sql_table.delete().where(clause).returning(self.sql_table.c.id)
        return self.database.query(stmt) is not None

    def revoke(self, user_id: str, project_id: str) -> bool:
        return self._delete_where(self._where(user_id, project_id))

    def revoke_all(self, project_id: str) -> bool:
        """Remove every grant on a project. Returns whether any grant existed."""
        return self._delete_where(self.sql_table.c.project_id == project_id)

    def revoke_all_for_user(self, user_id: str) -> bool:
        """Remove every grant held by a user, across all projects."""
        return self._delete_where(self.sql_table.c.user_id == user_id)

    def has(self, user_id: str, project_id: str, permission: Permission) -> bool:
        granted = self.get_permissions(user_id, project_id)
        if Permission.ADMIN in granted:
            return True
        return (granted & permission) == permission

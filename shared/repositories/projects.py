"""
Projects, owned by a user and optionally grouped under an organisation.
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import func, select

from shared.repository import ColumnDefinition, ColumnType, Repository


class ProjectRepository(Repository):
    table = "projects"
    columns = (
        ColumnDefinition("id", ColumnType.STRING, length=36, primary_key=True),
        ColumnDefinition("name", ColumnType.STRING, length=64, nullable=False),
        ColumnDefinition("description", ColumnType.TEXT),
        ColumnDefinition("owner_id", ColumnType.STRING, length=36, nullable=False),
        ColumnDefinition("organisation_id", ColumnType.STRING, length=36),
        ColumnDefinition(
            "created_at", ColumnType.TIMESTAMP, nullable=False, default="CURRENT_TIMESTAMP"
        ),
    )

    def create(
        self,
        *,
        name: str,
        owner_id: str,
        organisation_id: Optional[str] = None,
        description: Optional[str] = None,
    ) -> dict[str, Any]:
        return self._insert(
            name=name,
            owner_id=owner_id,
            organisation_id=organisation_id,
            description=description,
        )

    def count_for_organisation(self, organisation_id: str) -> int:
        """Number of projects grouped under an organisation."""
        stmt = (
            select(func.count().label("count"))
            .select_from(self.sql_table)
            .where(self.sql_table.c.organisation_id == organisation_id)
        )
        row = self.database.query(stmt)
        return int(row["count"]) if row else 0

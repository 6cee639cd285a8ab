"""
Organisations: named groups of projects owned by a single user.
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import func, select

from shared.repository import ColumnDefinition, ColumnType, Repository


class OrganisationRepository(Repository):
    table = "organisations"
    columns = (
        ColumnDefinition("id", ColumnType.STRING, length=36, primary_key=True),
        ColumnDefinition("name", ColumnType.STRING, length=64, nullable=False, unique=True),
        ColumnDefinition("description", ColumnType.TEXT),
        ColumnDefinition("owner_id", ColumnType.STRING, length=36, nullable=False),
        ColumnDefinition(
            "created_at", ColumnType.TIMESTAMP, nullable=False, default="CURRENT_TIMESTAMP"
        ),
    )

    def get_by_name(self, name: str) -> Optional[dict[str, Any]]:
        stmt = select(self.sql_table).where(
            func.lower(self.sql_table.c.name) == name.lower()
        )
        return self.database.query(stmt)

    def create(
        self,
        *,
        name: str,
        owner_id: str,
        description: Optional[str] = None,
    ) -> dict[str, Any]:
        return self._insert(name=name, owner_id=owner_id, description=description)

    def count_owned_by(self, owner_id: str) -> int:
        stmt = (
            select(func.count().label("count"))
            .select_from(self.sql_table)
            .where(self.sql_table.c.owner_id == owner_id)
        )
        row = self.database.query(stmt)
        return int(row["count"]) if row else 0

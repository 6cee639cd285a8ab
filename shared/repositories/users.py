"""
Users and their credentials.

Passwords are stored as Argon2 hashes; rows returned to callers still carry
the hash, so route handlers must not serialise them directly.
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import func, select

from shared.repository import ColumnDefinition, ColumnType, Repository
from shared.security import hash_password, needs_rehash, verify_password


class UserRepository(Repository):
    table = "users"
    columns = (
        ColumnDefinition("id", ColumnType.STRING, length=36, primary_key=True),
        ColumnDefinition("username", ColumnType.STRING, length=32, nullable=False, unique=True),
        ColumnDefinition("email", ColumnType.STRING, length=254, unique=True),
        ColumnDefinition("password", ColumnType.STRING, length=255, nullable=False),
        ColumnDefinition("description", ColumnType.TEXT),
        ColumnDefinition(
            "created_at", ColumnType.TIMESTAMP, nullable=False, default="CURRENT_TIMESTAMP"
        ),
    )

    def get_by_username(self, username: str) -> Optional[dict[str, Any]]:
        stmt = select(self.sql_table).where(
            func.lower(self.sql_table.c.username) == username.lower()
        )
        return self.database.query(stmt)

    def create(
        self,
        *,
        username: str,
        password: str,
        email: Optional[str] = None,
        description: Optional[str] = None,
    ) -> dict[str, Any]:
        return self._insert(
            username=username,
            password=hash_password(password),
            email=email,
            description=description,
        )

    def authenticate(self, username: str, password: str) -> Optional[dict[str, Any]]:
        """
        Return the user when username/password match, otherwise None.

        Hashes produced with outdated Argon2 parameters are upgraded in place.
        """
        user = self.get_by_username(username)
        if user is None or not verify_password(user["password"], password):
            return None

        if needs_rehash(user["password"]):
            user = self.update(user["id"], password=hash_password(password)) or user
        return user

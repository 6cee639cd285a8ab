"""
Repository base class and column metadata.

A repository pairs a table name and an ordered, immutable tuple of column
definitions with entity-specific query methods. Column definitions are
dialect-neutral; `convert_column_to_sql` renders one for a concrete dialect
when the table is created, and `ColumnDefinition.to_column` builds the
SQLAlchemy Column used by the query methods. Both go through
`ColumnType.to_sqlalchemy`, so every semantic type maps to a dialect type in
exactly one place.

Repositories never open connections themselves: every statement goes
through `DatabaseManager.query`, which returns at most one row.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, Optional
from uuid import uuid4

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    select,
    text,
)
from sqlalchemy.engine import Dialect
from sqlalchemy.types import TypeEngine

if TYPE_CHECKING:
    from shared.context import ServiceContext
    from shared.database import DatabaseManager


class ColumnType(str, Enum):
    STRING = "string"
    TEXT = "text"
    INTEGER = "integer"
    BIG_INTEGER = "big_integer"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    JSON = "json"

    def to_sqlalchemy(self, length: Optional[int] = None) -> TypeEngine:
        if self is ColumnType.STRING:
            return String(length or 255)
        if self is ColumnType.TEXT:
            return Text()
        if self is ColumnType.INTEGER:
            return Integer()
        if self is ColumnType.BIG_INTEGER:
            return BigInteger()
        if self is ColumnType.BOOLEAN:
            return Boolean()
        if self is ColumnType.TIMESTAMP:
            return DateTime(timezone=True)
        return JSON()


@dataclass(frozen=True)
class ColumnDefinition:
    """One column of a repository's table."""

    name: str
    type: ColumnType
    length: Optional[int] = None
    primary_key: bool = False
    nullable: bool = True
    unique: bool = False
    # Raw SQL expression used as the server-side default, e.g. CURRENT_TIMESTAMP.
    default: Optional[str] = None

    def to_column(self) -> Column:
        return Column(
            self.name,
            self.type.to_sqlalchemy(self.length),
            primary_key=self.primary_key,
            nullable=self.nullable and not self.primary_key,
            unique=self.unique,
            server_default=text(self.default) if self.default is not None else None,
        )


def convert_column_to_sql(column: ColumnDefinition, dialect: Dialect) -> str:
    """Render a column definition as `<name> <type> <constraints>` for dialect."""
    parts = [
        dialect.identifier_preparer.quote(column.name),
        column.type.to_sqlalchemy(column.length).compile(dialect=dialect),
    ]
    if column.primary_key:
        parts.append("PRIMARY KEY")
    if column.primary_key or not column.nullable:
        parts.append("NOT NULL")
    if column.unique:
        parts.append("UNIQUE")
    if column.default is not None:
        parts.append(f"DEFAULT {column.default}")
    return " ".join(parts)


def convert_unique_to_sql(names: tuple[str, ...], dialect: Dialect) -> str:
    """Render a table-level `UNIQUE (<a>, <b>)` constraint for dialect."""
    quoted = ", ".join(dialect.identifier_preparer.quote(name) for name in names)
    return f"UNIQUE ({quoted})"


def new_id() -> str:
    return str(uuid4())


class Repository:
    """
    Base class for entity repositories.

    Subclasses set `table` and `columns`, and optionally `unique_together`
    for multi-column unique constraints. Every table has an `id` primary
    key, used by `get`, `update` and `delete`.
    """

    table: ClassVar[str]
    columns: ClassVar[tuple[ColumnDefinition, ...]]
    unique_together: ClassVar[tuple[tuple[str, ...], ...]] = ()

    def __init__(self) -> None:
        if not getattr(self, "table", None) or not getattr(self, "columns", None):
            raise TypeError(f"{type(self).__name__} must define table and columns")
        self.sql_table = Table(
            self.table.lower(),
            MetaData(),
            *(column.to_column() for column in self.columns),
            *(UniqueConstraint(*names) for names in self.unique_together),
        )
        self._context: Optional[ServiceContext] = None

    def init(self, context: ServiceContext) -> None:
        """Bind the repository to the service context that owns the database."""
        self._context = context

    @property
    def database(self) -> DatabaseManager:
        if self._context is None:
            raise RuntimeError(f"{type(self).__name__} used before init()")
        return self._context.database

    def get(self, entity_id: str) -> Optional[dict[str, Any]]:
        stmt = select(self.sql_table).where(self.sql_table.c.id == entity_id)
        return self.database.query(stmt)

    def _insert(self, **values: Any) -> dict[str, Any]:
        values.setdefault("id", new_id())
        stmt = self.sql_table.insert().values(**values).returning(*self.sql_table.c)
        row = self.database.query(stmt)
        if row is None:
            raise RuntimeError(f"Insert into {self.table} returned no row")
        return row

    def update(self, entity_id: str, **values: Any) -> Optional[dict[str, Any]]:
        """Update columns of one row; returns the updated row, or None if missing."""
        stmt = (
            self.sql_table.update()
            .where(self.sql_table.c.id == entity_id)
            .values(**values)
            .returning(*self.sql_table.c)
        )
        return self.database.query(stmt)

    def delete(self, entity_id: str) -> bool:
        stmt = (
            self.sql_table.delete()
            .where(self.sql_table.c.id == entity_id)
            .returning(self.sql_table.c.id)
        )
        return self.database.query(stmt) is not None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} table={self.table!r}>"

"""
Database manager: connection pool, repository registry and query helpers.

Lifecycle:

    Disconnected --connect()--> Connected --dispose()--> Disconnected

`connect()` creates any missing repository tables and emits
`DatabaseEvent.ONLINE`; `dispose()` releases the pool and emits
`DatabaseEvent.OFFLINE`. A failed `connect()` leaves already-created tables
in place (table creation is idempotent) and returns the manager to the
Disconnected state before the error propagates.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal, Mapping, Optional, Union, overload

from sqlalchemy import text
from sqlalchemy.sql import Executable

from shared.analytics import Counter
from shared.db import ConnectionPool
from shared.events import DatabaseEvent, EventBus
from shared.logging import get_logger
from shared.repositories import (
    REPOSITORIES,
    OrganisationRepository,
    PermissionsRepository,
    ProjectRepository,
    RepositoryName,
    UserRepository,
)
from shared.repository import Repository, convert_column_to_sql, convert_unique_to_sql

if TYPE_CHECKING:
    from shared.context import ServiceContext

logger = get_logger(__name__)

Statement = Union[str, Executable]

# Each lookup yields a row only when the relation exists.
_CATALOG_LOOKUPS = {
    "postgresql": (
        "SELECT c.relname FROM pg_catalog.pg_class c "
        "WHERE c.oid = to_regclass(:name)"
    ),
    "sqlite": (
        "SELECT name FROM sqlite_master "
        "WHERE type = 'table' AND name = :name COLLATE NOCASE"
    ),
}
_DEFAULT_CATALOG_LOOKUP = (
    "SELECT table_name FROM information_schema.tables WHERE table_name = :name"
)


class DatabaseNotConnectedError(RuntimeError):
    """Raised when the repository registry is used before connect() completes."""


class DatabaseManager:
    """Owns the connection pool and the repositories bound to it."""

    def __init__(self, context: ServiceContext, pool: Optional[ConnectionPool] = None):
        self.context = context
        self.pool = pool or ConnectionPool.from_config(context.config)
        self.events: EventBus[DatabaseEvent] = EventBus()
        self.repositories: dict[RepositoryName, Repository] = {}
        self.connected = False

    def connect(self) -> None:
        """Verify the pool, create missing tables and register every repository."""
        if self.connected:
            logger.warning("database_already_connected")
            return

        logger.info("database_connecting")
        try:
            with self.pool.connect() as connection:
                logger.info(
                    "database_connection_acquired",
                    dialect=connection.dialect.name,
                    server_version=".".join(
                        str(part) for part in connection.dialect.server_version_info or ()
                    ),
                )
            self._add_repositories()
        except Exception as e:
            logger.error(
                "database_connect_failed",
                error=str(e),
                error_type=type(e).__name__,
                registered=[name.value for name in self.repositories],
            )
            self.repositories.clear()
            self.pool.dispose()
            raise

        self.connected = True
        logger.info("database_online", repositories=[name.value for name in self.repositories])
        self.events.emit(DatabaseEvent.ONLINE)

    def _add_repositories(self) -> None:
        for name, repository_cls in REPOSITORIES.items():
            repository = repository_cls()
            repository.init(self.context)
            if not self.exists(repository.table):
                self.create_table(repository)
            self._register(name, repository)

    def _register(self, name: RepositoryName, repository: Repository) -> None:
        tables = {registered.table.lower() for registered in self.repositories.values()}
        if name in self.repositories or repository.table.lower() in tables:
            raise ValueError(f"Repository {name.value!r} ({repository.table}) is already registered")
        self.repositories[name] = repository

    def dispose(self) -> None:
        """Release the pool and go offline. OFFLINE is only emitted when leaving Connected."""
        was_connected = self.connected
        self.pool.dispose()
        self.repositories.clear()
        self.connected = False

        if was_connected:
            logger.info("database_offline")
            self.events.emit(DatabaseEvent.OFFLINE)

    def query(
        self,
        statement: Statement,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Optional[dict[str, Any]]:
        """
        Execute a statement expected to return at most one row.

        Returns the first row as a dict, or None when the statement produced
        no rows (or does not return rows at all). Remaining rows are
        discarded; callers that need many rows should aggregate in SQL.
        """
        self.context.analytics.inc(Counter.DB_CALLS)
        if isinstance(statement, str):
            statement = text(statement)

        with self.pool.connect() as connection:
            result = connection.execute(statement, dict(params or {}))
            if not result.returns_rows:
                return None
            row = result.first()

        return dict(row._mapping) if row is not None else None

    def create_table(self, repository: Repository) -> None:
        dialect = self.pool.dialect
        definitions = [convert_column_to_sql(column, dialect) for column in repository.columns]
        definitions.extend(
            convert_unique_to_sql(names, dialect) for names in repository.unique_together
        )
        columns = ", ".join(definitions)
        table = dialect.identifier_preparer.quote(repository.table.lower())
        self.query(f"CREATE TABLE IF NOT EXISTS {table} ({columns})")
        logger.info("database_table_created", table=repository.table.lower())

    def exists(self, name: str) -> bool:
        """Whether the system catalog knows a relation called name."""
        lookup = _CATALOG_LOOKUPS.get(self.pool.dialect.name, _DEFAULT_CATALOG_LOOKUP)
        return self.query(lookup, {"name": name}) is not None

    @overload
    def get_repository(
        self, name: Literal[RepositoryName.ORGANISATIONS]
    ) -> OrganisationRepository: ...

    @overload
    def get_repository(
        self, name: Literal[RepositoryName.PERMISSIONS]
    ) -> PermissionsRepository: ...

    @overload
    def get_repository(self, name: Literal[RepositoryName.PROJECTS]) -> ProjectRepository: ...

    @overload
    def get_repository(self, name: Literal[RepositoryName.USERS]) -> UserRepository: ...

    @overload
    def get_repository(self, name: Union[RepositoryName, str]) -> Repository: ...

    def get_repository(self, name: Union[RepositoryName, str]) -> Repository:
        key = RepositoryName(name)
        repository = self.repositories.get(key)
        if repository is None:
            raise DatabaseNotConnectedError(
                f"Repository {key.value!r} is not available; call connect() first"
            )
        return repository

    def count(self, table: Union[RepositoryName, str]) -> int:
        name = table.value if isinstance(table, RepositoryName) else table
        quoted = self.pool.dialect.identifier_preparer.quote(name)
        row = self.query(f"SELECT count(*) AS count FROM {quoted}")
        return int(row["count"]) if row else 0

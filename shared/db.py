"""
Connection pool wrapper around a SQLAlchemy engine.

The engine is created lazily on first use and can be disposed and recreated.
Every connection runs in autocommit mode: each statement is its own unit of
work and no multi-statement transactions are opened by the data layer.
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Connection, Dialect, Engine, make_url

from shared.config import AppConfig
from shared.logging import get_logger

logger = get_logger(__name__)


class ConnectionPool:
    """Owns the engine (and therefore the pool) for one database."""

    def __init__(self, database_url: str, *, echo: bool = False):
        if not database_url:
            raise ValueError(
                "A database URL is required. Set DATABASE_URL or the DATABASE_* variables."
            )
        self.database_url = database_url
        self.echo = echo
        self._engine: Optional[Engine] = None

    @classmethod
    def from_config(cls, config: AppConfig) -> "ConnectionPool":
        return cls(config.database_url)

    @property
    def engine(self) -> Engine:
        """Get or create the SQLAlchemy engine."""
        if self._engine is None:
            kwargs: dict[str, Any] = {
                "pool_pre_ping": True,
                "isolation_level": "AUTOCOMMIT",
                "echo": self.echo,
            }
            if make_url(self.database_url).get_backend_name() == "sqlite":
                # Request handlers and the analytics thread share the pool.
                kwargs["connect_args"] = {"check_same_thread": False}

            self._engine = create_engine(self.database_url, **kwargs)
            logger.info(
                "connection_pool_created",
                dialect=self._engine.dialect.name,
                database=self._engine.url.database,
            )
        return self._engine

    @property
    def dialect(self) -> Dialect:
        return self.engine.dialect

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    def connect(self) -> Connection:
        """Check a connection out of the pool. Use it as a context manager."""
        return self.engine.connect()

    def dispose(self) -> None:
        """Close every pooled connection and drop the engine."""
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        logger.info("connection_pool_disposed")

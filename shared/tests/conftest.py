"""
Pytest fixtures for the shared data layer.

Every test gets its own SQLite database file, so table-existence checks start
from an empty catalog.
"""

from __future__ import annotations

from typing import Generator

import pytest

from shared.config import AppConfig
from shared.context import ServiceContext
from shared.database import DatabaseManager

_ENV_VARS = (
    "APP_ENV",
    "LOG_LEVEL",
    "LOG_FILE",
    "LOG_STDOUT",
    "DATABASE_URL",
    "DATABASE_NAME",
    "DATABASE_HOST",
    "DATABASE_PORT",
    "DATABASE_USERNAME",
    "DATABASE_PASSWORD",
    "REDIS_URL",
    "ANALYTICS",
    "ANALYTICS_INTERVAL_SECONDS",
    "SESSION_TTL_SECONDS",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every configuration variable from the environment."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def config(clean_env, tmp_path) -> AppConfig:
    clean_env.setenv("DATABASE_URL", f"sqlite+pysqlite:///{tmp_path / 'arisu.db'}")
    clean_env.setenv("ANALYTICS", "true")
    return AppConfig.from_env()


@pytest.fixture
def context(config) -> Generator[ServiceContext, None, None]:
    context = ServiceContext(config)
    yield context
    context.close()


@pytest.fixture
def database(context) -> DatabaseManager:
    return context.database


@pytest.fixture
def connected(database) -> DatabaseManager:
    database.connect()
    return database

"""
Pytest configuration and fixtures for API tests.

Each test gets a fresh SQLite database file and an in-memory stand-in for
Redis, wired into the app through an explicit ServiceContext.
"""

from __future__ import annotations

from typing import Callable, Generator, Optional

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from shared.cache import Cache
from shared.config import AppConfig
from shared.context import ServiceContext

_ENV_VARS = (
    "APP_ENV",
    "DATABASE_URL",
    "REDIS_URL",
    "ANALYTICS",
    "ANALYTICS_INTERVAL_SECONDS",
    "SESSION_TTL_SECONDS",
)


class FakeRedis:
    """The handful of Redis commands the cache uses, backed by a dict."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.ttls: dict[str, Optional[int]] = {}

    def get(self, key: str) -> Optional[str]:
        return self.store.get(key)

    def set(self, key: str, value: str, ex: Optional[int] = None) -> bool:
        self.store[key] = value
        self.ttls[key] = ex
        return True

    def delete(self, *keys: str) -> int:
        return sum(1 for key in keys if self.store.pop(key, None) is not None)

    def ping(self) -> bool:
        return True

    def close(self) -> None:
        pass


@pytest.fixture
def config(monkeypatch, tmp_path) -> AppConfig:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{tmp_path / 'arisu.db'}")
    monkeypatch.setenv("ANALYTICS", "true")
    monkeypatch.setenv("SESSION_TTL_SECONDS", "3600")
    return AppConfig.from_env()


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def context(config, fake_redis) -> ServiceContext:
    return ServiceContext(config, cache=Cache("redis://test", client=fake_redis))


@pytest.fixture
def client(context) -> Generator[TestClient, None, None]:
    """FastAPI test client; the lifespan connects and disposes the database."""
    app = create_app(context)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def signup(client) -> Callable[..., dict]:
    """Create a user and log in; returns the user plus ready-made auth headers."""

    def _signup(username: str, password: str = "correct horse battery") -> dict:
        user = client.post("/users", json={"username": username, "password": password})
        assert user.status_code == 201, user.text
        session = client.post("/sessions", json={"username": username, "password": password})
        assert session.status_code == 201, session.text
        token = session.json()["token"]
        return {
            **user.json(),
            "token": token,
            "headers": {"Authorization": f"Bearer {token}"},
        }

    return _signup

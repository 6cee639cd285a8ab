"""
Service layer for login sessions.

Sessions live only in Redis under `sessions:<token>` and expire with the key
TTL. Without a configured cache, session operations raise
SessionStoreUnavailableError and the routes answer 503.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from shared.cache import Cache
from shared.logging import get_logger
from shared.repositories import UserRepository

logger = get_logger(__name__)

SESSION_KEY_PREFIX = "sessions:"


class SessionStoreUnavailableError(RuntimeError):
    """Raised when sessions are used without a Redis cache."""


class InvalidCredentialsError(ValueError):
    """Raised when a username/password pair does not match a user."""


def _session_key(token: str) -> str:
    return f"{SESSION_KEY_PREFIX}{token}"


class SessionService:
    """Creates, looks up and revokes login sessions."""

    def __init__(self, cache: Cache, users: UserRepository, ttl_seconds: int):
        self.cache = cache
        self.users = users
        self.ttl_seconds = ttl_seconds

    def _require_cache(self) -> Cache:
        if not self.cache.enabled:
            raise SessionStoreUnavailableError("Sessions require REDIS_URL to be configured")
        return self.cache

    def create_session(self, username: str, password: str) -> dict[str, Any]:
        """
        Log a user in and return the stored session.

        Raises InvalidCredentialsError when the username is unknown or the
        password does not match.
        """
        cache = self._require_cache()

        user = self.users.authenticate(username, password)
        if user is None:
            raise InvalidCredentialsError("Invalid username or password")

        now = datetime.now(timezone.utc)
        session = {
            "token": secrets.token_urlsafe(32),
            "user_id": user["id"],
            "created_at": now.isoformat(),
            "expires_at": (now + timedelta(seconds=self.ttl_seconds)).isoformat(),
        }
        cache.set_json(_session_key(session["token"]), session, ttl_seconds=self.ttl_seconds)

        logger.info("session_created", user_id=user["id"])
        return session

    def get_session(self, token: str) -> Optional[dict[str, Any]]:
        return self._require_cache().get_json(_session_key(token))

    def revoke_session(self, token: str) -> bool:
        revoked = self._require_cache().delete(_session_key(token))
        if revoked:
            logger.info("session_revoked")
        return revoked

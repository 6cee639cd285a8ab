"""
Optional Redis cache.

The cache is disabled when no REDIS_URL is configured; callers check
`enabled` (or handle CacheUnavailableError) and degrade accordingly.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import redis

from shared.logging import get_logger

logger = get_logger(__name__)


class CacheUnavailableError(RuntimeError):
    """Raised when the cache is used but no Redis URL is configured."""


class Cache:
    """JSON key/value helpers over a lazily created Redis client."""

    def __init__(self, redis_url: Optional[str], *, client: Optional[redis.Redis] = None):
        self.redis_url = redis_url
        self._client = client

    @property
    def enabled(self) -> bool:
        return self._client is not None or bool(self.redis_url)

    @property
    def client(self) -> redis.Redis:
        """Get or create the Redis connection."""
        if self._client is None:
            if not self.redis_url:
                raise CacheUnavailableError(
                    "REDIS_URL environment variable is required for this operation."
                )
            self._client = redis.from_url(self.redis_url, decode_responses=True)
        return self._client

    def get_json(self, key: str) -> Optional[Any]:
        raw = self.client.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def set_json(self, key: str, value: Any, *, ttl_seconds: Optional[int] = None) -> None:
        self.client.set(key, json.dumps(value, default=str), ex=ttl_seconds)

    def delete(self, key: str) -> bool:
        return bool(self.client.delete(key))

    def ping(self) -> bool:
        """Whether Redis answers; False (not an error) when the cache is disabled."""
        if not self.enabled:
            return False
        try:
            return bool(self.client.ping())
        except redis.RedisError as e:
            logger.warning("cache_ping_failed", error=str(e), error_type=type(e).__name__)
            return False

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

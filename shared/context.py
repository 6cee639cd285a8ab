"""
Service context shared by the API and the background collectors.

One context is built per process at startup and passed explicitly to every
collaborator that needs the database, the cache or the analytics counters.
"""

from __future__ import annotations

from typing import Optional

from shared.analytics import AnalyticsManager
from shared.cache import Cache
from shared.config import AppConfig
from shared.database import DatabaseManager
from shared.db import ConnectionPool


class ServiceContext:
    def __init__(
        self,
        config: AppConfig,
        *,
        cache: Optional[Cache] = None,
        pool: Optional[ConnectionPool] = None,
    ):
        self.config = config
        self.cache = cache or Cache(config.redis_url)
        # The database manager reports every query to analytics, so analytics comes first.
        self.analytics = AnalyticsManager(self)
        self.database = DatabaseManager(self, pool=pool)

    def close(self) -> None:
        """Stop background collection and release the database and cache."""
        self.analytics.stop()
        self.database.dispose()
        self.cache.close()

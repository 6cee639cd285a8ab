"""
Analytics manager.

When enabled, the manager counts requests and database calls, and a
background thread records a snapshot of the database every
`analytics_interval_seconds` (10 minutes by default):

- organisation, project and user row counts
- database connectivity

Snapshots are immutable and replaced wholesale; no history is kept.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Optional, Union

from shared.logging import get_logger
from shared.repositories import RepositoryName

if TYPE_CHECKING:
    from shared.context import ServiceContext

logger = get_logger(__name__)


class Counter(str, Enum):
    REQUEST = "request"
    DB_CALLS = "db_calls"


@dataclass(frozen=True)
class DatabaseStats:
    organisations: int
    projects: int
    users: int
    online: bool
    collected_at: datetime


class AnalyticsManager:
    """Collects request/database counters and periodic database snapshots."""

    def __init__(self, context: ServiceContext):
        self.context = context
        self.enabled = context.config.analytics_enabled
        self.interval = context.config.analytics_interval_seconds

        # Latest snapshot; None until the first collection finishes.
        self.database_stats: Optional[DatabaseStats] = None
        self.requests = 0
        self.db_calls = 0

        self._lock = threading.Lock()
        self._stopped = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def collecting(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def collect(self) -> None:
        """Start collecting database statistics on a background timer."""
        if self.collecting:
            logger.warning("analytics_already_collecting")
            return

        logger.info("analytics_collection_started", interval_seconds=self.interval)
        # One stop event per collector thread.
        self._stopped = threading.Event()
        self._thread = threading.Thread(
            target=self._run,
            args=(self._stopped,),
            name="analytics-collector",
            daemon=True,
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """Stop the collector thread, waiting up to timeout seconds for it to exit."""
        self._stopped.set()
        thread, self._thread = self._thread, None
        if thread is None:
            return
        thread.join(timeout)
        if thread.is_alive():
            logger.warning("analytics_stop_timed_out", timeout_seconds=timeout)
        else:
            logger.info("analytics_collection_stopped")

    def _run(self, stopped: threading.Event) -> None:
        while not stopped.wait(self.interval):
            try:
                self.collect_stats()
            except Exception as e:
                # The previous snapshot stays in place until the next tick.
                logger.error(
                    "analytics_collection_failed",
                    error=str(e),
                    error_type=type(e).__name__,
                )

    def collect_stats(self) -> DatabaseStats:
        """Take one snapshot of the database and make it the current one."""
        database = self.context.database
        stats = DatabaseStats(
            organisations=database.count(RepositoryName.ORGANISATIONS),
            projects=database.count(RepositoryName.PROJECTS),
            users=database.count(RepositoryName.USERS),
            online=database.connected,
            collected_at=datetime.now(timezone.utc),
        )
        self.database_stats = stats
        logger.info(
            "analytics_collected",
            organisations=stats.organisations,
            projects=stats.projects,
            users=stats.users,
            online=stats.online,
        )
        return stats

    def inc(self, kind: Union[Counter, str]) -> None:
        """Increment a counter. Unknown kinds, and everything while disabled, are ignored."""
        if not self.enabled:
            return

        try:
            counter = Counter(kind)
        except ValueError:
            return

        with self._lock:
            if counter is Counter.REQUEST:
                self.requests += 1
            elif counter is Counter.DB_CALLS:
                self.db_calls += 1

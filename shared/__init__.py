"""
Shared infrastructure for the Arisu backend.

- `shared.config` for environment-based configuration
- `shared.logging` for structlog-based structured logging
- `shared.db` for the connection pool
- `shared.repository` / `shared.repositories` for table metadata and entity queries
- `shared.database` for the database manager (registry, query helpers, lifecycle events)
- `shared.analytics` for counters and periodic database snapshots
- `shared.cache` for the optional Redis cache
- `shared.context` for the service context that ties them together
"""

__version__ = "1.0.0"

"""
Environment-based configuration for the Arisu backend.

This module exposes a small, typed configuration surface shared by the API
and the data layer. All values are sourced from environment variables with
sensible, non-secret defaults.

No secrets or credentials are hard-coded here; they must be provided via
the environment (or a local `.env` file loaded by python-dotenv).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal, Optional

from sqlalchemy.engine import URL

Environment = Literal["local", "dev", "staging", "prod"]


@dataclass(frozen=True)
class AppConfig:
    """
    Top-level application configuration.

    The database is described either by a full `DATABASE_URL` or by the
    individual name/host/port/username/password keys; the URL wins when
    both are present.
    """

    environment: Environment
    log_level: str

    # Optional file path for structured JSON logs; when set, logs are written
    # to file (and stdout if log_stdout).
    log_file: Optional[str]
    log_stdout: bool

    database_url_override: Optional[str]
    database_name: str
    database_host: str
    database_port: int
    database_username: str
    database_password: Optional[str]

    # Redis is optional; sessions are unavailable without it.
    redis_url: Optional[str]

    analytics_enabled: bool
    analytics_interval_seconds: float

    session_ttl_seconds: int

    @property
    def database_url(self) -> str:
        """SQLAlchemy URL for the configured database."""
        if self.database_url_override:
            return self.database_url_override

        return URL.create(
            "postgresql+psycopg",
            username=self.database_username,
            password=self.database_password,
            host=self.database_host,
            port=self.database_port,
            database=self.database_name,
        ).render_as_string(hide_password=False)

    @classmethod
    def from_env(cls) -> "AppConfig":
        """
        Construct configuration from environment variables.

        All fields have defaults suitable for local development.
        Production deployments are expected to override these via env vars.
        """

        environment = os.getenv("APP_ENV", "local")

        if environment not in {"local", "dev", "staging", "prod"}:
            raise ValueError(f"Unsupported APP_ENV value: {environment!r}")

        def _bool_env(name: str, default: bool) -> bool:
            raw = (os.getenv(name) or str(default)).strip().lower()
            return raw in ("true", "1", "yes")

        def _int_env(name: str, default: int) -> int:
            raw = (os.getenv(name) or "").strip()
            if not raw:
                return default
            try:
                return int(raw)
            except ValueError:
                raise ValueError(f"{name} must be an integer, got: {raw!r}") from None

        interval_raw = (os.getenv("ANALYTICS_INTERVAL_SECONDS") or "600").strip()
        try:
            analytics_interval = float(interval_raw)
        except ValueError:
            raise ValueError(
                f"ANALYTICS_INTERVAL_SECONDS must be a number, got: {interval_raw!r}"
            ) from None
        if analytics_interval <= 0:
            raise ValueError("ANALYTICS_INTERVAL_SECONDS must be positive")

        return cls(
            environment=environment,  # type: ignore[arg-type]
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE") or None,
            log_stdout=_bool_env("LOG_STDOUT", True),
            database_url_override=os.getenv("DATABASE_URL") or None,
            database_name=os.getenv("DATABASE_NAME", "arisu"),
            database_host=os.getenv("DATABASE_HOST", "localhost"),
            database_port=_int_env("DATABASE_PORT", 5432),
            database_username=os.getenv("DATABASE_USERNAME", "postgres"),
            database_password=os.getenv("DATABASE_PASSWORD") or None,
            redis_url=os.getenv("REDIS_URL") or None,
            analytics_enabled=_bool_env("ANALYTICS", False),
            analytics_interval_seconds=analytics_interval,
            session_ttl_seconds=_int_env("SESSION_TTL_SECONDS", 7 * 24 * 60 * 60),
        )


def get_config() -> AppConfig:
    """
    Helper to obtain the current configuration.

    Long-lived processes construct a single `AppConfig` at startup and pass
    it explicitly through a `ServiceContext`.
    """

    return AppConfig.from_env()

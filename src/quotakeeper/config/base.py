"""Environment backed application settings."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Final

from dotenv import load_dotenv

__all__ = (
    "AppSettings",
    "DatabaseSettings",
    "LogSettings",
    "QuotaSettings",
    "Settings",
    "TierLimits",
    "get_settings",
)

TRUE_VALUES: Final = {"true", "1", "yes", "y", "t"}


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in TRUE_VALUES


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value not in (None, "") else default


def _env_list(name: str, default: str) -> list[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


@dataclass
class AppSettings:
    """Application configuration"""

    NAME: str = field(default_factory=lambda: os.getenv("APP_NAME", "quotakeeper"))
    """Application name."""
    URL: str = field(default_factory=lambda: os.getenv("APP_URL", "http://localhost:8000"))
    """The frontend base URL"""
    DEBUG: bool = field(default_factory=lambda: _env_bool("LITESTAR_DEBUG", False))
    """Run `Litestar` with `debug=True`."""
    SECRET_KEY: str = field(default_factory=lambda: os.getenv("SECRET_KEY", "change-me-in-production"))
    """Signing key for operator access tokens."""
    JWT_ENCRYPTION_ALGORITHM: str = field(default="HS256")
    ALLOWED_CORS_ORIGINS: list[str] = field(default_factory=lambda: _env_list("ALLOWED_CORS_ORIGINS", "*"))
    """Allowed CORS Origins"""

    @property
    def slug(self) -> str:
        """Return a slugified name."""
        return self.NAME.lower().replace(" ", "-").replace("_", "-")


@dataclass
class DatabaseSettings:
    URL: str = field(default_factory=lambda: os.getenv("DATABASE_URL", "sqlite+aiosqlite:///quotakeeper.sqlite3"))
    """SQLAlchemy Database URL."""
    ECHO: bool = field(default_factory=lambda: _env_bool("DATABASE_ECHO", False))
    """Enable SQLAlchemy engine logs."""
    POOL_MAX_OVERFLOW: int = field(default_factory=lambda: _env_int("DATABASE_MAX_POOL_OVERFLOW", 10))
    POOL_SIZE: int = field(default_factory=lambda: _env_int("DATABASE_POOL_SIZE", 5))
    POOL_TIMEOUT: int = field(default_factory=lambda: _env_int("DATABASE_POOL_TIMEOUT", 30))
    CREATE_ALL: bool = field(default_factory=lambda: _env_bool("DATABASE_CREATE_ALL", True))
    """Create missing tables on startup."""


@dataclass
class LogSettings:
    """Logger configuration"""

    LEVEL: int = field(default_factory=lambda: _env_int("LOG_LEVEL", 20))
    """Stdlib log levels. Only emit logs at this level, or higher."""
    SQLALCHEMY_LEVEL: int = field(default_factory=lambda: _env_int("SQLALCHEMY_LOG_LEVEL", 30))
    """Level to log SQLAlchemy logs."""
    ASGI_ACCESS_LEVEL: int = field(default_factory=lambda: _env_int("ASGI_ACCESS_LOG_LEVEL", 30))
    """Level to log access logs."""


@dataclass(frozen=True)
class TierLimits:
    """Per-period ceilings for one account tier. A negative value means unlimited."""

    daily: int
    weekly: int
    monthly: int


@dataclass
class QuotaSettings:
    """Usage quota and reset job configuration."""

    BATCH_OPERATION_LIMIT: int = field(default_factory=lambda: _env_int("QUOTA_BATCH_OPERATION_LIMIT", 500))
    """Maximum number of document mutations committed together."""
    ANONYMOUS_LIMIT: int = field(default_factory=lambda: _env_int("QUOTA_ANONYMOUS_LIMIT", 10))
    """Anonymous quota restored by every daily reset."""
    RESET_HOUR: int = field(default_factory=lambda: _env_int("QUOTA_RESET_HOUR", 0))
    """Hour of day (UTC) the daily reset is expected to run. Informational."""
    HEALTH_WINDOW_HOURS: int = field(default_factory=lambda: _env_int("QUOTA_HEALTH_WINDOW_HOURS", 24))
    HEALTH_BUFFER_HOURS: int = field(default_factory=lambda: _env_int("QUOTA_HEALTH_BUFFER_HOURS", 1))
    FREE_TIER: TierLimits = field(
        default_factory=lambda: TierLimits(
            daily=_env_int("QUOTA_FREE_DAILY_LIMIT", 10),
            weekly=_env_int("QUOTA_FREE_WEEKLY_LIMIT", 50),
            monthly=_env_int("QUOTA_FREE_MONTHLY_LIMIT", 200),
        ),
    )
    PRO_TIER: TierLimits = field(
        default_factory=lambda: TierLimits(
            daily=_env_int("QUOTA_PRO_DAILY_LIMIT", 100),
            weekly=_env_int("QUOTA_PRO_WEEKLY_LIMIT", 500),
            monthly=_env_int("QUOTA_PRO_MONTHLY_LIMIT", 2000),
        ),
    )


@dataclass
class Settings:
    app: AppSettings = field(default_factory=AppSettings)
    db: DatabaseSettings = field(default_factory=DatabaseSettings)
    log: LogSettings = field(default_factory=LogSettings)
    quota: QuotaSettings = field(default_factory=QuotaSettings)

    @classmethod
    def from_env(cls, dotenv_filename: str = ".env") -> Settings:
        env_file = os.path.join(os.getcwd(), dotenv_filename)
        if os.path.isfile(env_file):
            load_dotenv(env_file, override=False)
        return Settings()


@lru_cache(maxsize=1, typed=True)
def get_settings() -> Settings:
    return Settings.from_env()

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from typing import Literal

from quotakeeper.__about__ import __version__ as current_version
from quotakeeper.config.base import get_settings
from quotakeeper.domain.accounts.schemas import PydanticBaseModel

__all__ = (
    "LastResets",
    "ResetHealthSummary",
    "SystemHealth",
)

settings = get_settings()


class LastResets(PydanticBaseModel):
    daily: datetime | None = None
    weekly: datetime | None = None
    monthly: datetime | None = None


class ResetHealthSummary(PydanticBaseModel):
    """Latest result published by the reset health monitor."""

    status: str
    last_health_check: datetime
    next_daily_reset: datetime
    next_weekly_reset: datetime
    next_monthly_reset: datetime


class SystemHealth(PydanticBaseModel):
    database_status: Literal["online", "offline"]
    schedules: dict[str, str]
    last_resets: LastResets | None = None
    reset_health: ResetHealthSummary | None = None
    app: str = settings.app.NAME
    version: str = current_version

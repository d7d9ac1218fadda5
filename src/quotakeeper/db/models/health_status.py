from __future__ import annotations

from datetime import datetime  # noqa: TC003
from typing import Final

from advanced_alchemy.base import UUIDAuditBase
from advanced_alchemy.types import DateTimeUTC
from sqlalchemy import Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from .enums import HealthState

HEALTH_STATUS_KEY: Final = "reset_system"


class HealthStatus(UUIDAuditBase):
    """Latest health check summary (singleton row)."""

    __tablename__ = "health_status"
    __table_args__ = {"comment": "Latest reset system health summary"}

    key: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, default=HEALTH_STATUS_KEY)
    last_health_check: Mapped[datetime] = mapped_column(DateTimeUTC(timezone=True), nullable=False)
    status: Mapped[HealthState] = mapped_column(Enum(HealthState, native_enum=False, length=20), nullable=False)
    next_daily_reset: Mapped[datetime] = mapped_column(DateTimeUTC(timezone=True), nullable=False)
    next_weekly_reset: Mapped[datetime] = mapped_column(DateTimeUTC(timezone=True), nullable=False)
    next_monthly_reset: Mapped[datetime] = mapped_column(DateTimeUTC(timezone=True), nullable=False)

"""Tracked account model holding per-period usage counters."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003

from advanced_alchemy.base import UUIDAuditBase
from advanced_alchemy.types import DateTimeUTC
from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column


class User(UUIDAuditBase):
    """Account tracked for usage quotas (anonymous or registered)."""

    __tablename__ = "user_account"
    __table_args__ = {"comment": "Tracked accounts and their usage counters"}

    email: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True)
    is_anonymous: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_pro: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # NULL marks an account that was never provisioned for usage tracking
    usage_count: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        default=None,
        comment="Lifetime request counter; NULL when tracking is not provisioned",
    )

    daily_usage: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    weekly_usage: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    monthly_usage: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    last_daily_reset: Mapped[datetime | None] = mapped_column(DateTimeUTC(timezone=True), nullable=True)
    last_weekly_reset: Mapped[datetime | None] = mapped_column(DateTimeUTC(timezone=True), nullable=True)
    last_monthly_reset: Mapped[datetime | None] = mapped_column(DateTimeUTC(timezone=True), nullable=True)

"""Shared quota policy record."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from typing import Any, Final

from advanced_alchemy.base import UUIDAuditBase
from advanced_alchemy.types import DateTimeUTC
from sqlalchemy import JSON, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

QUOTA_CONFIG_KEY: Final = "limits"


class QuotaConfig(UUIDAuditBase):
    """Singleton row (key ``limits``) with cross-cutting quota policy."""

    __tablename__ = "quota_config"
    __table_args__ = {"comment": "Shared quota policy and the last daily reset"}

    key: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, default=QUOTA_CONFIG_KEY)
    reset_hour: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    anonymous_limit: Mapped[int] = mapped_column(Integer, default=10, nullable=False)
    tiers: Mapped[dict[str, Any] | None] = mapped_column(
        JSON(),
        nullable=True,
        comment="Per-tier ceilings, e.g. {'free': {'daily': 10, 'weekly': 50, 'monthly': 200}}",
    )
    reset_type: Mapped[str | None] = mapped_column(String(20), nullable=True)

    last_reset: Mapped[datetime | None] = mapped_column(DateTimeUTC(timezone=True), nullable=True)

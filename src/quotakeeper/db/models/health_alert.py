from __future__ import annotations

from datetime import datetime  # noqa: TC003

from advanced_alchemy.base import UUIDAuditBase
from advanced_alchemy.types import DateTimeUTC
from sqlalchemy import Enum, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .enums import HealthAlertCategory


class HealthAlert(UUIDAuditBase):
    """Alert raised by the reset health monitor."""

    __tablename__ = "health_alert"
    __table_args__ = {"comment": "Reset system health alerts"}

    category: Mapped[HealthAlertCategory] = mapped_column(
        Enum(HealthAlertCategory, native_enum=False, length=20),
        nullable=False,
        index=True,
    )
    timestamp: Mapped[datetime] = mapped_column(DateTimeUTC(timezone=True), nullable=False)
    alert_type: Mapped[str] = mapped_column(String(50), nullable=False)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)

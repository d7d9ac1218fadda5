"""Append-only record of reset attempts."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003

from advanced_alchemy.base import UUIDAuditBase
from advanced_alchemy.types import DateTimeUTC
from sqlalchemy import Enum, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .enums import ResetKind, ResetLogPartition, ResetStatus


class ResetLog(UUIDAuditBase):
    """One entry per finished reset attempt, partitioned by kind (or ``errors``)."""

    __tablename__ = "reset_log"
    __table_args__ = (
        Index("idx_reset_log_partition_timestamp", "partition", "timestamp"),
        {"comment": "Reset run history used by the health monitor"},
    )

    partition: Mapped[ResetLogPartition] = mapped_column(
        Enum(ResetLogPartition, native_enum=False, length=20),
        nullable=False,
    )
    reset_kind: Mapped[ResetKind] = mapped_column(
        Enum(ResetKind, native_enum=False, length=20),
        nullable=False,
    )
    timestamp: Mapped[datetime] = mapped_column(DateTimeUTC(timezone=True), nullable=False)
    users_reset: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    status: Mapped[ResetStatus] = mapped_column(
        Enum(ResetStatus, native_enum=False, length=20),
        nullable=False,
    )
    anonymous_limit_reset: Mapped[int | None] = mapped_column(Integer, nullable=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    reset_type: Mapped[str | None] = mapped_column(
        String(30),
        nullable=True,
        comment="Job name for error entries, e.g. daily_reset",
    )

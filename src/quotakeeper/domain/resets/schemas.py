from __future__ import annotations

from datetime import datetime  # noqa: TC003
from typing import Literal
from uuid import UUID  # noqa: TC003

from quotakeeper.db.models import ResetKind, ResetLogPartition, ResetStatus
from quotakeeper.domain.accounts.schemas import PydanticBaseModel

__all__ = (
    "ManualResetRequest",
    "ManualResetResponse",
    "ResetLogModel",
    "ResetOutcomeModel",
)


class ManualResetRequest(PydanticBaseModel):
    reset_type: str
    """One of daily, weekly, monthly or all. Validated by the reset service."""


class ResetOutcomeModel(PydanticBaseModel):
    reset_kind: ResetKind
    users_reset: int
    status: ResetStatus
    batches: int
    anonymous_limit_reset: int | None = None
    error: str | None = None


class ManualResetResponse(PydanticBaseModel):
    success: bool
    message: str
    reset_type: str
    results: list[ResetOutcomeModel]


class ResetLogModel(PydanticBaseModel):
    id: UUID
    partition: ResetLogPartition
    reset_kind: ResetKind
    timestamp: datetime
    users_reset: int
    status: ResetStatus
    anonymous_limit_reset: int | None = None
    error: str | None = None


ResetLogPartitionName = Literal["daily", "weekly", "monthly", "errors"]

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from typing import Literal
from uuid import UUID  # noqa: TC003

from pydantic import Field

from quotakeeper.domain.accounts.schemas import PydanticBaseModel

__all__ = (
    "PeriodUsageModel",
    "QuotaPolicyModel",
    "QuotaPolicyUpdate",
    "TierLimitsModel",
    "TierLimitsUpdate",
    "UsageStatsModel",
    "UsageSummaryModel",
    "UserUsageModel",
)


class PeriodUsageModel(PydanticBaseModel):
    period: str
    usage_count: int
    limit: int
    remaining_quota: int
    reset_date: datetime


class UsageStatsModel(PydanticBaseModel):
    """Usage counters and remaining quota of an account."""

    user_id: UUID
    tier: str
    total_usage: int
    periods: list[PeriodUsageModel]


class UsageSummaryModel(PydanticBaseModel):
    total_users: int
    total_usage: int
    pro_users: int
    free_users: int
    anonymous_users: int
    average_usage_per_user: int
    timestamp: datetime


class UserUsageModel(PydanticBaseModel):
    id: UUID
    email: str | None = None
    is_pro: bool
    is_anonymous: bool
    usage_count: int | None = None
    daily_usage: int
    weekly_usage: int
    monthly_usage: int
    created_at: datetime


class TierLimitsModel(PydanticBaseModel):
    """Per-period ceilings of a tier. -1 means unlimited."""

    daily: int
    weekly: int
    monthly: int


class TierLimitsUpdate(PydanticBaseModel):
    daily: int | None = Field(default=None, ge=-1)
    weekly: int | None = Field(default=None, ge=-1)
    monthly: int | None = Field(default=None, ge=-1)


class QuotaPolicyModel(PydanticBaseModel):
    anonymous_limit: int
    reset_hour: int
    tiers: dict[str, TierLimitsModel]
    last_reset: datetime | None = None


class QuotaPolicyUpdate(PydanticBaseModel):
    """Partial policy update. Omitted fields keep their stored value."""

    anonymous_limit: int | None = Field(default=None, ge=0)
    reset_hour: int | None = Field(default=None, ge=0, le=23)
    tiers: dict[Literal["free", "pro"], TierLimitsUpdate] | None = None

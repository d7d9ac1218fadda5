"""Quota enforcement for analysis requests."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Final, NamedTuple

from quotakeeper.config.base import QuotaSettings, TierLimits, get_settings
from quotakeeper.lib.exceptions import QuotaExceededError
from quotakeeper.lib.schedule import next_reset

if TYPE_CHECKING:
    from uuid import UUID

    from quotakeeper.db import models as m
    from quotakeeper.domain.resets.services import QuotaConfigService
    from quotakeeper.domain.usage.services import UserUsageService

__all__ = (
    "TIERS",
    "PeriodUsage",
    "QuotaPolicy",
    "UsageLimitService",
    "UsageStats",
)

TIERS: Final = ("free", "pro")
"""Account tiers with configurable ceilings. Anonymous accounts use the shared anonymous quota."""


class PeriodUsage(NamedTuple):
    """Usage of one reset period."""

    period: str
    usage_count: int
    limit: int
    """Negative when the period is unlimited."""
    remaining_quota: int
    reset_date: datetime


class QuotaPolicy(NamedTuple):
    """Ceilings in effect for one evaluation."""

    anonymous_limit: int
    tiers: dict[str, TierLimits]


class UsageStats(NamedTuple):
    """Usage statistics for a user."""

    user_id: UUID
    tier: str
    total_usage: int
    periods: list[PeriodUsage]


class UsageLimitService:
    """Service for checking usage limits and counting analysis requests."""

    max_attempts: int = 3
    """Guarded increments tried before giving up on a counter that keeps moving."""

    def __init__(self, settings: QuotaSettings | None = None) -> None:
        """Initialize the usage limit service.

        Args:
            settings: Quota settings holding the fallback per-tier limits
        """
        self.settings = settings or get_settings().quota

    async def check_and_increment_usage(
        self,
        user_id: UUID,
        usage_service: UserUsageService,
        config_service: QuotaConfigService,
        now: datetime | None = None,
    ) -> UsageStats:
        """Check every period limit and count the request when all have room.

        The ceilings are part of the increment statement itself, so two
        requests racing for the last unit of a quota cannot both be counted.

        Args:
            user_id: UUID of the account making the request
            usage_service: UserUsageService for database operations
            config_service: QuotaConfigService used to read the quota policy
            now: evaluation time, defaults to the current UTC time

        Raises:
            QuotaExceededError: If the account has used up one of its quotas

        Returns:
            Usage statistics after the increment
        """
        now = now or datetime.now(timezone.utc)
        user = await usage_service.get(user_id)
        policy = self.policy(await config_service.get_limits())

        for _ in range(self.max_attempts):
            periods = self._periods(user, policy, now)
            self._ensure_room(user_id, periods)
            updated = await usage_service.increment_usage(
                user_id,
                limits={period.period: period.limit for period in periods},
            )
            if updated is not None:
                return self._stats(updated, policy, now)
            user = await usage_service.reload(user_id)
        self._ensure_room(user_id, self._periods(user, policy, now))
        msg = f"Could not count usage for user {user_id}: counters changed during {self.max_attempts} attempts"
        raise RuntimeError(msg)

    async def get_user_usage_stats(
        self,
        user_id: UUID,
        usage_service: UserUsageService,
        config_service: QuotaConfigService,
        now: datetime | None = None,
    ) -> UsageStats:
        """Get current usage statistics for a user.

        Args:
            user_id: UUID of the account
            usage_service: UserUsageService for database operations
            config_service: QuotaConfigService used to read the quota policy
            now: evaluation time, defaults to the current UTC time

        Returns:
            UsageStats object with current usage information
        """
        now = now or datetime.now(timezone.utc)
        user = await usage_service.get(user_id)
        policy = self.policy(await config_service.get_limits())
        return self._stats(user, policy, now)

    def policy(self, config: m.QuotaConfig | None = None) -> QuotaPolicy:
        """Effective quota policy.

        Values stored on the config record win; a tier or period missing
        there falls back to the settings.
        """
        defaults = {"free": self.settings.FREE_TIER, "pro": self.settings.PRO_TIER}
        stored: dict[str, Any] = (config.tiers if config is not None else None) or {}
        tiers = {}
        for tier in TIERS:
            fallback = defaults[tier]
            values = stored.get(tier) or {}
            tiers[tier] = TierLimits(
                daily=_limit(values.get("daily"), fallback.daily),
                weekly=_limit(values.get("weekly"), fallback.weekly),
                monthly=_limit(values.get("monthly"), fallback.monthly),
            )
        anonymous_limit = config.anonymous_limit if config is not None else self.settings.ANONYMOUS_LIMIT
        return QuotaPolicy(anonymous_limit=anonymous_limit, tiers=tiers)

    @staticmethod
    def limits_for(user: m.User, policy: QuotaPolicy) -> TierLimits:
        return policy.tiers["pro" if user.is_pro else "free"]

    def _stats(self, user: m.User, policy: QuotaPolicy, now: datetime) -> UsageStats:
        return UsageStats(
            user_id=user.id,
            tier=self._tier(user),
            total_usage=user.usage_count or 0,
            periods=self._periods(user, policy, now),
        )

    def _periods(self, user: m.User, policy: QuotaPolicy, now: datetime) -> list[PeriodUsage]:
        # anonymous accounts are capped on the daily counter by the shared anonymous quota
        if user.is_anonymous:
            return [self._period("daily", user.daily_usage, policy.anonymous_limit, now)]
        limits = self.limits_for(user, policy)
        return [
            self._period("daily", user.daily_usage, limits.daily, now),
            self._period("weekly", user.weekly_usage, limits.weekly, now),
            self._period("monthly", user.monthly_usage, limits.monthly, now),
        ]

    @staticmethod
    def _ensure_room(user_id: UUID, periods: list[PeriodUsage]) -> None:
        for period in periods:
            if period.limit >= 0 and period.usage_count >= period.limit:
                raise QuotaExceededError(
                    user_id=user_id,
                    period=period.period,
                    current_usage=period.usage_count,
                    limit=period.limit,
                    reset_date=period.reset_date,
                )

    @staticmethod
    def _period(period: str, usage_count: int, limit: int, now: datetime) -> PeriodUsage:
        remaining = max(0, limit - usage_count) if limit >= 0 else -1
        return PeriodUsage(
            period=period,
            usage_count=usage_count,
            limit=limit,
            remaining_quota=remaining,
            reset_date=next_reset(period, now),
        )

    @staticmethod
    def _tier(user: m.User) -> str:
        if user.is_anonymous:
            return "anonymous"
        return "pro" if user.is_pro else "free"


def _limit(value: Any, fallback: int) -> int:
    return fallback if value is None else int(value)

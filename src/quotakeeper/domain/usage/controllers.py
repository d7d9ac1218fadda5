"""Usage Controllers."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Annotated

import structlog
from litestar import Controller, get, patch, post
from litestar.di import Provide
from litestar.params import Parameter

from quotakeeper.domain.accounts.guards import requires_admin
from quotakeeper.domain.usage import urls
from quotakeeper.domain.usage.deps import (
    provide_quota_config_service,
    provide_usage_limit_service,
    provide_user_usage_service,
)
from quotakeeper.domain.usage.schemas import (
    PeriodUsageModel,
    QuotaPolicyModel,
    QuotaPolicyUpdate,
    TierLimitsModel,
    UsageStatsModel,
    UsageSummaryModel,
    UserUsageModel,
)

if TYPE_CHECKING:
    from uuid import UUID

    from quotakeeper.db import models as m
    from quotakeeper.domain.resets.services import QuotaConfigService
    from quotakeeper.domain.usage.services import UserUsageService
    from quotakeeper.lib.usage_limits import UsageLimitService, UsageStats

logger = structlog.get_logger()


def to_stats_model(stats: UsageStats) -> UsageStatsModel:
    return UsageStatsModel(
        user_id=stats.user_id,
        tier=stats.tier,
        total_usage=stats.total_usage,
        periods=[PeriodUsageModel(**period._asdict()) for period in stats.periods],
    )


def to_policy_model(usage_limit_service: UsageLimitService, config: m.QuotaConfig | None) -> QuotaPolicyModel:
    policy = usage_limit_service.policy(config)
    return QuotaPolicyModel(
        anonymous_limit=policy.anonymous_limit,
        reset_hour=config.reset_hour if config is not None else usage_limit_service.settings.RESET_HOUR,
        tiers={
            tier: TierLimitsModel(daily=limits.daily, weekly=limits.weekly, monthly=limits.monthly)
            for tier, limits in policy.tiers.items()
        },
        last_reset=config.last_reset if config is not None else None,
    )


class UsageController(Controller):
    """Account usage counters."""

    tags = ["Usage"]
    dependencies = {
        "usage_service": Provide(provide_user_usage_service),
        "config_service": Provide(provide_quota_config_service),
        "usage_limit_service": Provide(provide_usage_limit_service, sync_to_thread=False),
    }

    @get(operation_id="GetUsage", path=urls.USAGE_DETAIL)
    async def get_usage(
        self,
        user_id: UUID,
        usage_service: UserUsageService,
        config_service: QuotaConfigService,
        usage_limit_service: UsageLimitService,
    ) -> UsageStatsModel:
        """Current usage and remaining quota of an account."""
        stats = await usage_limit_service.get_user_usage_stats(user_id, usage_service, config_service)
        return to_stats_model(stats)

    @post(operation_id="ConsumeUsage", path=urls.USAGE_CONSUME, status_code=200)
    async def consume_usage(
        self,
        user_id: UUID,
        usage_service: UserUsageService,
        config_service: QuotaConfigService,
        usage_limit_service: UsageLimitService,
    ) -> UsageStatsModel:
        """Count one analysis request, or reject it with 429 when a quota is used up."""
        stats = await usage_limit_service.check_and_increment_usage(user_id, usage_service, config_service)
        await logger.adebug("Usage counted", user_id=str(user_id), total_usage=stats.total_usage)
        return to_stats_model(stats)


class UsageAdminController(Controller):
    """Operator view of usage across accounts, and of the quota policy."""

    tags = ["Usage Administration"]
    guards = [requires_admin]
    dependencies = {
        "usage_service": Provide(provide_user_usage_service),
        "config_service": Provide(provide_quota_config_service),
        "usage_limit_service": Provide(provide_usage_limit_service, sync_to_thread=False),
    }

    @get(operation_id="GetUsageSummary", path=urls.USAGE_SUMMARY)
    async def get_usage_summary(self, usage_service: UserUsageService) -> UsageSummaryModel:
        """Totals and averages over every account."""
        summary = await usage_service.usage_summary()
        return UsageSummaryModel(**summary._asdict(), timestamp=datetime.now(timezone.utc))

    @get(operation_id="ListTopUsageUsers", path=urls.USAGE_TOP_USERS)
    async def list_top_users(
        self,
        usage_service: UserUsageService,
        limit: Annotated[int, Parameter(query="limit", ge=1, le=1000)] = 100,
    ) -> list[UserUsageModel]:
        """Accounts with the highest lifetime usage."""
        users = await usage_service.top_users(limit)
        return [UserUsageModel.model_validate(user) for user in users]

    @get(operation_id="GetQuotaPolicy", path=urls.QUOTA_POLICY)
    async def get_quota_policy(
        self,
        config_service: QuotaConfigService,
        usage_limit_service: UsageLimitService,
    ) -> QuotaPolicyModel:
        """Quota ceilings in effect, including settings used as fallback."""
        return to_policy_model(usage_limit_service, await config_service.get_limits())

    @patch(operation_id="UpdateQuotaPolicy", path=urls.QUOTA_POLICY)
    async def update_quota_policy(
        self,
        data: QuotaPolicyUpdate,
        config_service: QuotaConfigService,
        usage_limit_service: UsageLimitService,
    ) -> QuotaPolicyModel:
        """Change the anonymous quota, the reset hour or tier ceilings."""
        tiers = {tier: limits.model_dump(exclude_none=True) for tier, limits in (data.tiers or {}).items()}
        config = await config_service.update_policy(
            anonymous_limit=data.anonymous_limit,
            reset_hour=data.reset_hour,
            tiers=tiers or None,
        )
        await logger.ainfo("Quota policy updated", fields=sorted(data.model_dump(exclude_none=True)))
        return to_policy_model(usage_limit_service, config)

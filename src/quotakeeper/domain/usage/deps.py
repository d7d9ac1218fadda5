"""Dependency providers for usage domain."""

from __future__ import annotations

from quotakeeper.domain.resets.services import QuotaConfigService
from quotakeeper.domain.usage.services import UserUsageService
from quotakeeper.lib.deps import create_service_provider
from quotakeeper.lib.usage_limits import UsageLimitService

__all__ = (
    "provide_quota_config_service",
    "provide_usage_limit_service",
    "provide_user_usage_service",
)

provide_user_usage_service = create_service_provider(
    UserUsageService,
    error_messages={
        "duplicate_key": "A user with this email already exists.",
        "integrity": "Usage operation failed.",
        "not_found": "User not found.",
    },
)

provide_quota_config_service = create_service_provider(
    QuotaConfigService,
    error_messages={"integrity": "Quota config operation failed."},
)


def provide_usage_limit_service() -> UsageLimitService:
    return UsageLimitService()

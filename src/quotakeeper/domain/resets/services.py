"""Repository services for reset bookkeeping records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from advanced_alchemy.repository import SQLAlchemyAsyncRepository
from advanced_alchemy.service import SQLAlchemyAsyncRepositoryService
from sqlalchemy import select

from quotakeeper.db import models as m

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime


class ResetLogService(SQLAlchemyAsyncRepositoryService[m.ResetLog]):
    """Handles database operations for reset log entries."""

    class Repository(SQLAlchemyAsyncRepository[m.ResetLog]):
        """ResetLog SQLAlchemy Repository."""

        model_type = m.ResetLog

    repository_type = Repository

    async def record(
        self,
        *,
        partition: m.ResetLogPartition,
        reset_kind: m.ResetKind,
        status: m.ResetStatus,
        timestamp: datetime,
        users_reset: int,
        anonymous_limit_reset: int | None = None,
        error: str | None = None,
    ) -> m.ResetLog:
        """Append one entry to the reset log and commit it."""
        return await self.create(
            {
                "partition": partition,
                "reset_kind": reset_kind,
                "status": status,
                "timestamp": timestamp,
                "users_reset": users_reset,
                "anonymous_limit_reset": anonymous_limit_reset,
                "error": error,
                "reset_type": f"{reset_kind.value}_reset",
            },
            auto_commit=True,
        )

    async def recent(self, partition: m.ResetLogPartition, limit: int = 20) -> list[m.ResetLog]:
        """Newest entries of a partition first."""
        statement = (
            select(m.ResetLog)
            .where(m.ResetLog.partition == partition)
            .order_by(m.ResetLog.timestamp.desc())
            .limit(limit)
        )
        return list(await self.list(statement=statement))

    async def latest(self, partition: m.ResetLogPartition) -> m.ResetLog | None:
        entries = await self.recent(partition, limit=1)
        return entries[0] if entries else None

    async def has_entry_since(self, partition: m.ResetLogPartition, cutoff: datetime) -> bool:
        return await self.exists(
            m.ResetLog.partition == partition,
            m.ResetLog.timestamp >= cutoff,
        )


class QuotaConfigService(SQLAlchemyAsyncRepositoryService[m.QuotaConfig]):
    """Handles database operations for the shared quota config record."""

    class Repository(SQLAlchemyAsyncRepository[m.QuotaConfig]):
        """QuotaConfig SQLAlchemy Repository."""

        model_type = m.QuotaConfig

    repository_type = Repository
    match_fields = ["key"]

    async def get_limits(self) -> m.QuotaConfig | None:
        return await self.get_one_or_none(m.QuotaConfig.key == m.QUOTA_CONFIG_KEY)

    async def update_policy(
        self,
        *,
        anonymous_limit: int | None = None,
        reset_hour: int | None = None,
        tiers: Mapping[str, Mapping[str, int]] | None = None,
    ) -> m.QuotaConfig:
        """Merge new policy values into the config record, creating it when missing.

        Tier ceilings are merged per period, so a partial update keeps the
        periods it does not name.
        """
        config = await self.get_limits()
        data: dict[str, Any] = {}
        if anonymous_limit is not None:
            data["anonymous_limit"] = anonymous_limit
        if reset_hour is not None:
            data["reset_hour"] = reset_hour
        if tiers:
            merged = {tier: dict(values) for tier, values in ((config.tiers if config else None) or {}).items()}
            for tier, values in tiers.items():
                merged.setdefault(tier, {}).update(values)
            data["tiers"] = merged
        if config is None:
            return await self.create({"key": m.QUOTA_CONFIG_KEY, **data}, auto_commit=True)
        return await self.update(item_id=config.id, data=data, auto_commit=True)

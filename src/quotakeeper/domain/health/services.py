"""Repository services for health monitoring records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from advanced_alchemy.repository import SQLAlchemyAsyncRepository
from advanced_alchemy.service import SQLAlchemyAsyncRepositoryService

from quotakeeper.db import models as m

if TYPE_CHECKING:
    from datetime import datetime


class HealthAlertService(SQLAlchemyAsyncRepositoryService[m.HealthAlert]):
    """Handles database operations for health alerts."""

    class Repository(SQLAlchemyAsyncRepository[m.HealthAlert]):
        """HealthAlert SQLAlchemy Repository."""

        model_type = m.HealthAlert

    repository_type = Repository

    async def raise_alert(
        self,
        *,
        category: m.HealthAlertCategory,
        alert_type: str,
        timestamp: datetime,
        message: str | None = None,
        error: str | None = None,
    ) -> m.HealthAlert:
        return await self.create(
            {
                "category": category,
                "alert_type": alert_type,
                "timestamp": timestamp,
                "message": message,
                "error": error,
            },
            auto_commit=True,
        )


class HealthStatusService(SQLAlchemyAsyncRepositoryService[m.HealthStatus]):
    """Handles database operations for the health status summary."""

    class Repository(SQLAlchemyAsyncRepository[m.HealthStatus]):
        """HealthStatus SQLAlchemy Repository."""

        model_type = m.HealthStatus

    repository_type = Repository
    match_fields = ["key"]

    async def get_current(self) -> m.HealthStatus | None:
        return await self.get_one_or_none(m.HealthStatus.key == m.HEALTH_STATUS_KEY)

    async def publish(self, data: dict[str, Any]) -> m.HealthStatus:
        """Replace the singleton status record with ``data``."""
        current = await self.get_current()
        if current is None:
            return await self.create({"key": m.HEALTH_STATUS_KEY, **data}, auto_commit=True)
        return await self.update(item_id=current.id, data=data, auto_commit=True)

"""System Controllers."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from litestar import Controller, MediaType, Response, get
from sqlalchemy import text

from quotakeeper.db import models as m
from quotakeeper.domain.health.services import HealthStatusService
from quotakeeper.domain.resets.services import ResetLogService
from quotakeeper.domain.system.schemas import LastResets, ResetHealthSummary, SystemHealth
from quotakeeper.lib.schedule import RESET_SCHEDULES

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

SYSTEM_HEALTH = "/health"


class SystemController(Controller):
    tags = ["System"]

    @get(operation_id="SystemHealth", path=SYSTEM_HEALTH, exclude_from_auth=True)
    async def check_system_health(self, db_session: AsyncSession) -> Response[SystemHealth]:
        """Check database connectivity and report the reset schedule and last runs."""
        try:
            await db_session.execute(text("select 1"))
        except Exception as exc:  # noqa: BLE001
            await logger.aerror("Database health check failed", error=str(exc))
            return Response(
                content=SystemHealth(database_status="offline", schedules=RESET_SCHEDULES),
                status_code=500,
                media_type=MediaType.JSON,
            )

        reset_logs = ResetLogService(session=db_session)
        last_resets = {}
        for kind in m.ResetKind:
            entry = await reset_logs.latest(m.ResetLogPartition(kind.value))
            last_resets[kind.value] = entry.timestamp if entry else None

        current = await HealthStatusService(session=db_session).get_current()
        reset_health = (
            ResetHealthSummary(
                status=current.status.value,
                last_health_check=current.last_health_check,
                next_daily_reset=current.next_daily_reset,
                next_weekly_reset=current.next_weekly_reset,
                next_monthly_reset=current.next_monthly_reset,
            )
            if current is not None
            else None
        )
        return Response(
            content=SystemHealth(
                database_status="online",
                schedules=RESET_SCHEDULES,
                last_resets=LastResets(**last_resets),
                reset_health=reset_health,
            ),
            status_code=200,
            media_type=MediaType.JSON,
        )

"""Detection of missed daily resets."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, Final

import structlog

from quotakeeper.config.base import QuotaSettings, get_settings
from quotakeeper.db import models as m
from quotakeeper.domain.health.services import HealthAlertService, HealthStatusService
from quotakeeper.domain.resets.services import ResetLogService
from quotakeeper.lib.schedule import next_daily_reset, next_monthly_reset, next_weekly_reset

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

__all__ = (
    "HEALTH_CHECK_FAILURE",
    "MISSING_DAILY_RESET",
    "HealthReport",
    "ResetHealthMonitor",
)

logger = structlog.get_logger()

MISSING_DAILY_RESET: Final = "missing_daily_reset"
HEALTH_CHECK_FAILURE: Final = "health_check_failure"


@dataclass(frozen=True, slots=True)
class HealthReport:
    status: m.HealthState
    checked_at: datetime
    next_daily: datetime
    next_weekly: datetime
    next_monthly: datetime
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "checkedAt": self.checked_at.isoformat(),
            "nextDaily": self.next_daily.isoformat(),
            "nextWeekly": self.next_weekly.isoformat(),
            "nextMonthly": self.next_monthly.isoformat(),
            "error": self.error,
        }


class ResetHealthMonitor:
    """Checks that a daily reset was logged within the trailing window."""

    def __init__(self, session: AsyncSession, settings: QuotaSettings | None = None) -> None:
        self.session = session
        self.settings = settings or get_settings().quota
        self.reset_logs = ResetLogService(session=session)
        self.alerts = HealthAlertService(session=session)
        self.status = HealthStatusService(session=session)

    @property
    def window(self) -> timedelta:
        return timedelta(hours=self.settings.HEALTH_WINDOW_HOURS + self.settings.HEALTH_BUFFER_HOURS)

    async def check_health(self, now: datetime | None = None) -> HealthReport:
        """Inspect the daily reset log, raise an alert on a gap and publish the status summary.

        Store errors are converted into a ``health_check_failure`` alert.
        """
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        projections = {
            "next_daily_reset": next_daily_reset(now),
            "next_weekly_reset": next_weekly_reset(now),
            "next_monthly_reset": next_monthly_reset(now),
        }
        try:
            cutoff = now - self.window
            healthy = await self.reset_logs.has_entry_since(m.ResetLogPartition.DAILY, cutoff)
            if healthy:
                status = m.HealthState.HEALTHY
                await logger.ainfo("Reset system is functioning normally")
            else:
                status = m.HealthState.WARNING
                await logger.awarning("No daily reset logged within window", window_hours=self.window / timedelta(hours=1))
                await self.alerts.raise_alert(
                    category=m.HealthAlertCategory.WARNINGS,
                    alert_type=MISSING_DAILY_RESET,
                    timestamp=now,
                    message=f"No daily reset logged since {cutoff.isoformat()}; daily reset job may not be running",
                )
            await self.status.publish({"last_health_check": now, "status": status, **projections})
        except Exception as exc:  # noqa: BLE001
            await self.session.rollback()
            error = str(exc) or type(exc).__name__
            await logger.aerror("Reset health check failed", error=error, error_type=type(exc).__name__)
            await self._record_failure(error, now)
            return self._report(m.HealthState.ERROR, now, projections, error=error)
        return self._report(status, now, projections)

    async def _record_failure(self, error: str, now: datetime) -> None:
        try:
            await self.alerts.raise_alert(
                category=m.HealthAlertCategory.ERRORS,
                alert_type=HEALTH_CHECK_FAILURE,
                timestamp=now,
                error=error,
            )
        except Exception as exc:  # noqa: BLE001
            await self.session.rollback()
            await logger.aexception("Could not record health check failure", error=str(exc))

    @staticmethod
    def _report(
        status: m.HealthState,
        now: datetime,
        projections: dict[str, datetime],
        error: str | None = None,
    ) -> HealthReport:
        return HealthReport(
            status=status,
            checked_at=now,
            next_daily=projections["next_daily_reset"],
            next_weekly=projections["next_weekly_reset"],
            next_monthly=projections["next_monthly_reset"],
            error=error,
        )

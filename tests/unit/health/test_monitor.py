from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import select

from quotakeeper.config.base import QuotaSettings
from quotakeeper.db import models as m
from quotakeeper.domain.health.monitor import HEALTH_CHECK_FAILURE, MISSING_DAILY_RESET, ResetHealthMonitor
from quotakeeper.domain.resets.services import ResetLogService

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

pytestmark = pytest.mark.anyio

# Wednesday
NOW = datetime(2024, 3, 13, 12, 0, tzinfo=timezone.utc)


async def _log_daily_reset(session: AsyncSession, timestamp: datetime) -> None:
    await ResetLogService(session=session).record(
        partition=m.ResetLogPartition.DAILY,
        reset_kind=m.ResetKind.DAILY,
        status=m.ResetStatus.COMPLETED,
        timestamp=timestamp,
        users_reset=12,
        anonymous_limit_reset=10,
    )


async def _alerts(session: AsyncSession) -> list[m.HealthAlert]:
    return list((await session.execute(select(m.HealthAlert))).scalars().all())


async def test_recent_daily_reset_is_healthy(session: AsyncSession) -> None:
    await _log_daily_reset(session, NOW - timedelta(hours=10))

    report = await ResetHealthMonitor(session).check_health(NOW)

    assert report.status is m.HealthState.HEALTHY
    assert report.error is None
    assert await _alerts(session) == []
    status = (await session.execute(select(m.HealthStatus))).scalar_one()
    assert status.key == m.HEALTH_STATUS_KEY
    assert status.status is m.HealthState.HEALTHY
    assert status.last_health_check == NOW


async def test_missing_daily_reset_raises_one_warning(session: AsyncSession) -> None:
    await _log_daily_reset(session, NOW - timedelta(hours=26))

    report = await ResetHealthMonitor(session).check_health(NOW)

    assert report.status is m.HealthState.WARNING
    alerts = await _alerts(session)
    assert len(alerts) == 1
    assert alerts[0].category is m.HealthAlertCategory.WARNINGS
    assert alerts[0].alert_type == MISSING_DAILY_RESET
    assert alerts[0].timestamp == NOW
    assert alerts[0].message


async def test_empty_log_is_a_warning(session: AsyncSession) -> None:
    report = await ResetHealthMonitor(session).check_health(NOW)

    assert report.status is m.HealthState.WARNING
    assert [alert.alert_type for alert in await _alerts(session)] == [MISSING_DAILY_RESET]


async def test_window_includes_buffer_hour(session: AsyncSession) -> None:
    await _log_daily_reset(session, NOW - timedelta(hours=24, minutes=30))

    report = await ResetHealthMonitor(session).check_health(NOW)

    assert report.status is m.HealthState.HEALTHY


async def test_window_follows_settings(session: AsyncSession) -> None:
    await _log_daily_reset(session, NOW - timedelta(hours=10))
    settings = QuotaSettings(HEALTH_WINDOW_HOURS=6, HEALTH_BUFFER_HOURS=0)

    report = await ResetHealthMonitor(session, settings).check_health(NOW)

    assert report.status is m.HealthState.WARNING


async def test_other_partitions_do_not_count(session: AsyncSession) -> None:
    await ResetLogService(session=session).record(
        partition=m.ResetLogPartition.WEEKLY,
        reset_kind=m.ResetKind.WEEKLY,
        status=m.ResetStatus.COMPLETED,
        timestamp=NOW - timedelta(hours=1),
        users_reset=3,
    )

    report = await ResetHealthMonitor(session).check_health(NOW)

    assert report.status is m.HealthState.WARNING


async def test_status_record_is_replaced_on_each_check(session: AsyncSession) -> None:
    monitor = ResetHealthMonitor(session)
    await monitor.check_health(NOW)
    await _log_daily_reset(session, NOW + timedelta(hours=1))
    await monitor.check_health(NOW + timedelta(hours=6))

    statuses = (await session.execute(select(m.HealthStatus))).scalars().all()
    assert len(statuses) == 1
    await session.refresh(statuses[0])
    assert statuses[0].status is m.HealthState.HEALTHY
    assert statuses[0].last_health_check == NOW + timedelta(hours=6)


async def test_projections_are_reported(session: AsyncSession) -> None:
    await _log_daily_reset(session, NOW - timedelta(hours=1))

    report = await ResetHealthMonitor(session).check_health(NOW)

    assert report.next_daily == datetime(2024, 3, 14, tzinfo=timezone.utc)
    assert report.next_weekly == datetime(2024, 3, 18, tzinfo=timezone.utc)
    assert report.next_monthly == datetime(2024, 4, 1, tzinfo=timezone.utc)
    status = (await session.execute(select(m.HealthStatus))).scalar_one()
    assert status.next_weekly_reset == report.next_weekly
    assert report.to_dict()["nextMonthly"] == "2024-04-01T00:00:00+00:00"


async def test_store_failure_is_recorded_as_error_alert(
    session: AsyncSession,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    async def broken_lookup(self: ResetLogService, *args: object) -> bool:
        msg = "log partition unreadable"
        raise RuntimeError(msg)

    monkeypatch.setattr(ResetLogService, "has_entry_since", broken_lookup)

    report = await ResetHealthMonitor(session).check_health(NOW)

    assert report.status is m.HealthState.ERROR
    assert report.error == "log partition unreadable"
    alerts = await _alerts(session)
    assert len(alerts) == 1
    assert alerts[0].category is m.HealthAlertCategory.ERRORS
    assert alerts[0].alert_type == HEALTH_CHECK_FAILURE
    assert alerts[0].error == "log partition unreadable"
    assert (await session.execute(select(m.HealthStatus))).scalar_one_or_none() is None

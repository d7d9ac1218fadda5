from __future__ import annotations

from datetime import datetime, timezone

import pytest

from quotakeeper.db import models as m
from quotakeeper.lib.schedule import (
    RESET_SCHEDULES,
    next_daily_reset,
    next_monthly_reset,
    next_reset,
    next_weekly_reset,
)


def _utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def test_next_daily_reset_is_following_midnight() -> None:
    assert next_daily_reset(_utc(2024, 3, 12, 15, 30)) == _utc(2024, 3, 13)
    assert next_daily_reset(_utc(2024, 3, 12)) == _utc(2024, 3, 13)
    assert next_daily_reset(_utc(2024, 12, 31, 23, 59)) == _utc(2025, 1, 1)


@pytest.mark.parametrize(
    ("now", "expected"),
    [
        (_utc(2024, 3, 12, 9), _utc(2024, 3, 18)),  # Tuesday
        (_utc(2024, 3, 17, 23, 59), _utc(2024, 3, 18)),  # Sunday
        (_utc(2024, 3, 18, 0, 0), _utc(2024, 3, 25)),  # Monday rolls to next week
        (_utc(2024, 3, 18, 12), _utc(2024, 3, 25)),
    ],
)
def test_next_weekly_reset_is_next_monday(now: datetime, expected: datetime) -> None:
    assert next_weekly_reset(now) == expected
    assert next_weekly_reset(now).weekday() == 0


def test_next_monthly_reset_rolls_over_year() -> None:
    assert next_monthly_reset(_utc(2024, 1, 31, 22)) == _utc(2024, 2, 1)
    assert next_monthly_reset(_utc(2024, 2, 1, 0)) == _utc(2024, 3, 1)
    assert next_monthly_reset(_utc(2024, 12, 15)) == _utc(2025, 1, 1)


def test_naive_times_are_treated_as_utc() -> None:
    assert next_daily_reset(datetime(2024, 3, 12, 15)) == _utc(2024, 3, 13)


def test_next_reset_accepts_kind_or_name() -> None:
    now = _utc(2024, 3, 12, 9)
    assert next_reset(m.ResetKind.WEEKLY, now) == _utc(2024, 3, 18)
    assert next_reset("monthly", now) == _utc(2024, 4, 1)


def test_schedules_run_at_midnight_utc() -> None:
    assert RESET_SCHEDULES["daily"] == "0 0 * * *"
    assert RESET_SCHEDULES["weekly"] == "0 0 * * 1"
    assert RESET_SCHEDULES["monthly"] == "0 0 1 * *"
    assert RESET_SCHEDULES["health_check"] == "0 */6 * * *"

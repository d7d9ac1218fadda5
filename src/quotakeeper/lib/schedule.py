"""UTC period boundaries of the usage reset schedule."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Final

__all__ = (
    "RESET_SCHEDULES",
    "next_daily_reset",
    "next_monthly_reset",
    "next_reset",
    "next_weekly_reset",
)

RESET_SCHEDULES: Final[dict[str, str]] = {
    "daily": "0 0 * * *",
    "weekly": "0 0 * * 1",
    "monthly": "0 0 1 * *",
    "health_check": "0 */6 * * *",
}
"""Cron expressions the deployment registers with the job runtime (UTC)."""


def _as_utc(now: datetime) -> datetime:
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def _midnight(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def next_daily_reset(now: datetime) -> datetime:
    """Next UTC midnight after ``now``."""
    return _midnight(_as_utc(now)) + timedelta(days=1)


def next_weekly_reset(now: datetime) -> datetime:
    """Next UTC Monday midnight, never today even when today is Monday."""
    current = _as_utc(now)
    days_until_monday = (7 - current.weekday()) % 7 or 7
    return _midnight(current) + timedelta(days=days_until_monday)


def next_monthly_reset(now: datetime) -> datetime:
    """Midnight UTC on the first day of the next month."""
    current = _as_utc(now)
    if current.month == 12:
        return datetime(current.year + 1, 1, 1, tzinfo=timezone.utc)
    return datetime(current.year, current.month + 1, 1, tzinfo=timezone.utc)


def next_reset(kind: str, now: datetime) -> datetime:
    calculators = {
        "daily": next_daily_reset,
        "weekly": next_weekly_reset,
        "monthly": next_monthly_reset,
    }
    return calculators[getattr(kind, "value", kind)](now)

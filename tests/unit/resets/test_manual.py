from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import pytest
from sqlalchemy import select

from quotakeeper.db import models as m
from quotakeeper.domain.accounts.guards import OperatorClaims
from quotakeeper.domain.resets.executor import UsageResetService
from quotakeeper.domain.resets.manual import ManualResetService, parse_reset_request
from quotakeeper.lib.exceptions import AuthorizationError, InvalidResetKindError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

pytestmark = pytest.mark.anyio

NOW = datetime(2024, 4, 1, 0, 0, tzinfo=timezone.utc)
ADMIN = OperatorClaims(subject="ops@example.com", is_admin=True)


class UnusedSessionFactory:
    """Session factory that must never be opened."""

    def __init__(self) -> None:
        self.calls = 0

    def __call__(self) -> Any:
        self.calls += 1
        msg = "session opened"
        raise AssertionError(msg)


@pytest.mark.parametrize("claims", [None, OperatorClaims(subject="someone@example.com")])
async def test_non_admin_callers_are_rejected_before_any_write(claims: OperatorClaims | None) -> None:
    factory = UnusedSessionFactory()
    service = ManualResetService(session_factory=factory)

    with pytest.raises(AuthorizationError) as exc_info:
        await service.manual_reset("daily", claims, NOW)

    assert exc_info.value.detail == "Unauthorized: admin access required"
    assert factory.calls == 0


async def test_unknown_reset_type_is_rejected() -> None:
    factory = UnusedSessionFactory()
    service = ManualResetService(session_factory=factory)

    with pytest.raises(InvalidResetKindError) as exc_info:
        await service.manual_reset("hourly", ADMIN, NOW)

    assert exc_info.value.reset_type == "hourly"
    assert factory.calls == 0


def test_parse_reset_request() -> None:
    assert parse_reset_request("all") == [m.ResetKind.DAILY, m.ResetKind.WEEKLY, m.ResetKind.MONTHLY]
    assert parse_reset_request("weekly") == [m.ResetKind.WEEKLY]
    with pytest.raises(InvalidResetKindError):
        parse_reset_request("")


async def test_single_kind_runs_one_reset(
    session: AsyncSession,
    session_factory: async_sessionmaker[AsyncSession],
    seed_users,
) -> None:
    await seed_users(3, usage_count=9, daily_usage=9)
    service = ManualResetService(session_factory=session_factory)

    result = await service.manual_reset("daily", ADMIN, NOW)

    assert result.success
    assert result.message == "daily reset completed"
    assert [outcome.reset_kind for outcome in result.outcomes] == [m.ResetKind.DAILY]
    assert result.outcomes[0].users_reset == 3
    assert result.to_dict()["resetType"] == "daily"
    assert result.to_dict()["results"][0]["usersReset"] == 3


async def test_all_reports_partial_failure_without_undoing_siblings(
    session: AsyncSession,
    session_factory: async_sessionmaker[AsyncSession],
    seed_users,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    await seed_users(2, usage_count=9, daily_usage=9, weekly_usage=9, monthly_usage=9)
    build_mutation = UsageResetService._build_user_mutation

    def failing_weekly(self: UsageResetService, kind: m.ResetKind, *args: Any) -> Any:
        if kind is m.ResetKind.WEEKLY:
            msg = "weekly store failure"
            raise RuntimeError(msg)
        return build_mutation(self, kind, *args)

    monkeypatch.setattr(UsageResetService, "_build_user_mutation", failing_weekly)
    service = ManualResetService(session_factory=session_factory)

    result = await service.manual_reset("all", ADMIN, NOW)

    assert not result.success
    assert result.message == "all reset failed for: weekly"
    statuses = {outcome.reset_kind: outcome.status for outcome in result.outcomes}
    assert statuses == {
        m.ResetKind.DAILY: m.ResetStatus.COMPLETED,
        m.ResetKind.WEEKLY: m.ResetStatus.FAILED,
        m.ResetKind.MONTHLY: m.ResetStatus.COMPLETED,
    }

    counters = (
        await session.execute(select(m.User.daily_usage, m.User.weekly_usage, m.User.monthly_usage))
    ).all()
    assert [tuple(row) for row in counters] == [(0, 9, 0)] * 2

    logs = (await session.execute(select(m.ResetLog.partition, m.ResetLog.status))).all()
    assert sorted((partition.value, status.value) for partition, status in logs) == [
        ("daily", "completed"),
        ("errors", "failed"),
        ("monthly", "completed"),
    ]

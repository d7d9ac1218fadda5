"""Scheduled reset of per-period usage counters."""

from __future__ import annotations

from contextlib import aclosing
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, AsyncIterator, Final, Sequence

import structlog
from sqlalchemy import select, update

from quotakeeper.config.base import QuotaSettings, get_settings
from quotakeeper.db import models as m
from quotakeeper.domain.resets.config_updater import ensure_config_snapshot, stage_config_reset
from quotakeeper.domain.resets.eligibility import filter_eligible
from quotakeeper.domain.resets.services import ResetLogService
from quotakeeper.lib.batch import WriteBatch

if TYPE_CHECKING:
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.sql import Executable

__all__ = (
    "RESET_FIELDS",
    "ResetOutcome",
    "UsageResetService",
)

logger = structlog.get_logger()

RESET_FIELDS: Final[dict[m.ResetKind, tuple[str, str]]] = {
    m.ResetKind.DAILY: ("daily_usage", "last_daily_reset"),
    m.ResetKind.WEEKLY: ("weekly_usage", "last_weekly_reset"),
    m.ResetKind.MONTHLY: ("monthly_usage", "last_monthly_reset"),
}
"""Counter and timestamp columns owned by each reset kind."""


@dataclass(slots=True)
class ResetOutcome:
    """Result of one reset run."""

    reset_kind: m.ResetKind
    users_reset: int
    status: m.ResetStatus
    batch_sizes: list[int] = field(default_factory=list)
    """User documents written by each committed batch, in commit order."""
    anonymous_limit_reset: int | None = None
    error: str | None = None

    @property
    def completed(self) -> bool:
        return self.status is m.ResetStatus.COMPLETED

    def to_dict(self) -> dict[str, Any]:
        return {
            "resetKind": self.reset_kind.value,
            "usersReset": self.users_reset,
            "status": self.status.value,
            "batches": len(self.batch_sizes),
            "anonymousLimitReset": self.anonymous_limit_reset,
            "error": self.error,
        }


class UsageResetService:
    """Zeroes one usage period for every tracked account.

    Accounts are scanned lazily in keyset pages and mutations are committed in
    batches no larger than the configured operation ceiling. Batches commit
    sequentially and independently: when batch N fails, batches 1..N-1 stay
    committed and the failure is written to the ``errors`` log partition.

    Period counters are written as a blind ``0``; an increment landing between
    the page read and the batch commit is lost. The window is one batch wide.
    """

    def __init__(
        self,
        session: AsyncSession,
        settings: QuotaSettings | None = None,
        *,
        batch_limit: int | None = None,
    ) -> None:
        self.session = session
        self.settings = settings or get_settings().quota
        self.batch_limit = batch_limit or self.settings.BATCH_OPERATION_LIMIT
        self.reset_logs = ResetLogService(session=session)

    async def run_reset(self, kind: m.ResetKind | str, now: datetime | None = None) -> ResetOutcome:
        """Reset the counters of ``kind`` and record the attempt in the reset log.

        Errors are recorded, never raised.
        """
        reset_kind = m.ResetKind(kind)
        now = _utc(now)
        outcome = ResetOutcome(reset_kind=reset_kind, users_reset=0, status=m.ResetStatus.COMPLETED)
        log = logger.bind(reset_kind=reset_kind.value)
        await log.ainfo("Starting usage reset", batch_limit=self.batch_limit)

        batch = WriteBatch(self.session, self.batch_limit)
        staged_users = 0
        config = None
        try:
            if reset_kind is m.ResetKind.DAILY:
                config = await ensure_config_snapshot(
                    self.session,
                    anonymous_limit=self.settings.ANONYMOUS_LIMIT,
                    default_reset_hour=self.settings.RESET_HOUR,
                )
                await log.ainfo("Daily reset configuration loaded", reset_hour=config.reset_hour)

            async with aclosing(self._iter_user_pages()) as pages:
                async for page in pages:
                    for user in filter_eligible(page):
                        if batch.is_full:
                            await self._commit(batch, staged_users, outcome, log)
                            staged_users = 0
                        batch.stage(self._build_user_mutation(reset_kind, user.id, now))
                        staged_users += 1

            if config is not None:
                if batch.is_full:
                    await self._commit(batch, staged_users, outcome, log)
                    staged_users = 0
                outcome.anonymous_limit_reset = stage_config_reset(
                    batch,
                    config,
                    anonymous_limit=self.settings.ANONYMOUS_LIMIT,
                    now=now,
                )
            await self._commit(batch, staged_users, outcome, log)
        except Exception as exc:  # noqa: BLE001
            batch.discard()
            await self.session.rollback()
            outcome.status = m.ResetStatus.FAILED
            outcome.error = str(exc) or type(exc).__name__
            await log.aerror(
                "Usage reset failed",
                users_reset=outcome.users_reset,
                error=outcome.error,
                error_type=type(exc).__name__,
            )
            await self._record_failure(outcome, now, log)
            return outcome

        await self.reset_logs.record(
            partition=m.ResetLogPartition(reset_kind.value),
            reset_kind=reset_kind,
            status=m.ResetStatus.COMPLETED,
            timestamp=now,
            users_reset=outcome.users_reset,
            anonymous_limit_reset=outcome.anonymous_limit_reset,
        )
        await log.ainfo(
            "Usage reset completed",
            users_reset=outcome.users_reset,
            batches=len(outcome.batch_sizes),
            anonymous_limit_reset=outcome.anonymous_limit_reset,
        )
        return outcome

    async def _iter_user_pages(self) -> AsyncIterator[Sequence[Any]]:
        """Yield ``(id, usage_count)`` rows of every account, one keyset page at a time."""
        last_id: UUID | None = None
        while True:
            statement = select(m.User.id, m.User.usage_count).order_by(m.User.id).limit(self.batch_limit)
            if last_id is not None:
                statement = statement.where(m.User.id > last_id)
            rows = (await self.session.execute(statement)).all()
            if not rows:
                return
            yield rows
            if len(rows) < self.batch_limit:
                return
            last_id = rows[-1].id

    def _build_user_mutation(self, kind: m.ResetKind, user_id: UUID, now: datetime) -> Executable:
        counter, stamp = RESET_FIELDS[kind]
        return (
            update(m.User)
            .where(m.User.id == user_id)
            .values({counter: 0, stamp: now})
            .execution_options(synchronize_session=False)
        )

    async def _commit(
        self,
        batch: WriteBatch,
        staged_users: int,
        outcome: ResetOutcome,
        log: Any,
    ) -> None:
        if not len(batch):
            return
        operations = await batch.commit()
        outcome.users_reset += staged_users
        if staged_users:
            outcome.batch_sizes.append(staged_users)
        await log.adebug("Reset batch committed", batch=batch.commits, operations=operations)

    async def _record_failure(self, outcome: ResetOutcome, now: datetime, log: Any) -> None:
        try:
            await self.reset_logs.record(
                partition=m.ResetLogPartition.ERRORS,
                reset_kind=outcome.reset_kind,
                status=m.ResetStatus.FAILED,
                timestamp=now,
                users_reset=outcome.users_reset,
                error=outcome.error,
            )
        except Exception as exc:  # noqa: BLE001
            await self.session.rollback()
            await log.aexception("Could not record usage reset failure", error=str(exc))


def _utc(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now

"""Operator-triggered resets outside of the schedule."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable, Final

import structlog

from quotakeeper.config.base import QuotaSettings, get_settings
from quotakeeper.db import models as m
from quotakeeper.domain.resets.executor import ResetOutcome, UsageResetService
from quotakeeper.lib.exceptions import AuthorizationError, InvalidResetKindError

if TYPE_CHECKING:
    from contextlib import AbstractAsyncContextManager

    from sqlalchemy.ext.asyncio import AsyncSession

    from quotakeeper.domain.accounts.guards import OperatorClaims

__all__ = (
    "ALL_KINDS",
    "ManualResetResult",
    "ManualResetService",
    "parse_reset_request",
)

logger = structlog.get_logger()

ALL_KINDS: Final = "all"


@dataclass(slots=True)
class ManualResetResult:
    success: bool
    message: str
    reset_type: str
    outcomes: list[ResetOutcome] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "resetType": self.reset_type,
            "results": [outcome.to_dict() for outcome in self.outcomes],
        }


def parse_reset_request(reset_type: str) -> list[m.ResetKind]:
    """Translate a requested reset type into the kinds to run.

    Raises:
        InvalidResetKindError: when ``reset_type`` is not daily, weekly, monthly or all.
    """
    if reset_type == ALL_KINDS:
        return list(m.ResetKind)
    try:
        return [m.ResetKind(reset_type)]
    except ValueError as exc:
        raise InvalidResetKindError(str(reset_type)) from exc


class ManualResetService:
    """Runs resets on behalf of an administrator.

    Each kind runs on its own database session, so ``all`` can run the three
    kinds concurrently. Kinds that completed are never undone when a sibling
    fails; their reset log entries stay the record of what happened.
    """

    def __init__(
        self,
        session_factory: Callable[[], AbstractAsyncContextManager[AsyncSession]],
        settings: QuotaSettings | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.settings = settings or get_settings().quota

    async def manual_reset(
        self,
        reset_type: str,
        claims: OperatorClaims | None,
        now: datetime | None = None,
    ) -> ManualResetResult:
        """Run one kind (or ``all``) of reset after checking the caller's admin claim.

        Raises:
            AuthorizationError: the caller does not carry the admin capability.
            InvalidResetKindError: ``reset_type`` is not supported.
        """
        if claims is None or not claims.is_admin:
            await logger.awarning(
                "Rejected manual usage reset",
                reset_type=reset_type,
                subject=getattr(claims, "subject", None),
            )
            raise AuthorizationError
        kinds = parse_reset_request(reset_type)
        now = now or datetime.now(timezone.utc)

        await logger.ainfo("Manual usage reset requested", reset_type=reset_type, subject=claims.subject)
        outcomes = list(await asyncio.gather(*(self._run(kind, now) for kind in kinds)))
        failed = [outcome.reset_kind.value for outcome in outcomes if not outcome.completed]
        if failed:
            message = f"{reset_type} reset failed for: {', '.join(failed)}"
            await logger.aerror("Manual usage reset failed", reset_type=reset_type, failed=failed)
        else:
            message = f"{reset_type} reset completed"
            await logger.ainfo(
                "Manual usage reset completed",
                reset_type=reset_type,
                users_reset={outcome.reset_kind.value: outcome.users_reset for outcome in outcomes},
            )
        return ManualResetResult(success=not failed, message=message, reset_type=reset_type, outcomes=outcomes)

    async def _run(self, kind: m.ResetKind, now: datetime) -> ResetOutcome:
        try:
            async with self.session_factory() as session:
                return await UsageResetService(session, self.settings).run_reset(kind, now)
        except Exception as exc:  # noqa: BLE001
            # session could not be opened, nothing was written
            await logger.aexception("Could not start usage reset", reset_kind=kind.value)
            return ResetOutcome(
                reset_kind=kind,
                users_reset=0,
                status=m.ResetStatus.FAILED,
                error=str(exc) or type(exc).__name__,
            )

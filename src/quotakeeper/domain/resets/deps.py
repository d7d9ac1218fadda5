"""Dependency providers for resets domain."""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

from quotakeeper.domain.resets.manual import ManualResetService
from quotakeeper.domain.resets.services import ResetLogService
from quotakeeper.lib.deps import create_service_provider

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

__all__ = (
    "provide_manual_reset_service",
    "provide_reset_log_service",
)

provide_reset_log_service = create_service_provider(ResetLogService)


@lru_cache(maxsize=1)
def _session_maker() -> async_sessionmaker[AsyncSession]:
    from quotakeeper.config.app import alchemy

    return alchemy.create_session_maker()


def provide_manual_reset_service() -> ManualResetService:
    """Manual resets open their own sessions, one per reset kind."""
    return ManualResetService(session_factory=_session_maker())

"""Daily mutation of the shared quota config record."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime  # noqa: TC003
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

import structlog
from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError

from quotakeeper.db import models as m

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from quotakeeper.lib.batch import WriteBatch

__all__ = (
    "ConfigSnapshot",
    "ensure_config_snapshot",
    "load_config_snapshot",
    "stage_config_reset",
)

logger = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class ConfigSnapshot:
    """Values of the config record read at the start of a reset run."""

    id: UUID | None
    reset_hour: int
    anonymous_limit: int | None

    @property
    def exists(self) -> bool:
        return self.id is not None


async def load_config_snapshot(session: AsyncSession, *, default_reset_hour: int = 0) -> ConfigSnapshot:
    result = await session.execute(
        select(m.QuotaConfig.id, m.QuotaConfig.reset_hour, m.QuotaConfig.anonymous_limit).where(
            m.QuotaConfig.key == m.QUOTA_CONFIG_KEY,
        ),
    )
    row = result.one_or_none()
    if row is None:
        return ConfigSnapshot(id=None, reset_hour=default_reset_hour, anonymous_limit=None)
    return ConfigSnapshot(id=row.id, reset_hour=row.reset_hour, anonymous_limit=row.anonymous_limit)


async def ensure_config_snapshot(
    session: AsyncSession,
    *,
    anonymous_limit: int,
    default_reset_hour: int = 0,
) -> ConfigSnapshot:
    """Read the config record, creating it first when it does not exist.

    The row is inserted in its own transaction. A concurrent run that created
    the row first makes the insert fail on the unique ``key``; the row written
    by that run is read back instead.
    """
    snapshot = await load_config_snapshot(session, default_reset_hour=default_reset_hour)
    if snapshot.exists:
        return snapshot
    try:
        await session.execute(
            insert(m.QuotaConfig).values(
                id=uuid4(),
                key=m.QUOTA_CONFIG_KEY,
                reset_hour=default_reset_hour,
                anonymous_limit=anonymous_limit,
            ),
        )
        await session.commit()
        await logger.ainfo("Created quota config record", key=m.QUOTA_CONFIG_KEY)
    except IntegrityError:
        await session.rollback()
        await logger.adebug("Quota config record created concurrently", key=m.QUOTA_CONFIG_KEY)
    return await load_config_snapshot(session, default_reset_hour=default_reset_hour)


def stage_config_reset(
    batch: WriteBatch,
    snapshot: ConfigSnapshot,
    *,
    anonymous_limit: int,
    now: datetime,
) -> int:
    """Stage the daily config update: restore the anonymous quota and stamp ``last_reset``.

    The row is matched on its unique ``key``; ``snapshot`` must come from
    :func:`ensure_config_snapshot`.

    Returns:
        The anonymous limit that was staged.
    """
    if not snapshot.exists:
        msg = "Quota config record must exist before the daily reset is staged"
        raise ValueError(msg)
    batch.stage(
        update(m.QuotaConfig)
        .where(m.QuotaConfig.key == m.QUOTA_CONFIG_KEY)
        .values(
            anonymous_limit=anonymous_limit,
            last_reset=now,
            reset_type=m.ResetKind.DAILY.value,
        ),
    )
    return anonymous_limit

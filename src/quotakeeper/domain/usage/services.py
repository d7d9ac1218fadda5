"""Service for reading and incrementing account usage counters."""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

from advanced_alchemy.exceptions import NotFoundError
from advanced_alchemy.repository import SQLAlchemyAsyncRepository
from advanced_alchemy.service import SQLAlchemyAsyncRepositoryService
from sqlalchemy import case, func, select, update

from quotakeeper.db import models as m

if TYPE_CHECKING:
    from collections.abc import Mapping
    from uuid import UUID

__all__ = (
    "UsageSummary",
    "UserUsageService",
)


class UsageSummary(NamedTuple):
    """Aggregate usage over every account."""

    total_users: int
    total_usage: int
    pro_users: int
    free_users: int
    anonymous_users: int
    average_usage_per_user: int


class UserUsageService(SQLAlchemyAsyncRepositoryService[m.User]):
    """Handles database operations for tracked accounts."""

    class Repository(SQLAlchemyAsyncRepository[m.User]):
        """User SQLAlchemy Repository."""

        model_type = m.User

    repository_type = Repository
    match_fields = ["email"]

    async def increment_usage(self, user_id: UUID, limits: Mapping[str, int] | None = None) -> m.User | None:
        """Count one request against every usage period of an account.

        The increment is a single ``SET x = x + 1`` statement, so concurrent
        requests never overwrite each other. It also provisions the account for
        tracking when ``usage_count`` was still unset.

        Args:
            user_id: UUID of the account
            limits: ceilings keyed by period name (``daily``, ``weekly``, ``monthly``).
                The counter of each period must still be below its ceiling for the
                increment to apply. Negative ceilings are unlimited.

        Raises:
            NotFoundError: no account has this id

        Returns:
            The refreshed account record, or ``None`` when a ceiling was already reached
        """
        statement = (
            update(m.User)
            .where(m.User.id == user_id)
            .values(
                usage_count=func.coalesce(m.User.usage_count, 0) + 1,
                daily_usage=m.User.daily_usage + 1,
                weekly_usage=m.User.weekly_usage + 1,
                monthly_usage=m.User.monthly_usage + 1,
            )
            .execution_options(synchronize_session=False)
        )
        for period, limit in (limits or {}).items():
            if limit >= 0:
                statement = statement.where(getattr(m.User, f"{period}_usage") < limit)
        session = self.repository.session  # type: ignore[attr-defined]
        result = await session.execute(statement)
        if result.rowcount == 0:
            await session.rollback()
            if not await self.exists(m.User.id == user_id):
                msg = f"No user found with id {user_id}"
                raise NotFoundError(detail=msg)
            return None
        await session.commit()
        return await self.reload(user_id)

    async def reload(self, user_id: UUID) -> m.User:
        """Get an account with its counters re-read from the database."""
        user = await self.get(user_id)
        await self.repository.session.refresh(user)  # type: ignore[attr-defined]
        return user

    async def provision(self, user_id: UUID) -> m.User:
        """Start tracking usage for an account that has never been tracked."""
        user = await self.get(user_id)
        if user.usage_count is not None:
            return user
        return await self.update(item_id=user_id, data={"usage_count": 0}, auto_commit=True)

    async def usage_summary(self) -> UsageSummary:
        """Totals over all accounts. Untracked accounts count as zero usage."""
        statement = select(
            func.count(m.User.id),
            func.coalesce(func.sum(func.coalesce(m.User.usage_count, 0)), 0),
            func.coalesce(func.sum(case((m.User.is_pro.is_(True), 1), else_=0)), 0),
            func.coalesce(func.sum(case((m.User.is_anonymous.is_(True), 1), else_=0)), 0),
        )
        row = (await self.repository.session.execute(statement)).one()  # type: ignore[attr-defined]
        total_users, total_usage, pro_users, anonymous_users = (int(value) for value in row)
        return UsageSummary(
            total_users=total_users,
            total_usage=total_usage,
            pro_users=pro_users,
            free_users=total_users - pro_users,
            anonymous_users=anonymous_users,
            # half rounds up
            average_usage_per_user=(2 * total_usage + total_users) // (2 * total_users) if total_users else 0,
        )

    async def top_users(self, limit: int = 100) -> list[m.User]:
        """Accounts with the highest lifetime usage first."""
        statement = (
            select(m.User)
            .order_by(func.coalesce(m.User.usage_count, 0).desc(), m.User.created_at)
            .limit(limit)
        )
        return list(await self.list(statement=statement))

"""Bounded batched writes.

A :class:`WriteBatch` collects single-document mutations and commits them
together in one transaction. The number of staged mutations can never exceed
the configured operation ceiling; callers are expected to commit a full batch
and keep staging into the (now empty) batch.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from quotakeeper.lib.exceptions import ApplicationError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.sql import Executable

__all__ = (
    "BatchLimitExceededError",
    "WriteBatch",
)


class BatchLimitExceededError(ApplicationError):
    """Raised when a mutation is staged into a batch that is already full."""


class WriteBatch:
    """Stages mutations and commits them atomically on a session."""

    def __init__(self, session: AsyncSession, max_operations: int) -> None:
        if max_operations < 1:
            msg = "max_operations must be a positive integer"
            raise ValueError(msg)
        self.session = session
        self.max_operations = max_operations
        self.commits = 0
        self._operations: list[Executable] = []

    def __len__(self) -> int:
        return len(self._operations)

    @property
    def is_full(self) -> bool:
        return len(self._operations) >= self.max_operations

    def stage(self, statement: Executable) -> None:
        if self.is_full:
            raise BatchLimitExceededError(detail=f"Batch already holds {self.max_operations} operations")
        self._operations.append(statement)

    async def commit(self) -> int:
        """Execute every staged mutation in one transaction.

        Returns:
            Number of operations committed.
        """
        operations, self._operations = self._operations, []
        if not operations:
            return 0
        try:
            for statement in operations:
                await self.session.execute(statement)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        self.commits += 1
        return len(operations)

    def discard(self) -> None:
        self._operations.clear()

"""Selection of accounts that take part in a reset pass."""

from __future__ import annotations

from typing import Any, Iterable, TypeVar

__all__ = (
    "filter_eligible",
    "is_eligible",
)

T = TypeVar("T")


def is_eligible(user: Any) -> bool:
    """Return True when the account is provisioned for usage tracking.

    Accepts ORM instances, result rows or plain mappings; a record is
    eligible as soon as its ``usage_count`` is defined.
    """
    if isinstance(user, dict):
        return user.get("usage_count") is not None
    return getattr(user, "usage_count", None) is not None


def filter_eligible(users: Iterable[T]) -> list[T]:
    """Subset of ``users`` that a reset pass may mutate."""
    return [user for user in users if is_eligible(user)]

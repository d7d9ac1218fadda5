from __future__ import annotations

from types import SimpleNamespace

from quotakeeper.domain.resets.eligibility import filter_eligible, is_eligible


def test_defined_usage_count_is_eligible() -> None:
    assert is_eligible({"usage_count": 0})
    assert is_eligible({"usage_count": 17})
    assert is_eligible(SimpleNamespace(usage_count=0))


def test_missing_or_null_usage_count_is_not_eligible() -> None:
    assert not is_eligible({})
    assert not is_eligible({"usage_count": None})
    assert not is_eligible(SimpleNamespace(email="anon@example.com"))
    assert not is_eligible(SimpleNamespace(usage_count=None))


def test_filter_keeps_order_and_drops_untracked_accounts() -> None:
    users = [
        {"id": 1, "usage_count": 3},
        {"id": 2},
        {"id": 3, "usage_count": None},
        {"id": 4, "usage_count": 0},
    ]

    assert [user["id"] for user in filter_eligible(users)] == [1, 4]
    assert filter_eligible([]) == []

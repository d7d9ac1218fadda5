"""Usage reset domain package."""

from .eligibility import filter_eligible, is_eligible
from .executor import ResetOutcome, UsageResetService
from .manual import ManualResetResult, ManualResetService

__all__ = (
    "ManualResetResult",
    "ManualResetService",
    "ResetOutcome",
    "UsageResetService",
    "filter_eligible",
    "is_eligible",
)

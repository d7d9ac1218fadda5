import enum


class ResetKind(str, enum.Enum):
    """Usage period targeted by a reset run."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class ResetStatus(str, enum.Enum):
    COMPLETED = "completed"
    FAILED = "failed"


class ResetLogPartition(str, enum.Enum):
    """Partitions of the reset log; failed runs of every kind land in `errors`."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    ERRORS = "errors"


class HealthAlertCategory(str, enum.Enum):
    WARNINGS = "warnings"
    ERRORS = "errors"


class HealthState(str, enum.Enum):
    HEALTHY = "healthy"
    WARNING = "warning"
    ERROR = "error"

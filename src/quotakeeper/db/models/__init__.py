from .enums import HealthAlertCategory, HealthState, ResetKind, ResetLogPartition, ResetStatus
from .health_alert import HealthAlert
from .health_status import HEALTH_STATUS_KEY, HealthStatus
from .quota_config import QUOTA_CONFIG_KEY, QuotaConfig
from .reset_log import ResetLog
from .user import User

__all__ = (
    "HEALTH_STATUS_KEY",
    "QUOTA_CONFIG_KEY",
    "HealthAlert",
    "HealthAlertCategory",
    "HealthState",
    "HealthStatus",
    "QuotaConfig",
    "ResetKind",
    "ResetLog",
    "ResetLogPartition",
    "ResetStatus",
    "User",
)

from __future__ import annotations

from quotakeeper.config import app as plugin_configs
from quotakeeper.config import base
from quotakeeper.config.base import get_settings

__all__ = (
    "base",
    "get_settings",
    "plugin_configs",
)

"""URL constants for resets domain."""

RESETS_BASE: str = "/api/admin/usage-resets"
RESETS_TRIGGER: str = RESETS_BASE
RESETS_LOGS: str = f"{RESETS_BASE}/logs"

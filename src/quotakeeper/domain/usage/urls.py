"""URL constants for usage domain."""

USAGE_BASE: str = "/api/usage"
USAGE_DETAIL: str = f"{USAGE_BASE}/{{user_id:uuid}}"
USAGE_CONSUME: str = f"{USAGE_BASE}/{{user_id:uuid}}/consume"

USAGE_ADMIN_BASE: str = "/api/admin/usage"
USAGE_SUMMARY: str = f"{USAGE_ADMIN_BASE}/summary"
USAGE_TOP_USERS: str = f"{USAGE_ADMIN_BASE}/users"
QUOTA_POLICY: str = "/api/admin/quota-policy"

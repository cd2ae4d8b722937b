from typing import Dict

# Plan limits configuration (matches the pricing page)
# Free tier: 2 CSV uploads/month, no integrations
PLAN_LIMITS: Dict[str, Dict[str, int]] = {
    "FREE": {
        "max_csv_uploads_per_month": 2,
        "max_active_integrations": 0,
    },
    "STANDARD": {
        "max_csv_uploads_per_month": 10,
        "max_active_integrations": 1,
    },
    "PRO": {
        "max_csv_uploads_per_month": -1,  # -1 means unlimited
        "max_active_integrations": -1,
    },
}

UNLIMITED = -1


def get_plan_limit(plan_tier: str, limit_type: str) -> int:
    """Get the limit value for a specific plan and limit type."""
    return PLAN_LIMITS.get(plan_tier, PLAN_LIMITS["FREE"]).get(limit_type, 0)

"""Subscription tiers and their usage limits."""

import math
from typing import Literal

SubscriptionTier = Literal["free", "starter", "pro"]

TIER_LIMITS: dict[str, dict[str, float]] = {
    "free": {"calendars": 1, "bookings_per_month": 2},
    "starter": {"calendars": 3, "bookings_per_month": 10},
    "pro": {"calendars": math.inf, "bookings_per_month": math.inf},
}


def limits_for(tier: str) -> dict[str, float]:
    # Unknown tiers fall back to the most restrictive plan
    return TIER_LIMITS.get(tier, TIER_LIMITS["free"])


def can_add_calendar(tier: str, current_count: int) -> bool:
    return current_count < limits_for(tier)["calendars"]


def can_create_booking(tier: str, current_count: int) -> bool:
    return current_count < limits_for(tier)["bookings_per_month"]


def limit_for_display(value: float) -> int | None:
    """JSON has no infinity; unlimited is reported as null."""
    return None if math.isinf(value) else int(value)

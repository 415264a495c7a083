"""Expansion of weekly availability into concrete bookable dates."""

from collections.abc import Iterable
from datetime import date, datetime, timedelta, tzinfo

from calma.scheduling.policy import DEFAULT_POLICY, BookingPolicy
from calma.scheduling.types import AvailabilityBlock


def day_of_week(day: date) -> int:
    """Weekday number with 0=Sunday, matching AvailabilityBlock.day_of_week."""
    return day.isoweekday() % 7


def today_in(tz: tzinfo, now: datetime | None = None) -> date:
    """Calendar date in the host's timezone, not the server's."""
    current = now if now is not None else datetime.now(tz)
    return current.astimezone(tz).date()


def available_dates(
    blocks: Iterable[AvailabilityBlock],
    today: date,
    policy: BookingPolicy = DEFAULT_POLICY,
) -> list[str]:
    """ISO dates within the horizon (today inclusive) that have availability."""
    weekdays = {block.day_of_week for block in blocks}
    if not weekdays:
        return []
    return [
        day.isoformat()
        for day in (today + timedelta(days=i) for i in range(policy.horizon_days))
        if day_of_week(day) in weekdays
    ]

"""Slot computation for bookable meeting times.

Everything in this package is pure and synchronous: callers load the
availability blocks, bookings and meeting type from the database and pass
them in. Degenerate input yields empty results, never an exception.

Usage:
    from calma.scheduling import BookingPolicy, bookable_slots

    slots = bookable_slots(
        date(2026, 3, 3), 30, blocks, bookings,
        now=datetime.now(UTC), tz=ZoneInfo("Europe/Berlin"),
    )
"""

from calma.scheduling.conflicts import bookable_slots, filter_available_slots, overlaps
from calma.scheduling.dates import available_dates, day_of_week, today_in
from calma.scheduling.policy import DEFAULT_POLICY, BookingPolicy
from calma.scheduling.slots import format_hhmm, generate_time_slots, parse_hhmm
from calma.scheduling.types import AvailabilityBlock, BookedInterval

__all__ = [
    "DEFAULT_POLICY",
    "AvailabilityBlock",
    "BookedInterval",
    "BookingPolicy",
    "available_dates",
    "bookable_slots",
    "day_of_week",
    "filter_available_slots",
    "format_hhmm",
    "generate_time_slots",
    "overlaps",
    "parse_hhmm",
    "today_in",
]

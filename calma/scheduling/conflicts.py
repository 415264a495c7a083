"""Filtering of candidate slots against bookings, windows and notice."""

from collections.abc import Iterable, Sequence
from datetime import date, datetime, time, timedelta, tzinfo

from calma.scheduling.dates import day_of_week
from calma.scheduling.policy import DEFAULT_POLICY, BookingPolicy
from calma.scheduling.slots import generate_time_slots, parse_hhmm
from calma.scheduling.types import AvailabilityBlock, BookedInterval


def overlaps(start: datetime, end: datetime, other_start: datetime, other_end: datetime) -> bool:
    """Half-open interval intersection: touching endpoints do not overlap."""
    return start < other_end and other_start < end


def slot_start(day: date, slot: str, tz: tzinfo) -> datetime:
    minutes = parse_hhmm(slot)
    return datetime.combine(day, time(minutes // 60, minutes % 60), tzinfo=tz)


def _fits_block(slot_minutes: int, duration_minutes: int, blocks: Sequence[AvailabilityBlock]) -> bool:
    return any(
        parse_hhmm(block.start_time) <= slot_minutes
        and slot_minutes + duration_minutes <= parse_hhmm(block.end_time)
        for block in blocks
    )


def filter_available_slots(
    candidates: Iterable[str],
    day: date,
    duration_minutes: int,
    blocks: Iterable[AvailabilityBlock],
    bookings: Iterable[BookedInterval],
    now: datetime,
    tz: tzinfo,
    policy: BookingPolicy = DEFAULT_POLICY,
) -> list[str]:
    """Keep candidates that are free, fit one block, and respect minimum notice.

    Blocks for other weekdays than ``day`` are ignored. The result is
    deduplicated and sorted.
    """
    weekday = day_of_week(day)
    day_blocks = [b for b in blocks if b.day_of_week == weekday]
    active = [b for b in bookings if b.is_active]
    earliest = now + timedelta(minutes=policy.min_notice_minutes)
    duration = timedelta(minutes=duration_minutes)

    accepted: set[str] = set()
    for slot in candidates:
        start = slot_start(day, slot, tz)
        end = start + duration
        if any(overlaps(start, end, b.start, b.end) for b in active):
            continue
        if not _fits_block(parse_hhmm(slot), duration_minutes, day_blocks):
            continue
        if start < earliest:
            continue
        accepted.add(slot)
    return sorted(accepted)


def bookable_slots(
    day: date,
    duration_minutes: int,
    blocks: Iterable[AvailabilityBlock],
    bookings: Iterable[BookedInterval],
    now: datetime,
    tz: tzinfo,
    policy: BookingPolicy = DEFAULT_POLICY,
) -> list[str]:
    """Generate candidates from every block of the day and filter them."""
    weekday = day_of_week(day)
    day_blocks = [b for b in blocks if b.day_of_week == weekday]
    candidates: list[str] = []
    for block in day_blocks:
        candidates.extend(generate_time_slots(block.start_time, block.end_time, duration_minutes))
    return filter_available_slots(
        candidates, day, duration_minutes, day_blocks, bookings, now, tz, policy
    )

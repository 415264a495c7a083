"""Database-backed entry points to the pure slot computation.

Controllers call these; everything below loads rows through ``calma.db``
and hands plain values to the functions in this package.
"""

import logging
from datetime import UTC, date, datetime, timedelta
from typing import Any
from zoneinfo import ZoneInfo

from calma import db
from calma.config import get_settings
from calma.errors import BadRequestError, ConflictError
from calma.scheduling.conflicts import bookable_slots, slot_start
from calma.scheduling.dates import available_dates, today_in
from calma.scheduling.types import AvailabilityBlock, BookedInterval

logger = logging.getLogger("calma.scheduling")


def host_timezone(host: dict[str, Any]) -> ZoneInfo:
    return ZoneInfo(host["timezone"])


async def _blocks(host_id: str) -> list[AvailabilityBlock]:
    return [AvailabilityBlock.from_row(row) for row in await db.availability_list(host_id)]


async def get_available_dates(host: dict[str, Any], now: datetime | None = None) -> dict[str, Any]:
    tz = host_timezone(host)
    blocks = await _blocks(host["id"])
    policy = get_settings().booking.policy()
    return {
        "timezone": host["timezone"],
        "available_dates": available_dates(blocks, today_in(tz, now), policy),
        "available_days_of_week": sorted({b.day_of_week for b in blocks}),
    }


async def get_available_slots(
    host: dict[str, Any],
    meeting_type: dict[str, Any],
    day: date,
    now: datetime | None = None,
    exclude_booking_id: str | None = None,
) -> list[str]:
    tz = host_timezone(host)
    policy = get_settings().booking.policy()
    today = today_in(tz, now)
    if day < today or day >= today + timedelta(days=policy.horizon_days):
        return []
    blocks = await _blocks(host["id"])
    rows = await db.bookings_for_day(host["id"], day, tz, exclude_booking_id=exclude_booking_id)
    bookings = [BookedInterval.from_row(row) for row in rows]
    return bookable_slots(
        day,
        meeting_type["duration_minutes"],
        blocks,
        bookings,
        now=now or datetime.now(UTC),
        tz=tz,
        policy=policy,
    )


async def ensure_bookable(
    host: dict[str, Any],
    meeting_type: dict[str, Any],
    day: date,
    start_time: str,
    exclude_booking_id: str | None = None,
    now: datetime | None = None,
) -> tuple[datetime, datetime]:
    """Check that ``start_time`` on ``day`` is still offered and return its interval.

    Raises:
        BadRequestError: If the meeting type is inactive.
        ConflictError: If the slot is not (or no longer) available.
    """
    if not meeting_type.get("is_active", True):
        raise BadRequestError(detail="Meeting type is not active")
    slots = await get_available_slots(host, meeting_type, day, now=now, exclude_booking_id=exclude_booking_id)
    if start_time not in slots:
        logger.info(
            "Rejected slot %s %s for host %s (meeting type %s)",
            day.isoformat(),
            start_time,
            host["id"],
            meeting_type["id"],
        )
        raise ConflictError(
            detail="This time slot is no longer available",
            error_code="SLOT_UNAVAILABLE",
            date=day.isoformat(),
            start_time=start_time,
        )
    start = slot_start(day, start_time, host_timezone(host))
    return start, start + timedelta(minutes=meeting_type["duration_minutes"])

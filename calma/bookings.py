"""Booking lifecycle shared by the public and host endpoints.

Each operation validates the slot, writes the booking, mirrors it to the
host's Google Calendar when one is connected, and publishes a lifecycle
event. Calendar and event bus failures are logged, never raised.
"""

import logging
from datetime import UTC, date, datetime
from typing import Any

from calma import db
from calma.bus import EventBus, booking_snapshot, now_iso
from calma.errors import APIError, BadRequestError, ConflictError, NotFoundError, QuotaExceededError
from calma.google.calendar import CalendarEventDetails, sync_booking_cancelled, sync_booking_created
from calma.plans import can_create_booking, limit_for_display, limits_for
from calma.scheduling.service import ensure_bookable
from calma.scheduling.types import STATUS_CANCELLED, STATUS_CONFIRMED

logger = logging.getLogger("calma.bookings")


def start_of_month(now: datetime | None = None) -> datetime:
    current = now or datetime.now(UTC)
    return current.astimezone(UTC).replace(day=1, hour=0, minute=0, second=0, microsecond=0)


async def check_booking_quota(host: dict[str, Any]) -> None:
    tier = host["subscription_tier"]
    used = await db.bookings_count_since(host["id"], start_of_month())
    if not can_create_booking(tier, used):
        raise QuotaExceededError(
            detail="This host has reached their monthly booking limit",
            error_code="BOOKING_LIMIT_REACHED",
            tier=tier,
            limit=limit_for_display(limits_for(tier)["bookings_per_month"]),
        )


def _event_details(
    host: dict[str, Any],
    meeting_type: dict[str, Any],
    guest_name: str,
    guest_email: str,
    start: datetime,
    end: datetime,
    notes: str | None,
) -> CalendarEventDetails:
    return CalendarEventDetails(
        summary=f"{meeting_type['name']} with {guest_name}",
        start=start,
        end=end,
        time_zone=host["timezone"],
        description=notes,
        attendee_emails=(guest_email,),
    )


async def _publish(bus: EventBus | None, event: Any) -> None:
    if bus is not None:
        await bus.publish(event)


async def create_booking(
    host: dict[str, Any],
    meeting_type: dict[str, Any],
    guest_name: str,
    guest_email: str,
    guest_timezone: str,
    day: date,
    start_time: str,
    notes: str | None,
    bus: EventBus | None,
) -> dict[str, Any]:
    start, end = await ensure_bookable(host, meeting_type, day, start_time)

    created = await sync_booking_created(
        host["id"], _event_details(host, meeting_type, guest_name, guest_email, start, end, notes)
    )
    try:
        async with db.translate_errors("Booking"):
            booking = await db.booking_create(
                host_id=host["id"],
                meeting_type_id=meeting_type["id"],
                guest_name=guest_name,
                guest_email=guest_email,
                guest_timezone=guest_timezone,
                start_time=start,
                end_time=end,
                notes=notes,
                google_event_id=created.event_id,
                meet_link=created.meet_link,
            )
    except APIError as e:
        # The row was never written; the calendar event must not outlive it
        await sync_booking_cancelled(host["id"], created.event_id)
        if isinstance(e, ConflictError):
            raise ConflictError(detail="This time slot is no longer available", error_code="SLOT_UNAVAILABLE")
        raise

    logger.info("Booking %s created for host %s at %s", booking["id"], host["id"], start.isoformat())
    await _publish(
        bus,
        {
            "type": "booking_created",
            "host_id": host["id"],
            "booking": booking_snapshot(booking),
            "timestamp": now_iso(),
        },
    )
    return booking


async def cancel_booking(host: dict[str, Any], booking_id: str, bus: EventBus | None) -> dict[str, Any]:
    booking = await db.booking_get(booking_id, host_id=host["id"])
    if booking is None:
        raise NotFoundError(detail="Booking not found")
    if booking["status"] == STATUS_CANCELLED:
        raise BadRequestError(detail="Booking is already cancelled")

    await sync_booking_cancelled(host["id"], booking["google_event_id"])
    async with db.translate_errors("Cancel booking"):
        await db.booking_set_status(booking_id, STATUS_CANCELLED)

    logger.info("Booking %s cancelled by host %s", booking_id, host["id"])
    await _publish(
        bus,
        {
            "type": "booking_cancelled",
            "host_id": host["id"],
            "booking_id": booking_id,
            "timestamp": now_iso(),
        },
    )
    return {**booking, "status": STATUS_CANCELLED}


async def reschedule_booking(
    host: dict[str, Any],
    booking_id: str,
    day: date,
    start_time: str,
    bus: EventBus | None,
) -> dict[str, Any]:
    booking = await db.booking_get(booking_id, host_id=host["id"])
    if booking is None:
        raise NotFoundError(detail="Booking not found")
    if booking["status"] != STATUS_CONFIRMED:
        raise BadRequestError(detail="Only confirmed bookings can be rescheduled")
    meeting_type = await db.meeting_type_get(host["id"], booking["meeting_type_id"])
    if meeting_type is None:
        raise NotFoundError(detail="Meeting type not found")

    # The booking's own interval must not block its new time
    start, end = await ensure_bookable(host, meeting_type, day, start_time, exclude_booking_id=booking_id)

    created = await sync_booking_created(
        host["id"],
        _event_details(
            host, meeting_type, booking["guest_name"], booking["guest_email"], start, end, booking["notes"]
        ),
    )
    try:
        async with db.translate_errors("Reschedule booking"):
            updated = await db.booking_reschedule(booking_id, start, end, created.event_id, created.meet_link)
        if updated is None:
            raise ConflictError(detail="Booking changed while rescheduling")
    except APIError:
        # The booking keeps its old time and event
        await sync_booking_cancelled(host["id"], created.event_id)
        raise
    await sync_booking_cancelled(host["id"], booking["google_event_id"])

    logger.info("Booking %s rescheduled by host %s to %s", booking_id, host["id"], start.isoformat())
    await _publish(
        bus,
        {
            "type": "booking_rescheduled",
            "host_id": host["id"],
            "booking": booking_snapshot(updated),
            "previous_start_time": booking["start_time"].isoformat(),
            "timestamp": now_iso(),
        },
    )
    return updated

from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Query

from calma import bookings, db
from calma.dependencies import CurrentUser, OptionalBus
from calma.errors import NotFoundError
from calma.models.bookings import (
    BookingCreatedResponse,
    BookingOut,
    BookingsResponse,
    HostBookingRequest,
    RescheduleRequest,
)

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.get("", response_model=BookingsResponse)
async def list_bookings(
    user: CurrentUser,
    status: Literal["confirmed", "cancelled"] | None = Query(None, description="Filter by status"),
) -> BookingsResponse:
    rows = await db.bookings_list(user["id"], status=status)
    return BookingsResponse(bookings=rows)


@router.post("", response_model=BookingCreatedResponse, status_code=201)
async def create_booking(body: HostBookingRequest, user: CurrentUser, bus: OptionalBus) -> BookingCreatedResponse:
    meeting_type = await db.meeting_type_get(user["id"], str(body.meeting_type_id))
    if meeting_type is None:
        raise NotFoundError(detail="Meeting type not found")
    await bookings.check_booking_quota(user)
    booking = await bookings.create_booking(
        user,
        meeting_type,
        guest_name=body.guest_name,
        guest_email=body.guest_email,
        guest_timezone=body.guest_timezone,
        day=body.date,
        start_time=body.start_time,
        notes=body.notes,
        bus=bus,
    )
    return BookingCreatedResponse(booking=booking, meet_link=booking["meet_link"])


@router.post("/{booking_id}/cancel", response_model=BookingOut)
async def cancel_booking(booking_id: UUID, user: CurrentUser, bus: OptionalBus) -> BookingOut:
    booking = await bookings.cancel_booking(user, str(booking_id), bus)
    return BookingOut(**booking)


@router.post("/{booking_id}/reschedule", response_model=BookingOut)
async def reschedule_booking(
    booking_id: UUID, body: RescheduleRequest, user: CurrentUser, bus: OptionalBus
) -> BookingOut:
    booking = await bookings.reschedule_booking(user, str(booking_id), body.date, body.start_time, bus)
    return BookingOut(**booking)

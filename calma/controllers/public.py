"""Unauthenticated booking pages: host profile, dates, slots and booking."""

import logging
from datetime import date
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Query

from calma import bookings, db
from calma.dependencies import OptionalBus
from calma.errors import NotFoundError
from calma.models.bookings import BookingCreatedResponse, PublicBookingRequest
from calma.models.public import (
    AvailableDatesResponse,
    AvailableSlotsResponse,
    BookingDetails,
    HostPageResponse,
    MeetingTypePageResponse,
    PublicHost,
    PublicMeetingType,
)
from calma.scheduling import service

logger = logging.getLogger("calma.public")

router = APIRouter(prefix="/book", tags=["public"])


async def _host(slug: str) -> dict[str, Any]:
    host = await db.user_get_by_slug(slug)
    if host is None:
        raise NotFoundError(detail="Booking page not found")
    return host


async def _meeting_type(host: dict[str, Any], slug: str) -> dict[str, Any]:
    meeting_type = await db.meeting_type_get_by_slug(host["id"], slug)
    if meeting_type is None:
        raise NotFoundError(detail="Meeting type not found")
    return meeting_type


@router.get("/bookings/{booking_id}", response_model=BookingDetails)
async def get_booking_details(booking_id: UUID) -> BookingDetails:
    booking = await db.booking_get(str(booking_id))
    if booking is None:
        raise NotFoundError(detail="Booking not found")
    host = await db.user_get(booking["host_id"])
    if host is None:
        raise NotFoundError(detail="Booking not found")
    return BookingDetails(
        id=booking["id"],
        status=booking["status"],
        start_time=booking["start_time"].isoformat(),
        end_time=booking["end_time"].isoformat(),
        guest_name=booking["guest_name"],
        guest_timezone=booking["guest_timezone"],
        meet_link=booking["meet_link"],
        meeting_type_name=booking["meeting_type_name"],
        duration_minutes=booking["duration_minutes"],
        host_name=host["name"],
        host_timezone=host["timezone"],
    )


@router.get("/{slug}", response_model=HostPageResponse)
async def get_host_page(slug: str) -> HostPageResponse:
    host = await _host(slug)
    meeting_types = await db.meeting_types_list(host["id"], active_only=True)
    return HostPageResponse(
        host=PublicHost(**host),
        meeting_types=[PublicMeetingType(**mt) for mt in meeting_types],
    )


@router.get("/{slug}/dates", response_model=AvailableDatesResponse)
async def get_available_dates(slug: str) -> AvailableDatesResponse:
    host = await _host(slug)
    return AvailableDatesResponse(**await service.get_available_dates(host))


@router.get("/{slug}/{meeting_type_slug}", response_model=MeetingTypePageResponse)
async def get_meeting_type_page(slug: str, meeting_type_slug: str) -> MeetingTypePageResponse:
    host = await _host(slug)
    meeting_type = await _meeting_type(host, meeting_type_slug)
    return MeetingTypePageResponse(host=PublicHost(**host), meeting_type=PublicMeetingType(**meeting_type))


@router.get("/{slug}/{meeting_type_slug}/slots", response_model=AvailableSlotsResponse)
async def get_available_slots(
    slug: str,
    meeting_type_slug: str,
    day: date = Query(..., alias="date", description="Host-local date, YYYY-MM-DD"),
) -> AvailableSlotsResponse:
    host = await _host(slug)
    meeting_type = await _meeting_type(host, meeting_type_slug)
    slots = await service.get_available_slots(host, meeting_type, day)
    return AvailableSlotsResponse(
        date=day.isoformat(),
        timezone=host["timezone"],
        duration_minutes=meeting_type["duration_minutes"],
        slots=slots,
    )


@router.post("/{slug}/{meeting_type_slug}", response_model=BookingCreatedResponse, status_code=201)
async def book(
    slug: str, meeting_type_slug: str, body: PublicBookingRequest, bus: OptionalBus
) -> BookingCreatedResponse:
    host = await _host(slug)
    meeting_type = await _meeting_type(host, meeting_type_slug)
    await bookings.check_booking_quota(host)
    booking = await bookings.create_booking(
        host,
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

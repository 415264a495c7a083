from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, field_validator

from calma.models.common import normalize_time, validate_email, validate_timezone


class BookingOut(BaseModel):
    id: str
    host_id: str
    meeting_type_id: str | None = None
    meeting_type_name: str | None = None
    duration_minutes: int
    guest_name: str
    guest_email: str
    guest_timezone: str
    start_time: datetime
    end_time: datetime
    notes: str | None = None
    meet_link: str | None = None
    google_event_id: str | None = None
    status: str
    created_at: str


class BookingsResponse(BaseModel):
    bookings: list[BookingOut]


class GuestDetails(BaseModel):
    """Who is booking, and which slot (host-local date and "HH:MM" start)."""

    guest_name: str
    guest_email: str
    guest_timezone: str = "UTC"
    date: date
    start_time: str
    notes: str | None = None

    @field_validator("guest_name")
    @classmethod
    def validate_guest_name(cls, v: str) -> str:
        v = v.strip()
        if not v or len(v) > 200:
            raise ValueError("guest_name must be 1-200 characters")
        return v

    @field_validator("guest_email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return validate_email(v)

    @field_validator("guest_timezone")
    @classmethod
    def check_timezone(cls, v: str) -> str:
        return validate_timezone(v)

    @field_validator("start_time")
    @classmethod
    def check_start_time(cls, v: str) -> str:
        return normalize_time(v)

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, v: str | None) -> str | None:
        if v is not None and len(v) > 2000:
            raise ValueError("notes must be at most 2000 characters")
        return v or None


class PublicBookingRequest(GuestDetails):
    pass


class HostBookingRequest(GuestDetails):
    meeting_type_id: UUID


class RescheduleRequest(BaseModel):
    date: date
    start_time: str

    @field_validator("start_time")
    @classmethod
    def check_start_time(cls, v: str) -> str:
        return normalize_time(v)


class BookingCreatedResponse(BaseModel):
    booking: BookingOut
    meet_link: str | None = None

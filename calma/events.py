from typing import Literal, TypedDict, Union


class BookingSnapshot(TypedDict):
    id: str
    meeting_type_id: str
    guest_name: str
    guest_email: str
    start_time: str
    end_time: str


class BookingCreatedEvent(TypedDict):
    type: Literal["booking_created"]
    host_id: str
    booking: BookingSnapshot
    timestamp: str


class BookingCancelledEvent(TypedDict):
    type: Literal["booking_cancelled"]
    host_id: str
    booking_id: str
    timestamp: str


class BookingRescheduledEvent(TypedDict):
    type: Literal["booking_rescheduled"]
    host_id: str
    booking: BookingSnapshot
    previous_start_time: str
    timestamp: str


# Discriminated union of booking lifecycle events
BookingEvent = Union[BookingCreatedEvent, BookingCancelledEvent, BookingRescheduledEvent]

from pydantic import BaseModel


class PublicHost(BaseModel):
    id: str
    name: str | None = None
    slug: str
    timezone: str


class PublicMeetingType(BaseModel):
    id: str
    name: str
    slug: str
    duration_minutes: int
    description: str | None = None


class HostPageResponse(BaseModel):
    host: PublicHost
    meeting_types: list[PublicMeetingType]


class MeetingTypePageResponse(BaseModel):
    host: PublicHost
    meeting_type: PublicMeetingType


class AvailableDatesResponse(BaseModel):
    timezone: str
    available_dates: list[str]
    available_days_of_week: list[int]


class AvailableSlotsResponse(BaseModel):
    date: str
    timezone: str
    duration_minutes: int
    slots: list[str]


class BookingDetails(BaseModel):
    id: str
    status: str
    start_time: str
    end_time: str
    guest_name: str
    guest_timezone: str
    meet_link: str | None = None
    meeting_type_name: str | None = None
    duration_minutes: int
    host_name: str | None = None
    host_timezone: str

from pydantic import BaseModel, field_validator

from calma.models.common import validate_timezone
from calma.slugs import SLUG_RE


class UserOut(BaseModel):
    id: str
    email: str
    name: str | None = None
    slug: str
    timezone: str
    subscription_tier: str
    is_admin: bool
    booking_url: str


class UpdateProfileRequest(BaseModel):
    name: str | None = None
    slug: str | None = None
    timezone: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v or len(v) > 100:
            raise ValueError("name must be 1-100 characters")
        return v

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v: str | None) -> str | None:
        if v is not None and (not SLUG_RE.match(v) or len(v) > 100):
            raise ValueError("slug must be lowercase letters, digits and single hyphens")
        return v

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, v: str | None) -> str | None:
        return validate_timezone(v) if v is not None else None


class SlugAvailabilityResponse(BaseModel):
    slug: str
    available: bool


class UsageCounter(BaseModel):
    used: int
    limit: int | None


class UsageResponse(BaseModel):
    tier: str
    calendars: UsageCounter
    bookings: UsageCounter

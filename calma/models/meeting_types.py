from pydantic import BaseModel, Field, field_validator

from calma.slugs import SLUG_RE


class MeetingTypeOut(BaseModel):
    id: str
    name: str
    slug: str
    duration_minutes: int
    description: str | None = None
    is_default: bool
    is_active: bool
    created_at: str


class MeetingTypesResponse(BaseModel):
    meeting_types: list[MeetingTypeOut]


def _check_slug(v: str) -> str:
    if not SLUG_RE.match(v) or len(v) > 100:
        raise ValueError("slug must be lowercase letters, digits and single hyphens")
    return v


class CreateMeetingTypeRequest(BaseModel):
    name: str
    slug: str | None = None
    duration_minutes: int = Field(gt=0, le=24 * 60)
    description: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v or len(v) > 200:
            raise ValueError("name must be 1-200 characters")
        return v

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v: str | None) -> str | None:
        return _check_slug(v) if v is not None else None


class UpdateMeetingTypeRequest(BaseModel):
    name: str | None = None
    slug: str | None = None
    duration_minutes: int | None = Field(default=None, gt=0, le=24 * 60)
    description: str | None = None
    is_active: bool | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v or len(v) > 200:
            raise ValueError("name must be 1-200 characters")
        return v

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v: str | None) -> str | None:
        return _check_slug(v) if v is not None else None

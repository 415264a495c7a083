from pydantic import BaseModel, Field, field_validator, model_validator

from calma.models.common import normalize_time


class AvailabilityBlockOut(BaseModel):
    id: str
    day_of_week: int
    start_time: str
    end_time: str
    created_at: str


class AvailabilityListResponse(BaseModel):
    availability: list[AvailabilityBlockOut]


class _TimeRange(BaseModel):
    start_time: str
    end_time: str

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        return normalize_time(v)

    @model_validator(mode="after")
    def check_order(self):
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self


class CreateAvailabilityRequest(_TimeRange):
    day_of_week: int = Field(ge=0, le=6, description="0=Sunday .. 6=Saturday")


class UpdateAvailabilityRequest(_TimeRange):
    pass


class CopyAvailabilityRequest(BaseModel):
    source_day: int = Field(ge=0, le=6)
    target_days: list[int]

    @field_validator("target_days")
    @classmethod
    def validate_target_days(cls, v: list[int]) -> list[int]:
        if not v:
            raise ValueError("target_days must not be empty")
        if any(d < 0 or d > 6 for d in v):
            raise ValueError("target_days must be between 0 and 6")
        return sorted(set(v))

    @model_validator(mode="after")
    def check_source_not_target(self):
        if self.source_day in self.target_days:
            raise ValueError("target_days must not include source_day")
        return self


class CopyAvailabilityResponse(BaseModel):
    copied: int

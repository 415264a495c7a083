from pydantic import BaseModel, field_validator


class FeedbackRequest(BaseModel):
    content: str

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        v = v.strip()
        if not v or len(v) > 5000:
            raise ValueError("content must be 1-5000 characters")
        return v


class FeedbackOut(BaseModel):
    id: str
    user_id: str | None = None
    content: str
    archived: bool
    created_at: str


class FeedbackListResponse(BaseModel):
    feedback: list[FeedbackOut]

from uuid import UUID

from fastapi import APIRouter, Query

from calma import db
from calma.dependencies import AdminUser, CurrentUser
from calma.errors import NotFoundError
from calma.models.feedback import FeedbackListResponse, FeedbackOut, FeedbackRequest

router = APIRouter(prefix="/feedback", tags=["feedback"])


@router.post("", response_model=FeedbackOut, status_code=201)
async def submit_feedback(body: FeedbackRequest, user: CurrentUser) -> FeedbackOut:
    async with db.translate_errors("Feedback"):
        feedback = await db.feedback_create(user["id"], body.content)
    return FeedbackOut(**feedback)


@router.get("", response_model=FeedbackListResponse)
async def list_feedback(
    _admin: AdminUser,
    include_archived: bool = Query(False, description="Include archived entries"),
) -> FeedbackListResponse:
    return FeedbackListResponse(feedback=await db.feedback_list(include_archived=include_archived))


@router.post("/{feedback_id}/archive")
async def archive_feedback(feedback_id: UUID, _admin: AdminUser) -> dict[str, bool]:
    if not await db.feedback_archive(str(feedback_id)):
        raise NotFoundError(detail="Feedback not found")
    return {"archived": True}

import logging
from uuid import UUID

from fastapi import APIRouter

from calma import db
from calma.dependencies import CurrentUser
from calma.errors import BadRequestError, ConflictError, NotFoundError
from calma.models.meeting_types import (
    CreateMeetingTypeRequest,
    MeetingTypeOut,
    MeetingTypesResponse,
    UpdateMeetingTypeRequest,
)
from calma.slugs import RESERVED_MEETING_TYPE_SLUGS, slugify

logger = logging.getLogger("calma.meeting_types")

router = APIRouter(prefix="/meeting-types", tags=["meeting-types"])


async def _check_slug_free(user_id: str, slug: str, exclude_id: str | None = None) -> None:
    if slug in RESERVED_MEETING_TYPE_SLUGS:
        raise BadRequestError(detail=f"'{slug}' cannot be used as a URL", error_code="SLUG_RESERVED")
    if await db.meeting_type_slug_taken(user_id, slug, exclude_id=exclude_id):
        raise ConflictError(detail="You already have a meeting type with this URL", error_code="SLUG_TAKEN")


@router.get("", response_model=MeetingTypesResponse)
async def list_meeting_types(user: CurrentUser) -> MeetingTypesResponse:
    meeting_types = await db.meeting_types_list(user["id"])
    return MeetingTypesResponse(meeting_types=meeting_types)


@router.post("", response_model=MeetingTypeOut, status_code=201)
async def create_meeting_type(body: CreateMeetingTypeRequest, user: CurrentUser) -> MeetingTypeOut:
    slug = body.slug or slugify(body.name)
    if not slug:
        raise BadRequestError(detail="Could not derive a URL from the name; provide a slug")
    await _check_slug_free(user["id"], slug)

    async with db.translate_errors("Meeting type"):
        meeting_type = await db.meeting_type_create(
            user["id"], body.name, slug, body.duration_minutes, body.description
        )
    logger.info("User %s created meeting type %s (%s)", user["id"], meeting_type["id"], slug)
    return MeetingTypeOut(**meeting_type)


@router.patch("/{meeting_type_id}", response_model=MeetingTypeOut)
async def update_meeting_type(
    meeting_type_id: UUID, body: UpdateMeetingTypeRequest, user: CurrentUser
) -> MeetingTypeOut:
    fields = body.model_dump(exclude_unset=True)
    # Only description may be cleared
    fields = {k: v for k, v in fields.items() if v is not None or k == "description"}
    if "slug" in fields:
        await _check_slug_free(user["id"], fields["slug"], exclude_id=str(meeting_type_id))

    async with db.translate_errors("Meeting type"):
        meeting_type = await db.meeting_type_update(user["id"], str(meeting_type_id), fields)
    if meeting_type is None:
        raise NotFoundError(detail="Meeting type not found")
    return MeetingTypeOut(**meeting_type)


@router.delete("/{meeting_type_id}")
async def delete_meeting_type(meeting_type_id: UUID, user: CurrentUser) -> dict[str, bool]:
    if await db.meeting_type_get(user["id"], str(meeting_type_id)) is None:
        raise NotFoundError(detail="Meeting type not found")
    if await db.bookings_count_confirmed_for_meeting_type(str(meeting_type_id)) > 0:
        raise ConflictError(
            detail="Cancel the confirmed bookings of this meeting type before deleting it",
            error_code="MEETING_TYPE_IN_USE",
        )
    async with db.translate_errors("Delete meeting type"):
        deleted = await db.meeting_type_delete(user["id"], str(meeting_type_id))
    if not deleted:
        raise NotFoundError(detail="Meeting type not found")
    return {"deleted": True}


@router.post("/{meeting_type_id}/default", response_model=MeetingTypeOut)
async def set_default_meeting_type(meeting_type_id: UUID, user: CurrentUser) -> MeetingTypeOut:
    if not await db.meeting_type_set_default(user["id"], str(meeting_type_id)):
        raise NotFoundError(detail="Meeting type not found")
    meeting_type = await db.meeting_type_get(user["id"], str(meeting_type_id))
    if meeting_type is None:
        raise NotFoundError(detail="Meeting type not found")
    return MeetingTypeOut(**meeting_type)

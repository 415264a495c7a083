import logging
from uuid import UUID

from fastapi import APIRouter

from calma import db
from calma.dependencies import CurrentUser
from calma.errors import BadRequestError, NotFoundError
from calma.models.availability import (
    AvailabilityBlockOut,
    AvailabilityListResponse,
    CopyAvailabilityRequest,
    CopyAvailabilityResponse,
    CreateAvailabilityRequest,
    UpdateAvailabilityRequest,
)

logger = logging.getLogger("calma.availability")

router = APIRouter(prefix="/availability", tags=["availability"])


@router.get("", response_model=AvailabilityListResponse)
async def list_availability(user: CurrentUser) -> AvailabilityListResponse:
    blocks = await db.availability_list(user["id"])
    return AvailabilityListResponse(availability=blocks)


@router.post("", response_model=AvailabilityBlockOut, status_code=201)
async def create_availability(body: CreateAvailabilityRequest, user: CurrentUser) -> AvailabilityBlockOut:
    async with db.translate_errors("Availability"):
        block = await db.availability_create(user["id"], body.day_of_week, body.start_time, body.end_time)
    return AvailabilityBlockOut(**block)


@router.post("/copy", response_model=CopyAvailabilityResponse)
async def copy_availability(body: CopyAvailabilityRequest, user: CurrentUser) -> CopyAvailabilityResponse:
    async with db.translate_errors("Copy availability"):
        copied = await db.availability_copy_day(user["id"], body.source_day, body.target_days)
    if copied == 0:
        raise BadRequestError(detail="No availability set for the source day", error_code="EMPTY_SOURCE_DAY")
    logger.info("User %s copied day %d to %s", user["id"], body.source_day, body.target_days)
    return CopyAvailabilityResponse(copied=copied)


@router.patch("/{block_id}", response_model=AvailabilityBlockOut)
async def update_availability(
    block_id: UUID, body: UpdateAvailabilityRequest, user: CurrentUser
) -> AvailabilityBlockOut:
    async with db.translate_errors("Availability"):
        block = await db.availability_update(user["id"], str(block_id), body.start_time, body.end_time)
    if block is None:
        raise NotFoundError(detail="Availability block not found")
    return AvailabilityBlockOut(**block)


@router.delete("/{block_id}")
async def delete_availability(block_id: UUID, user: CurrentUser) -> dict[str, bool]:
    if not await db.availability_delete(user["id"], str(block_id)):
        raise NotFoundError(detail="Availability block not found")
    return {"deleted": True}

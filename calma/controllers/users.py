import logging
from typing import Any

from fastapi import APIRouter, Query

from calma import db
from calma.bookings import start_of_month
from calma.config import get_settings
from calma.dependencies import CurrentUser
from calma.errors import BadRequestError, ConflictError, NotFoundError
from calma.models.users import (
    SlugAvailabilityResponse,
    UpdateProfileRequest,
    UsageCounter,
    UsageResponse,
    UserOut,
)
from calma.plans import limit_for_display, limits_for
from calma.slugs import RESERVED_USER_SLUGS

logger = logging.getLogger("calma.users")

router = APIRouter(prefix="/me", tags=["users"])


def _user_out(user: dict[str, Any]) -> UserOut:
    return UserOut(**user, booking_url=get_settings().app.booking_url(user["slug"]))


@router.get("", response_model=UserOut)
async def get_me(user: CurrentUser) -> UserOut:
    return _user_out(user)


@router.patch("", response_model=UserOut)
async def update_me(body: UpdateProfileRequest, user: CurrentUser) -> UserOut:
    fields = body.model_dump(exclude_none=True)
    if "slug" in fields and fields["slug"] != user["slug"]:
        if fields["slug"] in RESERVED_USER_SLUGS:
            raise BadRequestError(detail=f"'{fields['slug']}' cannot be used as a URL", error_code="SLUG_RESERVED")
        if await db.user_slug_taken(fields["slug"], exclude_user_id=user["id"]):
            raise ConflictError(detail="This URL is already taken", error_code="SLUG_TAKEN")

    async with db.translate_errors("Profile update"):
        updated = await db.user_update(user["id"], fields)
    if updated is None:
        raise NotFoundError(detail="User not found")
    logger.info("User %s updated %s", user["id"], ", ".join(sorted(fields)) or "nothing")
    return _user_out(updated)


@router.get("/slug-available", response_model=SlugAvailabilityResponse)
async def slug_available(user: CurrentUser, slug: str = Query(..., min_length=1)) -> SlugAvailabilityResponse:
    if slug in RESERVED_USER_SLUGS:
        return SlugAvailabilityResponse(slug=slug, available=False)
    taken = await db.user_slug_taken(slug, exclude_user_id=user["id"])
    return SlugAvailabilityResponse(slug=slug, available=not taken)


@router.get("/usage", response_model=UsageResponse)
async def usage(user: CurrentUser) -> UsageResponse:
    tier = user["subscription_tier"]
    limits = limits_for(tier)
    calendars = await db.accounts_count(user["id"])
    bookings = await db.bookings_count_since(user["id"], start_of_month())
    return UsageResponse(
        tier=tier,
        calendars=UsageCounter(used=calendars, limit=limit_for_display(limits["calendars"])),
        bookings=UsageCounter(used=bookings, limit=limit_for_display(limits["bookings_per_month"])),
    )

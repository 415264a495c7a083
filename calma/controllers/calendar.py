"""Google Calendar connections for hosts."""

import logging
from datetime import UTC, datetime, timedelta
from uuid import UUID

import httpx
from fastapi import APIRouter, Query
from fastapi.responses import RedirectResponse

from calma import db
from calma.config import get_settings
from calma.dependencies import CurrentUser
from calma.errors import (
    BadRequestError,
    ExternalServiceError,
    NotFoundError,
    QuotaExceededError,
    ServiceUnavailableError,
)
from calma.google import http, oauth
from calma.google.calendar import list_events
from calma.google.encryption import EncryptionError, encrypt
from calma.models.calendar import (
    CalendarEventsResponse,
    ConnectedAccountOut,
    ConnectedAccountsResponse,
    ConnectUrlResponse,
)
from calma.plans import can_add_calendar, limit_for_display, limits_for

logger = logging.getLogger("calma.calendar")

router = APIRouter(prefix="/calendar", tags=["calendar"])


def _require_google() -> None:
    if not get_settings().google.configured:
        raise ServiceUnavailableError(detail="Google Calendar integration is not configured")


def _calendar_limit_error(tier: str) -> QuotaExceededError:
    return QuotaExceededError(
        detail="Calendar limit reached for your plan",
        error_code="CALENDAR_LIMIT_REACHED",
        tier=tier,
        limit=limit_for_display(limits_for(tier)["calendars"]),
    )


@router.get("/connect", response_model=ConnectUrlResponse)
async def connect(user: CurrentUser) -> ConnectUrlResponse:
    _require_google()
    if not can_add_calendar(user["subscription_tier"], await db.accounts_count(user["id"])):
        raise _calendar_limit_error(user["subscription_tier"])
    return ConnectUrlResponse(auth_url=oauth.get_auth_url(state=oauth.make_state(user["id"])))


@router.get("/callback")
async def callback(
    user: CurrentUser,
    code: str | None = Query(None),
    state: str | None = Query(None),
    error: str | None = Query(None),
) -> RedirectResponse:
    _require_google()
    settings = get_settings()
    if error:
        logger.info("User %s declined Google consent: %s", user["id"], error)
        return RedirectResponse(f"{settings.app.url.rstrip('/')}/settings?calendar=denied")
    if not code:
        raise BadRequestError(detail="Missing authorization code")
    if not state or not oauth.verify_state(state, user["id"]):
        raise BadRequestError(detail="Invalid or expired OAuth state", error_code="INVALID_OAUTH_STATE")

    try:
        async with http.client() as client:
            tokens = await oauth.exchange_code(code, client)
            info = await oauth.fetch_user_info(tokens["access_token"], client)
    except httpx.HTTPError as e:
        logger.error("Google OAuth callback failed for user %s: %s", user["id"], e)
        raise ExternalServiceError(detail="Could not reach Google") from e

    google_account_id = str(info.get("id") or "")
    email = info.get("email")
    if not google_account_id or not email:
        raise ExternalServiceError(detail="Google did not return the account identity")

    existing = await db.accounts_list(user["id"])
    already_connected = any(a["google_account_id"] == google_account_id for a in existing)
    if not already_connected and not can_add_calendar(user["subscription_tier"], len(existing)):
        raise _calendar_limit_error(user["subscription_tier"])

    try:
        access_token = encrypt(tokens["access_token"])
        refresh_token = encrypt(tokens["refresh_token"])
    except EncryptionError as e:
        logger.error("Token encryption unavailable: %s", e)
        raise ServiceUnavailableError(detail="Token encryption is not configured") from e

    async with db.translate_errors("Calendar connection"):
        account = await db.account_upsert(
            user["id"], google_account_id, email, access_token, refresh_token, tokens["expiry_date"]
        )
    logger.info("User %s connected Google account %s", user["id"], account["id"])
    return RedirectResponse(f"{settings.app.url.rstrip('/')}/settings?calendar=connected")


@router.get("/accounts", response_model=ConnectedAccountsResponse)
async def list_accounts(user: CurrentUser) -> ConnectedAccountsResponse:
    accounts = await db.accounts_list(user["id"])
    return ConnectedAccountsResponse(accounts=accounts)


@router.post("/accounts/{account_id}/default", response_model=ConnectedAccountsResponse)
async def set_default_account(account_id: UUID, user: CurrentUser) -> ConnectedAccountsResponse:
    if not await db.account_set_default(user["id"], str(account_id)):
        raise NotFoundError(detail="Calendar account not found")
    return ConnectedAccountsResponse(accounts=await db.accounts_list(user["id"]))


@router.delete("/accounts/{account_id}")
async def delete_account(account_id: UUID, user: CurrentUser) -> dict[str, bool]:
    if not await db.account_delete(user["id"], str(account_id)):
        raise NotFoundError(detail="Calendar account not found")
    logger.info("User %s disconnected calendar account %s", user["id"], account_id)
    return {"deleted": True}


@router.get("/accounts/{account_id}/events", response_model=CalendarEventsResponse)
async def get_account_events(
    account_id: UUID,
    user: CurrentUser,
    time_min: datetime | None = Query(None),
    time_max: datetime | None = Query(None),
) -> CalendarEventsResponse:
    account = await db.account_get(user["id"], str(account_id))
    if account is None:
        raise NotFoundError(detail="Calendar account not found")
    start = time_min or datetime.now(UTC)
    end = time_max or start + timedelta(days=7)
    if end <= start:
        raise BadRequestError(detail="time_max must be after time_min")

    try:
        async with http.client() as client:
            token = await oauth.get_valid_access_token(account, client)
            events = await list_events(token, start, end, client)
    except httpx.HTTPError as e:
        raise ExternalServiceError(detail="Could not reach Google Calendar") from e
    except EncryptionError as e:
        logger.error("Stored tokens for account %s are unreadable: %s", account_id, e)
        raise ExternalServiceError(detail="Calendar credentials are invalid; reconnect the account") from e
    return CalendarEventsResponse(events=events)

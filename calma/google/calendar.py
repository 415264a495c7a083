"""Google Calendar events for bookings.

The low-level functions (create_event, delete_event, list_events) raise
ExternalServiceError on API failures. The sync_* helpers wrap them for the
booking paths: they look up the host's default account, and log instead of
raising, so a calendar outage never blocks a booking.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import httpx

from calma import db
from calma.errors import ExternalServiceError
from calma.google import http
from calma.google.encryption import EncryptionError
from calma.google.oauth import get_valid_access_token

logger = logging.getLogger("calma.google")

GOOGLE_CALENDAR_API = "https://www.googleapis.com/calendar/v3"
CALENDAR_ID = "primary"


@dataclass
class CalendarEventDetails:
    summary: str
    start: datetime
    end: datetime
    time_zone: str
    description: str | None = None
    attendee_emails: tuple[str, ...] = ()


@dataclass
class CreatedEvent:
    event_id: str | None
    meet_link: str | None


def _event_body(details: CalendarEventDetails) -> dict[str, Any]:
    body: dict[str, Any] = {
        "summary": details.summary,
        "start": {"dateTime": details.start.isoformat(), "timeZone": details.time_zone},
        "end": {"dateTime": details.end.isoformat(), "timeZone": details.time_zone},
        "attendees": [{"email": email} for email in details.attendee_emails],
        "conferenceData": {
            "createRequest": {
                "requestId": f"calma-{uuid.uuid4().hex}",
                "conferenceSolutionKey": {"type": "hangoutsMeet"},
            }
        },
    }
    if details.description:
        body["description"] = details.description
    return body


def _meet_link(event: dict[str, Any]) -> str | None:
    for entry in event.get("conferenceData", {}).get("entryPoints", []):
        if entry.get("entryPointType") == "video" and entry.get("uri"):
            return entry["uri"]
    return event.get("hangoutLink")


async def create_event(
    access_token: str, details: CalendarEventDetails, client: httpx.AsyncClient
) -> CreatedEvent:
    response = await client.post(
        f"{GOOGLE_CALENDAR_API}/calendars/{CALENDAR_ID}/events",
        params={"conferenceDataVersion": 1, "sendUpdates": "all"},
        headers={"Authorization": f"Bearer {access_token}"},
        json=_event_body(details),
    )
    if response.status_code not in (200, 201):
        raise ExternalServiceError(detail="Failed to create calendar event", status=response.status_code)
    event = response.json()
    return CreatedEvent(event_id=event.get("id"), meet_link=_meet_link(event))


async def delete_event(access_token: str, event_id: str, client: httpx.AsyncClient) -> None:
    response = await client.delete(
        f"{GOOGLE_CALENDAR_API}/calendars/{CALENDAR_ID}/events/{event_id}",
        params={"sendUpdates": "all"},
        headers={"Authorization": f"Bearer {access_token}"},
    )
    # 410: already deleted on Google's side
    if response.status_code not in (200, 204, 404, 410):
        raise ExternalServiceError(detail="Failed to delete calendar event", status=response.status_code)


async def list_events(
    access_token: str, time_min: datetime, time_max: datetime, client: httpx.AsyncClient
) -> list[dict[str, Any]]:
    response = await client.get(
        f"{GOOGLE_CALENDAR_API}/calendars/{CALENDAR_ID}/events",
        params={
            "timeMin": time_min.isoformat(),
            "timeMax": time_max.isoformat(),
            "singleEvents": "true",
            "orderBy": "startTime",
        },
        headers={"Authorization": f"Bearer {access_token}"},
    )
    if response.status_code != 200:
        raise ExternalServiceError(detail="Failed to fetch calendar events", status=response.status_code)
    return response.json().get("items", [])


async def sync_booking_created(host_id: str, details: CalendarEventDetails) -> CreatedEvent:
    """Create the event in the host's default calendar, if one is connected."""
    account = await db.account_get_default(host_id)
    if account is None:
        return CreatedEvent(event_id=None, meet_link=None)
    try:
        async with http.client() as client:
            token = await get_valid_access_token(account, client)
            created = await create_event(token, details, client)
        logger.info("Created calendar event %s for host %s", created.event_id, host_id)
        return created
    except (httpx.HTTPError, ExternalServiceError, EncryptionError) as e:
        logger.error("Failed to create calendar event for host %s: %s", host_id, e)
        return CreatedEvent(event_id=None, meet_link=None)


async def sync_booking_cancelled(host_id: str, event_id: str | None) -> bool:
    """Delete the booking's event; returns False when nothing was deleted."""
    if not event_id:
        return False
    account = await db.account_get_default(host_id)
    if account is None:
        return False
    try:
        async with http.client() as client:
            token = await get_valid_access_token(account, client)
            await delete_event(token, event_id, client)
        logger.info("Deleted calendar event %s for host %s", event_id, host_id)
        return True
    except (httpx.HTTPError, ExternalServiceError, EncryptionError) as e:
        logger.error("Failed to delete calendar event %s for host %s: %s", event_id, host_id, e)
        return False

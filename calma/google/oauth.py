"""Google OAuth 2.0: consent URL, code exchange and token refresh."""

import hashlib
import hmac
import logging
import secrets
import time
from typing import Any
from urllib.parse import urlencode

import httpx

from calma import db
from calma.config import get_settings
from calma.errors import ExternalServiceError
from calma.google.encryption import decrypt, encrypt

logger = logging.getLogger("calma.google")

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"

SCOPES = [
    "https://www.googleapis.com/auth/calendar",
    "https://www.googleapis.com/auth/calendar.events",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/userinfo.profile",
]

# Refresh when fewer than five minutes remain
EXPIRY_MARGIN_MS = 5 * 60 * 1000
DEFAULT_TOKEN_LIFETIME_S = 3600
STATE_MAX_AGE_S = 10 * 60


def _now_ms() -> int:
    return int(time.time() * 1000)


def _sign(payload: str) -> str:
    secret = get_settings().google.client_secret
    return hmac.new(secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).hexdigest()


def make_state(user_id: str, now: int | None = None) -> str:
    """Signed, expiring OAuth ``state`` of the form ``user_id.issued_at.nonce.signature``."""
    issued = now if now is not None else int(time.time())
    payload = f"{user_id}.{issued}.{secrets.token_urlsafe(16)}"
    return f"{payload}.{_sign(payload)}"


def verify_state(state: str, user_id: str, now: int | None = None) -> bool:
    parts = state.split(".")
    if len(parts) != 4:
        return False
    state_user, issued, _, signature = parts
    if not hmac.compare_digest(_sign(".".join(parts[:3])), signature):
        return False
    if state_user != user_id:
        return False
    try:
        age = (now if now is not None else int(time.time())) - int(issued)
    except ValueError:
        return False
    return 0 <= age <= STATE_MAX_AGE_S


def get_auth_url(state: str | None = None) -> str:
    settings = get_settings().google
    params = {
        "client_id": settings.client_id,
        "redirect_uri": settings.redirect_uri,
        "response_type": "code",
        "scope": " ".join(SCOPES),
        "access_type": "offline",
        "prompt": "consent",
    }
    if state:
        params["state"] = state
    return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"


def is_token_expired(expiry_date_ms: int, now_ms: int | None = None) -> bool:
    now = now_ms if now_ms is not None else _now_ms()
    return expiry_date_ms < now + EXPIRY_MARGIN_MS


async def _post_token(client: httpx.AsyncClient, data: dict[str, str]) -> dict[str, Any]:
    settings = get_settings().google
    payload = {
        "client_id": settings.client_id,
        "client_secret": settings.client_secret,
        **data,
    }
    response = await client.post(GOOGLE_TOKEN_URL, data=payload)
    if response.status_code != 200:
        logger.error("Google token request failed: status=%d body=%s", response.status_code, response.text)
        raise ExternalServiceError(detail="Google token request failed", status=response.status_code)
    return response.json()


async def exchange_code(code: str, client: httpx.AsyncClient) -> dict[str, Any]:
    """Trade an authorization code for tokens.

    Returns access_token, refresh_token and expiry_date (epoch milliseconds).
    """
    tokens = await _post_token(
        client,
        {
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": get_settings().google.redirect_uri,
        },
    )
    if not tokens.get("access_token") or not tokens.get("refresh_token"):
        raise ExternalServiceError(detail="Missing tokens from Google")
    return {
        "access_token": tokens["access_token"],
        "refresh_token": tokens["refresh_token"],
        "expiry_date": _now_ms() + int(tokens.get("expires_in", DEFAULT_TOKEN_LIFETIME_S)) * 1000,
    }


async def refresh_access_token(refresh_token: str, client: httpx.AsyncClient) -> dict[str, Any]:
    tokens = await _post_token(client, {"refresh_token": refresh_token, "grant_type": "refresh_token"})
    if not tokens.get("access_token"):
        raise ExternalServiceError(detail="Failed to refresh access token")
    return {
        "access_token": tokens["access_token"],
        # Google only rotates the refresh token occasionally
        "refresh_token": tokens.get("refresh_token") or refresh_token,
        "expiry_date": _now_ms() + int(tokens.get("expires_in", DEFAULT_TOKEN_LIFETIME_S)) * 1000,
    }


async def fetch_user_info(access_token: str, client: httpx.AsyncClient) -> dict[str, Any]:
    response = await client.get(GOOGLE_USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"})
    if response.status_code != 200:
        raise ExternalServiceError(detail="Failed to fetch Google user info", status=response.status_code)
    return response.json()


async def get_valid_access_token(account: dict[str, Any], client: httpx.AsyncClient) -> str:
    """Decrypted access token for a stored account, refreshed and persisted if stale."""
    if not is_token_expired(account["expiry_date"]):
        return decrypt(account["access_token"])

    logger.info("Refreshing Google access token for account %s", account["id"])
    refreshed = await refresh_access_token(decrypt(account["refresh_token"]), client)
    await db.account_update_tokens(
        account["id"],
        encrypt(refreshed["access_token"]),
        encrypt(refreshed["refresh_token"]),
        refreshed["expiry_date"],
    )
    return refreshed["access_token"]

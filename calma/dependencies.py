"""Dependency injection for FastAPI endpoints.

This module provides FastAPI dependencies for accessing shared resources
(the EventBus) and for resolving the authenticated host.

Authentication itself happens upstream: the identity provider's proxy
forwards ``X-User-Id`` and, for first-time users, ``X-User-Email`` and
``X-User-Name``.

Usage in controllers:
    from calma.dependencies import CurrentUser

    @router.get("/me")
    async def me(user: CurrentUser):
        return user
"""

import logging
from typing import Annotated, Any

from fastapi import Depends, Header

from calma import db, state
from calma.bus import EventBus
from calma.errors import ForbiddenError, UnauthorizedError
from calma.slugs import user_slug

logger = logging.getLogger("calma.auth")


def get_optional_event_bus() -> EventBus | None:
    """Get the EventBus if available, or None."""
    return state.event_bus


async def get_current_user(
    x_user_id: Annotated[str | None, Header()] = None,
    x_user_email: Annotated[str | None, Header()] = None,
    x_user_name: Annotated[str | None, Header()] = None,
) -> dict[str, Any]:
    """Resolve the host for the request, creating the row on first contact.

    Raises:
        UnauthorizedError: If no identity was forwarded.
    """
    if not x_user_id:
        raise UnauthorizedError(detail="Not authenticated")

    user = await db.user_get_by_external_id(x_user_id)
    if user is not None:
        return user

    if not x_user_email:
        raise UnauthorizedError(detail="Missing identity details for new user")
    name = (x_user_name or "").strip() or "user"
    user = await db.user_create(
        external_id=x_user_id,
        email=x_user_email,
        name=name,
        slug=user_slug(name, x_user_id),
    )
    logger.info("Created user %s for identity %s", user["id"], x_user_id)
    return user


async def get_admin_user(user: Annotated[dict[str, Any], Depends(get_current_user)]) -> dict[str, Any]:
    if not user.get("is_admin"):
        raise ForbiddenError(detail="Admin access required")
    return user


OptionalBus = Annotated[EventBus | None, Depends(get_optional_event_bus)]
CurrentUser = Annotated[dict[str, Any], Depends(get_current_user)]
AdminUser = Annotated[dict[str, Any], Depends(get_admin_user)]

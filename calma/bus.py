"""
Event bus for booking lifecycle notifications, backed by Redis pub/sub.
"""
import json
import logging
from datetime import UTC, datetime
from typing import Any, Final

import redis.asyncio as redis
from redis.exceptions import RedisError

from calma.events import BookingEvent, BookingSnapshot

CHANNEL_BOOKINGS_PREFIX: Final[str] = "bookings:"

logger = logging.getLogger("calma.bus")


def booking_snapshot(booking: dict[str, Any]) -> BookingSnapshot:
    return {
        "id": booking["id"],
        "meeting_type_id": booking["meeting_type_id"],
        "guest_name": booking["guest_name"],
        "guest_email": booking["guest_email"],
        "start_time": booking["start_time"].isoformat(),
        "end_time": booking["end_time"].isoformat(),
    }


def now_iso() -> str:
    return datetime.now(UTC).isoformat()


class EventBus:
    def __init__(self, redis_client: redis.Redis):
        self.redis_client = redis_client

    @staticmethod
    def host_channel(host_id: str) -> str:
        return f"{CHANNEL_BOOKINGS_PREFIX}{host_id}"

    async def publish(self, event: BookingEvent) -> None:
        """Publish to the host's channel. Delivery is best effort."""
        logger.debug("bus.publish type=%s host=%s", event["type"], event["host_id"])
        try:
            await self.redis_client.publish(self.host_channel(event["host_id"]), json.dumps(event))
        except RedisError as e:
            logger.warning("Failed to publish %s for host %s: %s", event["type"], event["host_id"], e)

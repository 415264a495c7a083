"""Application startup and shutdown.

Redis (for the booking event bus) and the PostgreSQL pool are optional at
startup: each is controlled by a feature flag, and a failure to connect
is logged rather than preventing the API from serving.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import psycopg
import redis.asyncio as redis
from fastapi import FastAPI
from redis.asyncio import BlockingConnectionPool as RedisConnectionPool

from calma import db, state
from calma.bus import EventBus
from calma.config import get_settings

logger = logging.getLogger(__name__)


@dataclass
class LifespanResources:
    """Container for resources initialized during lifespan."""

    redis_client: redis.Redis | None = None
    event_bus: EventBus | None = None
    db_enabled: bool = False


def init_redis() -> redis.Redis:
    """Build a Redis client over a blocking connection pool."""
    settings = get_settings()

    redis_pool = RedisConnectionPool(
        host=settings.redis.host,
        port=settings.redis.port,
        password=settings.redis.password or None,
        max_connections=settings.redis.max_connections,
        timeout=settings.redis.pool_timeout_sec,
        health_check_interval=settings.redis.health_check_interval,
        socket_timeout=settings.redis.socket_timeout,
        socket_connect_timeout=settings.redis.socket_connect_timeout,
        retry_on_timeout=settings.redis.retry_on_timeout,
        decode_responses=True,
    )
    if settings.debug.redis:
        logging.getLogger("calma.bus").setLevel(logging.DEBUG)
    return redis.Redis(connection_pool=redis_pool)


async def init_database() -> bool:
    """Open the pool and apply migrations. Returns False if the database is unreachable."""
    try:
        await db.init_pool()
        return True
    except (psycopg.Error, OSError) as e:
        logger.warning("Failed to initialize database: %s", e)
        return False


async def setup_resources() -> LifespanResources:
    settings = get_settings()
    resources = LifespanResources()

    if settings.features.redis:
        resources.redis_client = init_redis()
        resources.event_bus = EventBus(resources.redis_client)

    if settings.features.db:
        resources.db_enabled = await init_database()

    state.redis_client = resources.redis_client
    state.event_bus = resources.event_bus
    return resources


async def cleanup_resources(resources: LifespanResources) -> None:
    if resources.db_enabled:
        await db.close_pool()

    if resources.redis_client:
        await resources.redis_client.aclose()

    state.redis_client = None
    state.event_bus = None


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    resources = await setup_resources()
    try:
        yield
    finally:
        await cleanup_resources(resources)

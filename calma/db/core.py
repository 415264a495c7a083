"""Core database connection pool management."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import psycopg
from psycopg import errors as pg_errors
from psycopg_pool import AsyncConnectionPool

from calma.config import get_settings
from calma.errors import ConflictError, DatabaseError, ServiceUnavailableError

_logger = logging.getLogger(__name__)

_pool: AsyncConnectionPool | None = None


def _get_dsn() -> str:
    return get_settings().postgres.get_dsn()


async def init_pool() -> None:
    global _pool
    if _pool is not None:
        return
    settings = get_settings().postgres
    _pool = AsyncConnectionPool(
        settings.get_dsn(),
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
        timeout=settings.pool_timeout,
        max_lifetime=settings.pool_max_lifetime,
        max_idle=settings.pool_max_idle,
        reconnect_timeout=settings.pool_reconnect_timeout,
        check=AsyncConnectionPool.check_connection,
        open=False,
    )
    await _pool.open()
    _logger.info(
        "Database connection pool initialized (min=%d, max=%d, timeout=%ds)",
        settings.pool_min_size,
        settings.pool_max_size,
        settings.pool_timeout,
    )
    # Import here to avoid circular imports
    from calma.db.schema import _ensure_schema

    await _ensure_schema()


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
        _logger.info("Database connection pool closed")


@asynccontextmanager
async def _get_connection(autocommit: bool = True) -> AsyncIterator[psycopg.AsyncConnection]:
    if _pool is not None:
        async with _pool.connection() as conn:
            if autocommit:
                await conn.set_autocommit(True)
            yield conn
    else:
        async with await psycopg.AsyncConnection.connect(_get_dsn(), autocommit=autocommit) as conn:
            yield conn


@asynccontextmanager
async def _transaction() -> AsyncIterator[psycopg.AsyncConnection]:
    """Connection whose statements commit or roll back together."""
    async with _get_connection(autocommit=False) as conn:
        async with conn.transaction():
            yield conn


@asynccontextmanager
async def translate_errors(operation: str) -> AsyncIterator[None]:
    """Map psycopg failures onto API errors for the controllers."""
    try:
        yield
    except (pg_errors.ExclusionViolation, pg_errors.UniqueViolation, pg_errors.ForeignKeyViolation) as e:
        _logger.info("%s conflicted: %s", operation, e.diag.constraint_name)
        raise ConflictError(
            detail=f"{operation} conflicts with existing data",
            constraint=e.diag.constraint_name,
        ) from e
    except psycopg.OperationalError as e:
        _logger.error("%s failed, database unavailable: %s", operation, e)
        raise ServiceUnavailableError(detail="Database unavailable") from e
    except psycopg.Error as e:
        _logger.exception("%s failed", operation)
        raise DatabaseError(detail=f"{operation} failed") from e


def get_pool() -> AsyncConnectionPool | None:
    return _pool


def get_pool_stats() -> dict[str, object]:
    """Get current pool statistics for monitoring."""
    if _pool is None:
        return {"status": "not_initialized"}
    stats = _pool.get_stats()
    return {
        "status": "active",
        "size": stats.get("pool_size", 0),
        "available": stats.get("pool_available", 0),
        "waiting": stats.get("requests_waiting", 0),
    }


__all__ = [
    "_get_connection",
    "_get_dsn",
    "_transaction",
    "close_pool",
    "get_pool",
    "get_pool_stats",
    "init_pool",
    "translate_errors",
]

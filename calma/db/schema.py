"""Schema bootstrap: brings the database up to the latest migration on startup."""

import logging

from calma.db.migrations import get_current_version, run_migrations

logger = logging.getLogger(__name__)


async def _ensure_schema() -> None:
    """Apply pending migrations. Safe to call on every startup."""
    current_version = await get_current_version()
    applied = await run_migrations()

    if applied > 0:
        logger.info("Schema updated from version %d to %d", current_version, await get_current_version())
    else:
        logger.debug("Schema is up to date at version %d", current_version)

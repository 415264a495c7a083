from datetime import UTC, datetime
from typing import Any

from psycopg import errors as pg_errors

from calma.db.core import _get_connection

_USER_COLUMNS = "id, external_id, email, name, slug, timezone, subscription_tier, is_admin, created_at, updated_at"


def _row_to_user(row: tuple) -> dict[str, Any]:
    return {
        "id": str(row[0]),
        "external_id": row[1],
        "email": row[2],
        "name": row[3],
        "slug": row[4],
        "timezone": row[5],
        "subscription_tier": row[6],
        "is_admin": row[7],
        "created_at": row[8].astimezone(UTC).isoformat(),
        "updated_at": row[9].astimezone(UTC).isoformat(),
    }


async def user_get_by_external_id(external_id: str) -> dict[str, Any] | None:
    async with _get_connection() as conn:
        row = await (
            await conn.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE external_id = %s", (external_id,))
        ).fetchone()
        return _row_to_user(row) if row else None


async def user_get(user_id: str) -> dict[str, Any] | None:
    async with _get_connection() as conn:
        row = await (
            await conn.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE id = %s", (user_id,))
        ).fetchone()
        return _row_to_user(row) if row else None


async def user_get_by_slug(slug: str) -> dict[str, Any] | None:
    async with _get_connection() as conn:
        row = await (
            await conn.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE slug = %s", (slug,))
        ).fetchone()
        return _row_to_user(row) if row else None


async def user_create(external_id: str, email: str, name: str, slug: str) -> dict[str, Any]:
    """Insert a host, returning the existing row if another request won the race."""
    async with _get_connection() as conn:
        try:
            row = await (
                await conn.execute(
                    f"""INSERT INTO users (external_id, email, name, slug)
                        VALUES (%s, %s, %s, %s)
                        RETURNING {_USER_COLUMNS}""",
                    (external_id, email, name, slug),
                )
            ).fetchone()
            return _row_to_user(row)
        except pg_errors.UniqueViolation:
            row = await (
                await conn.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE external_id = %s", (external_id,))
            ).fetchone()
            if row is None:
                raise
            return _row_to_user(row)


async def user_slug_taken(slug: str, exclude_user_id: str | None = None) -> bool:
    async with _get_connection() as conn:
        if exclude_user_id:
            rows = await conn.execute(
                "SELECT 1 FROM users WHERE slug = %s AND id <> %s", (slug, exclude_user_id)
            )
        else:
            rows = await conn.execute("SELECT 1 FROM users WHERE slug = %s", (slug,))
        return await rows.fetchone() is not None


async def user_update(user_id: str, fields: dict[str, Any]) -> dict[str, Any] | None:
    """Update the given columns; keys must be among name, slug and timezone."""
    allowed = {k: v for k, v in fields.items() if k in ("name", "slug", "timezone")}
    if not allowed:
        return await user_get(user_id)
    assignments = ", ".join(f"{column} = %s" for column in allowed)
    params = [*allowed.values(), datetime.now(UTC), user_id]
    async with _get_connection() as conn:
        row = await (
            await conn.execute(
                f"UPDATE users SET {assignments}, updated_at = %s WHERE id = %s RETURNING {_USER_COLUMNS}",
                params,
            )
        ).fetchone()
        return _row_to_user(row) if row else None

from datetime import UTC
from typing import Any

from calma.db.core import _get_connection, _transaction

_COLUMNS = "id, user_id, name, slug, duration_minutes, description, is_default, is_active, created_at"
_UPDATABLE = ("name", "slug", "duration_minutes", "description", "is_active")


def _row_to_meeting_type(row: tuple) -> dict[str, Any]:
    return {
        "id": str(row[0]),
        "user_id": str(row[1]),
        "name": row[2],
        "slug": row[3],
        "duration_minutes": row[4],
        "description": row[5],
        "is_default": row[6],
        "is_active": row[7],
        "created_at": row[8].astimezone(UTC).isoformat(),
    }


async def meeting_types_list(user_id: str, active_only: bool = False) -> list[dict[str, Any]]:
    sql = f"SELECT {_COLUMNS} FROM meeting_types WHERE user_id = %s"
    if active_only:
        sql += " AND is_active"
        sql += " ORDER BY is_default DESC, name"
    else:
        sql += " ORDER BY is_default DESC, created_at"
    async with _get_connection() as conn:
        rows = await conn.execute(sql, (user_id,))
        return [_row_to_meeting_type(row) async for row in rows]


async def meeting_type_get(user_id: str, meeting_type_id: str) -> dict[str, Any] | None:
    async with _get_connection() as conn:
        row = await (
            await conn.execute(
                f"SELECT {_COLUMNS} FROM meeting_types WHERE id = %s AND user_id = %s",
                (meeting_type_id, user_id),
            )
        ).fetchone()
        return _row_to_meeting_type(row) if row else None


async def meeting_type_get_by_slug(user_id: str, slug: str, active_only: bool = True) -> dict[str, Any] | None:
    sql = f"SELECT {_COLUMNS} FROM meeting_types WHERE user_id = %s AND slug = %s"
    if active_only:
        sql += " AND is_active"
    async with _get_connection() as conn:
        row = await (await conn.execute(sql, (user_id, slug))).fetchone()
        return _row_to_meeting_type(row) if row else None


async def meeting_type_slug_taken(user_id: str, slug: str, exclude_id: str | None = None) -> bool:
    sql = "SELECT 1 FROM meeting_types WHERE user_id = %s AND slug = %s"
    params: list[Any] = [user_id, slug]
    if exclude_id:
        sql += " AND id <> %s"
        params.append(exclude_id)
    async with _get_connection() as conn:
        return await (await conn.execute(sql, params)).fetchone() is not None


async def meeting_type_create(
    user_id: str,
    name: str,
    slug: str,
    duration_minutes: int,
    description: str | None = None,
) -> dict[str, Any]:
    """Insert a meeting type; the host's first one becomes the default."""
    async with _transaction() as conn:
        row = await (
            await conn.execute("SELECT COUNT(*) FROM meeting_types WHERE user_id = %s", (user_id,))
        ).fetchone()
        is_first = row[0] == 0
        created = await (
            await conn.execute(
                f"""INSERT INTO meeting_types (user_id, name, slug, duration_minutes, description, is_default, is_active)
                    VALUES (%s, %s, %s, %s, %s, %s, TRUE)
                    RETURNING {_COLUMNS}""",
                (user_id, name, slug, duration_minutes, description, is_first),
            )
        ).fetchone()
        return _row_to_meeting_type(created)


async def meeting_type_update(user_id: str, meeting_type_id: str, fields: dict[str, Any]) -> dict[str, Any] | None:
    changes = {k: v for k, v in fields.items() if k in _UPDATABLE}
    if not changes:
        return await meeting_type_get(user_id, meeting_type_id)
    assignments = ", ".join(f"{column} = %s" for column in changes)
    async with _get_connection() as conn:
        row = await (
            await conn.execute(
                f"UPDATE meeting_types SET {assignments} WHERE id = %s AND user_id = %s RETURNING {_COLUMNS}",
                [*changes.values(), meeting_type_id, user_id],
            )
        ).fetchone()
        return _row_to_meeting_type(row) if row else None


async def meeting_type_delete(user_id: str, meeting_type_id: str) -> bool:
    async with _get_connection() as conn:
        cur = await conn.execute(
            "DELETE FROM meeting_types WHERE id = %s AND user_id = %s", (meeting_type_id, user_id)
        )
        return cur.rowcount > 0


async def meeting_type_set_default(user_id: str, meeting_type_id: str) -> bool:
    async with _transaction() as conn:
        found = await (
            await conn.execute(
                "SELECT 1 FROM meeting_types WHERE id = %s AND user_id = %s", (meeting_type_id, user_id)
            )
        ).fetchone()
        if found is None:
            return False
        await conn.execute(
            "UPDATE meeting_types SET is_default = (id = %s) WHERE user_id = %s",
            (meeting_type_id, user_id),
        )
        return True

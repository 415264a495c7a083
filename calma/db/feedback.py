from datetime import UTC
from typing import Any

from calma.db.core import _get_connection


def _row_to_feedback(row: tuple) -> dict[str, Any]:
    return {
        "id": str(row[0]),
        "user_id": str(row[1]) if row[1] else None,
        "content": row[2],
        "archived": row[3],
        "created_at": row[4].astimezone(UTC).isoformat(),
    }


async def feedback_create(user_id: str | None, content: str) -> dict[str, Any]:
    async with _get_connection() as conn:
        row = await (
            await conn.execute(
                "INSERT INTO feedback (user_id, content) VALUES (%s, %s) "
                "RETURNING id, user_id, content, archived, created_at",
                (user_id, content),
            )
        ).fetchone()
        return _row_to_feedback(row)


async def feedback_list(include_archived: bool = False) -> list[dict[str, Any]]:
    sql = "SELECT id, user_id, content, archived, created_at FROM feedback"
    if not include_archived:
        sql += " WHERE NOT archived"
    sql += " ORDER BY created_at DESC"
    async with _get_connection() as conn:
        rows = await conn.execute(sql)
        return [_row_to_feedback(row) async for row in rows]


async def feedback_archive(feedback_id: str) -> bool:
    async with _get_connection() as conn:
        cur = await conn.execute("UPDATE feedback SET archived = TRUE WHERE id = %s", (feedback_id,))
        return cur.rowcount > 0

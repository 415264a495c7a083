from datetime import UTC
from typing import Any

from calma.db.core import _get_connection, _transaction

_COLUMNS = "id, user_id, day_of_week, start_time, end_time, created_at"


def _row_to_block(row: tuple) -> dict[str, Any]:
    return {
        "id": str(row[0]),
        "user_id": str(row[1]),
        "day_of_week": row[2],
        "start_time": row[3].strftime("%H:%M"),
        "end_time": row[4].strftime("%H:%M"),
        "created_at": row[5].astimezone(UTC).isoformat(),
    }


async def availability_list(user_id: str, day_of_week: int | None = None) -> list[dict[str, Any]]:
    sql = f"SELECT {_COLUMNS} FROM availability WHERE user_id = %s"
    params: list[Any] = [user_id]
    if day_of_week is not None:
        sql += " AND day_of_week = %s"
        params.append(day_of_week)
    sql += " ORDER BY day_of_week, start_time"
    async with _get_connection() as conn:
        rows = await conn.execute(sql, params)
        return [_row_to_block(row) async for row in rows]


async def availability_create(user_id: str, day_of_week: int, start_time: str, end_time: str) -> dict[str, Any]:
    async with _get_connection() as conn:
        row = await (
            await conn.execute(
                f"""INSERT INTO availability (user_id, day_of_week, start_time, end_time)
                    VALUES (%s, %s, %s, %s)
                    RETURNING {_COLUMNS}""",
                (user_id, day_of_week, start_time, end_time),
            )
        ).fetchone()
        return _row_to_block(row)


async def availability_get(user_id: str, block_id: str) -> dict[str, Any] | None:
    async with _get_connection() as conn:
        row = await (
            await conn.execute(
                f"SELECT {_COLUMNS} FROM availability WHERE id = %s AND user_id = %s",
                (block_id, user_id),
            )
        ).fetchone()
        return _row_to_block(row) if row else None


async def availability_update(
    user_id: str, block_id: str, start_time: str, end_time: str
) -> dict[str, Any] | None:
    async with _get_connection() as conn:
        row = await (
            await conn.execute(
                f"""UPDATE availability SET start_time = %s, end_time = %s
                    WHERE id = %s AND user_id = %s
                    RETURNING {_COLUMNS}""",
                (start_time, end_time, block_id, user_id),
            )
        ).fetchone()
        return _row_to_block(row) if row else None


async def availability_delete(user_id: str, block_id: str) -> bool:
    async with _get_connection() as conn:
        cur = await conn.execute(
            "DELETE FROM availability WHERE id = %s AND user_id = %s", (block_id, user_id)
        )
        return cur.rowcount > 0


async def availability_copy_day(user_id: str, source_day: int, target_days: list[int]) -> int:
    """Replace the target days' blocks with copies of the source day's blocks.

    Returns the number of blocks inserted; 0 when the source day is empty,
    in which case nothing is changed.
    """
    async with _transaction() as conn:
        rows = await conn.execute(
            "SELECT start_time, end_time FROM availability WHERE user_id = %s AND day_of_week = %s",
            (user_id, source_day),
        )
        source = [(row[0], row[1]) async for row in rows]
        if not source:
            return 0
        await conn.execute(
            "DELETE FROM availability WHERE user_id = %s AND day_of_week = ANY(%s)",
            (user_id, target_days),
        )
        inserted = 0
        for day in target_days:
            for start_time, end_time in source:
                await conn.execute(
                    "INSERT INTO availability (user_id, day_of_week, start_time, end_time) VALUES (%s, %s, %s, %s)",
                    (user_id, day, start_time, end_time),
                )
                inserted += 1
        return inserted

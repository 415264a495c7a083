from datetime import UTC, date, datetime, time, timedelta, tzinfo
from typing import Any

from calma.db.core import _get_connection
from calma.errors import DatabaseError

_COLUMNS = (
    "b.id, b.host_id, b.meeting_type_id, b.guest_name, b.guest_email, b.guest_timezone, "
    "b.start_time, b.end_time, b.notes, b.google_event_id, b.meet_link, b.status, b.created_at, "
    "mt.name, COALESCE(mt.duration_minutes, (EXTRACT(EPOCH FROM b.end_time - b.start_time) / 60)::int)"
)
# meeting_type_id is NULL once a meeting type with only cancelled bookings is deleted
_FROM = "FROM bookings b LEFT JOIN meeting_types mt ON mt.id = b.meeting_type_id"


def _row_to_booking(row: tuple) -> dict[str, Any]:
    return {
        "id": str(row[0]),
        "host_id": str(row[1]),
        "meeting_type_id": str(row[2]) if row[2] else None,
        "guest_name": row[3],
        "guest_email": row[4],
        "guest_timezone": row[5],
        "start_time": row[6],
        "end_time": row[7],
        "notes": row[8],
        "google_event_id": row[9],
        "meet_link": row[10],
        "status": row[11],
        "created_at": row[12].astimezone(UTC).isoformat(),
        "meeting_type_name": row[13],
        "duration_minutes": row[14],
    }


async def bookings_list(host_id: str, status: str | None = None) -> list[dict[str, Any]]:
    sql = f"SELECT {_COLUMNS} {_FROM} WHERE b.host_id = %s"
    params: list[Any] = [host_id]
    if status:
        sql += " AND b.status = %s"
        params.append(status)
    sql += " ORDER BY b.start_time DESC"
    async with _get_connection() as conn:
        rows = await conn.execute(sql, params)
        return [_row_to_booking(row) async for row in rows]


async def booking_get(booking_id: str, host_id: str | None = None) -> dict[str, Any] | None:
    sql = f"SELECT {_COLUMNS} {_FROM} WHERE b.id = %s"
    params: list[Any] = [booking_id]
    if host_id:
        sql += " AND b.host_id = %s"
        params.append(host_id)
    async with _get_connection() as conn:
        row = await (await conn.execute(sql, params)).fetchone()
        return _row_to_booking(row) if row else None


async def bookings_for_day(
    host_id: str,
    day: date,
    tz: tzinfo,
    exclude_booking_id: str | None = None,
) -> list[dict[str, Any]]:
    """Confirmed bookings intersecting the host-local calendar day."""
    day_start = datetime.combine(day, time.min, tzinfo=tz)
    day_end = day_start + timedelta(days=1)
    sql = (
        "SELECT id, start_time, end_time, status FROM bookings "
        "WHERE host_id = %s AND status = 'confirmed' AND start_time < %s AND end_time > %s"
    )
    params: list[Any] = [host_id, day_end, day_start]
    if exclude_booking_id:
        sql += " AND id <> %s"
        params.append(exclude_booking_id)
    async with _get_connection() as conn:
        rows = await conn.execute(sql, params)
        return [
            {"id": str(row[0]), "start_time": row[1], "end_time": row[2], "status": row[3]}
            async for row in rows
        ]


async def bookings_count_since(host_id: str, since: datetime) -> int:
    async with _get_connection() as conn:
        row = await (
            await conn.execute(
                "SELECT COUNT(*) FROM bookings WHERE host_id = %s AND created_at >= %s",
                (host_id, since),
            )
        ).fetchone()
        return int(row[0]) if row else 0


async def bookings_count_confirmed_for_meeting_type(meeting_type_id: str) -> int:
    async with _get_connection() as conn:
        row = await (
            await conn.execute(
                "SELECT COUNT(*) FROM bookings WHERE meeting_type_id = %s AND status = 'confirmed'",
                (meeting_type_id,),
            )
        ).fetchone()
        return int(row[0]) if row else 0


async def booking_create(
    host_id: str,
    meeting_type_id: str,
    guest_name: str,
    guest_email: str,
    guest_timezone: str,
    start_time: datetime,
    end_time: datetime,
    notes: str | None = None,
    google_event_id: str | None = None,
    meet_link: str | None = None,
) -> dict[str, Any]:
    async with _get_connection() as conn:
        row = await (
            await conn.execute(
                """INSERT INTO bookings (host_id, meeting_type_id, guest_name, guest_email, guest_timezone,
                                         start_time, end_time, notes, google_event_id, meet_link, status)
                   VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, 'confirmed')
                   RETURNING id""",
                (
                    host_id,
                    meeting_type_id,
                    guest_name,
                    guest_email,
                    guest_timezone,
                    start_time,
                    end_time,
                    notes,
                    google_event_id,
                    meet_link,
                ),
            )
        ).fetchone()
    booking = await booking_get(str(row[0]))
    if booking is None:
        raise DatabaseError(detail="Booking vanished after insert")
    return booking


async def booking_set_status(booking_id: str, status: str) -> bool:
    async with _get_connection() as conn:
        cur = await conn.execute("UPDATE bookings SET status = %s WHERE id = %s", (status, booking_id))
        return cur.rowcount > 0


async def booking_reschedule(
    booking_id: str,
    start_time: datetime,
    end_time: datetime,
    google_event_id: str | None,
    meet_link: str | None,
) -> dict[str, Any] | None:
    async with _get_connection() as conn:
        cur = await conn.execute(
            """UPDATE bookings SET start_time = %s, end_time = %s, google_event_id = %s, meet_link = %s
               WHERE id = %s AND status = 'confirmed'""",
            (start_time, end_time, google_event_id, meet_link, booking_id),
        )
        if cur.rowcount == 0:
            return None
    return await booking_get(booking_id)

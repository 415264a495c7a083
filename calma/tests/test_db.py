from datetime import UTC, date, datetime, time
from zoneinfo import ZoneInfo

import pytest

from conftest import BOOKING_ID, HOST_ID, MEETING_TYPE_ID

CREATED = datetime(2026, 3, 1, tzinfo=UTC)


def _booking_row(status="confirmed"):
    return (
        BOOKING_ID,
        HOST_ID,
        MEETING_TYPE_ID,
        "Grace",
        "grace@example.com",
        "UTC",
        datetime(2026, 3, 3, 10, 0, tzinfo=UTC),
        datetime(2026, 3, 3, 10, 30, tzinfo=UTC),
        None,
        "evt-1",
        "https://meet.google.com/abc",
        status,
        CREATED,
        "Intro Call",
        30,
    )


class TestUsers:
    @pytest.mark.asyncio
    async def test_user_create_maps_row(self, pg):
        pg([(HOST_ID, "user_1", "ada@example.com", "Ada", "ada-user1", "UTC", "free", False, CREATED, CREATED)])

        from calma.db import user_create

        user = await user_create("user_1", "ada@example.com", "Ada", "ada-user1")

        assert user["id"] == HOST_ID
        assert user["slug"] == "ada-user1"
        assert user["subscription_tier"] == "free"
        assert user["created_at"] == "2026-03-01T00:00:00+00:00"

    @pytest.mark.asyncio
    async def test_user_update_ignores_unknown_fields(self, pg):
        conn = pg([(HOST_ID, "user_1", "ada@example.com", "Ada", "ada", "Europe/Berlin", "free", False, CREATED, CREATED)])

        from calma.db import user_update

        user = await user_update(HOST_ID, {"timezone": "Europe/Berlin", "is_admin": True})

        sql, params = conn.executed[0]
        set_clause = sql.split("RETURNING")[0]
        assert "timezone = %s" in set_clause
        assert "is_admin" not in set_clause
        assert params[0] == "Europe/Berlin"
        assert params[-1] == HOST_ID
        assert len(params) == 3
        assert user["timezone"] == "Europe/Berlin"

    @pytest.mark.asyncio
    async def test_slug_taken(self, pg):
        pg([(1,)])

        from calma.db import user_slug_taken

        assert await user_slug_taken("ada", exclude_user_id=HOST_ID) is True


class TestAvailability:
    @pytest.mark.asyncio
    async def test_list_formats_times(self, pg):
        pg([("b1", HOST_ID, 2, time(9, 0), time(17, 30), CREATED)])

        from calma.db import availability_list

        blocks = await availability_list(HOST_ID)

        assert blocks == [
            {
                "id": "b1",
                "user_id": HOST_ID,
                "day_of_week": 2,
                "start_time": "09:00",
                "end_time": "17:30",
                "created_at": "2026-03-01T00:00:00+00:00",
            }
        ]

    @pytest.mark.asyncio
    async def test_copy_day_with_empty_source_changes_nothing(self, pg):
        conn = pg([])

        from calma.db import availability_copy_day

        assert await availability_copy_day(HOST_ID, 1, [2, 3]) == 0
        assert not any(sql.startswith("DELETE") for sql, _ in conn.executed)

    @pytest.mark.asyncio
    async def test_copy_day_replaces_targets(self, pg):
        conn = pg([(time(9, 0), time(12, 0)), (time(13, 0), time(17, 0))])

        from calma.db import availability_copy_day

        assert await availability_copy_day(HOST_ID, 1, [2, 3]) == 4
        statements = [sql for sql, _ in conn.executed]
        assert statements[1].startswith("DELETE FROM availability")
        assert sum(s.startswith("INSERT INTO availability") for s in statements) == 4


class TestBookings:
    @pytest.mark.asyncio
    async def test_bookings_for_day_uses_host_local_day(self, pg):
        conn = pg([])

        from calma.db import bookings_for_day

        await bookings_for_day(HOST_ID, date(2026, 3, 3), ZoneInfo("Europe/Berlin"))

        sql, params = conn.executed[0]
        assert "status = 'confirmed'" in sql
        day_end, day_start = params[1], params[2]
        assert day_start == datetime(2026, 3, 2, 23, 0, tzinfo=UTC)
        assert day_end == datetime(2026, 3, 3, 23, 0, tzinfo=UTC)

    @pytest.mark.asyncio
    async def test_bookings_for_day_can_exclude_a_booking(self, pg):
        conn = pg([])

        from calma.db import bookings_for_day

        await bookings_for_day(HOST_ID, date(2026, 3, 3), ZoneInfo("UTC"), exclude_booking_id=BOOKING_ID)

        sql, params = conn.executed[0]
        assert "id <> %s" in sql
        assert params[-1] == BOOKING_ID

    @pytest.mark.asyncio
    async def test_booking_create_returns_joined_row(self, pg):
        pg([(BOOKING_ID,)], [_booking_row()])

        from calma.db import booking_create

        booking = await booking_create(
            host_id=HOST_ID,
            meeting_type_id=MEETING_TYPE_ID,
            guest_name="Grace",
            guest_email="grace@example.com",
            guest_timezone="UTC",
            start_time=datetime(2026, 3, 3, 10, 0, tzinfo=UTC),
            end_time=datetime(2026, 3, 3, 10, 30, tzinfo=UTC),
        )

        assert booking["id"] == BOOKING_ID
        assert booking["meeting_type_name"] == "Intro Call"
        assert booking["duration_minutes"] == 30
        assert booking["meet_link"] == "https://meet.google.com/abc"

    @pytest.mark.asyncio
    async def test_booking_of_deleted_meeting_type(self, pg):
        row = _booking_row(status="cancelled")
        conn = pg([(*row[:2], None, *row[3:13], None, 30)])

        from calma.db import booking_get

        booking = await booking_get(BOOKING_ID)

        assert "LEFT JOIN meeting_types" in conn.executed[0][0]
        assert booking["meeting_type_id"] is None
        assert booking["meeting_type_name"] is None
        assert booking["duration_minutes"] == 30

    @pytest.mark.asyncio
    async def test_reschedule_only_confirmed(self, pg):
        pg(0)

        from calma.db import booking_reschedule

        result = await booking_reschedule(
            BOOKING_ID,
            datetime(2026, 3, 4, 10, 0, tzinfo=UTC),
            datetime(2026, 3, 4, 10, 30, tzinfo=UTC),
            None,
            None,
        )
        assert result is None

    @pytest.mark.asyncio
    async def test_count_since(self, pg):
        pg([(3,)])

        from calma.db import bookings_count_since

        assert await bookings_count_since(HOST_ID, CREATED) == 3


class TestMeetingTypes:
    @pytest.mark.asyncio
    async def test_first_meeting_type_becomes_default(self, pg):
        conn = pg([(0,)], [(MEETING_TYPE_ID, HOST_ID, "Intro", "intro", 30, None, True, True, CREATED)])

        from calma.db import meeting_type_create

        meeting_type = await meeting_type_create(HOST_ID, "Intro", "intro", 30)

        assert meeting_type["is_default"] is True
        assert conn.executed[1][1][5] is True

    @pytest.mark.asyncio
    async def test_set_default_unknown_id(self, pg):
        conn = pg([])

        from calma.db import meeting_type_set_default

        assert await meeting_type_set_default(HOST_ID, MEETING_TYPE_ID) is False
        assert len(conn.executed) == 1


class TestTranslateErrors:
    @pytest.mark.asyncio
    async def test_operational_error_is_service_unavailable(self):
        import psycopg

        from calma.db import translate_errors
        from calma.errors import ServiceUnavailableError

        with pytest.raises(ServiceUnavailableError):
            async with translate_errors("Booking"):
                raise psycopg.OperationalError("connection refused")

    @pytest.mark.asyncio
    async def test_other_errors_are_database_errors(self):
        import psycopg

        from calma.db import translate_errors
        from calma.errors import DatabaseError

        with pytest.raises(DatabaseError):
            async with translate_errors("Booking"):
                raise psycopg.DataError("bad value")

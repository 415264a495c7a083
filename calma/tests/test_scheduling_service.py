from datetime import UTC, date, datetime
from unittest.mock import AsyncMock

import pytest

from calma import db
from calma.errors import BadRequestError, ConflictError
from calma.scheduling import service

from conftest import make_meeting_type, make_user

# Sunday; 2026-03-03 is the following Tuesday
NOW = datetime(2026, 3, 1, 8, 0, tzinfo=UTC)
TUESDAY = date(2026, 3, 3)


def _block(day_of_week=2, start="09:00", end="12:00"):
    return {"id": "b1", "user_id": "u", "day_of_week": day_of_week, "start_time": start, "end_time": end}


@pytest.fixture
def schedule(monkeypatch):
    def install(blocks, bookings=()):
        monkeypatch.setattr(db, "availability_list", AsyncMock(return_value=list(blocks)))
        for_day = AsyncMock(return_value=list(bookings))
        monkeypatch.setattr(db, "bookings_for_day", for_day)
        return for_day

    return install


class TestAvailableDates:
    @pytest.mark.asyncio
    async def test_dates_and_weekdays(self, schedule):
        schedule([_block(2), _block(4)])

        result = await service.get_available_dates(make_user(), now=NOW)

        assert result["timezone"] == "UTC"
        assert result["available_days_of_week"] == [2, 4]
        assert result["available_dates"][:2] == ["2026-03-03", "2026-03-05"]


class TestAvailableSlots:
    @pytest.mark.asyncio
    async def test_removes_booked_slot(self, schedule):
        schedule(
            [_block()],
            [{"id": "x", "start_time": datetime(2026, 3, 3, 10, tzinfo=UTC), "end_time": datetime(2026, 3, 3, 11, tzinfo=UTC), "status": "confirmed"}],
        )

        slots = await service.get_available_slots(make_user(), make_meeting_type(duration_minutes=60), TUESDAY, now=NOW)

        assert slots == ["09:00", "11:00"]

    @pytest.mark.asyncio
    async def test_past_dates_have_no_slots(self, schedule):
        for_day = schedule([_block()])

        slots = await service.get_available_slots(make_user(), make_meeting_type(), date(2026, 2, 24), now=NOW)

        assert slots == []
        for_day.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_beyond_horizon_has_no_slots(self, schedule):
        schedule([_block()])

        slots = await service.get_available_slots(make_user(), make_meeting_type(), date(2026, 4, 7), now=NOW)

        assert slots == []

    @pytest.mark.asyncio
    async def test_excluded_booking_is_passed_through(self, schedule):
        for_day = schedule([_block()])

        await service.get_available_slots(make_user(), make_meeting_type(), TUESDAY, now=NOW, exclude_booking_id="b-1")

        assert for_day.await_args.kwargs["exclude_booking_id"] == "b-1"


class TestEnsureBookable:
    @pytest.mark.asyncio
    async def test_returns_interval_in_host_timezone(self, schedule):
        schedule([_block()])
        host = make_user(timezone="Europe/Berlin")

        start, end = await service.ensure_bookable(host, make_meeting_type(), TUESDAY, "09:30", now=NOW)

        assert start == datetime(2026, 3, 3, 8, 30, tzinfo=UTC)
        assert end == datetime(2026, 3, 3, 9, 0, tzinfo=UTC)

    @pytest.mark.asyncio
    async def test_unavailable_slot(self, schedule):
        schedule([_block()])

        with pytest.raises(ConflictError) as exc_info:
            await service.ensure_bookable(make_user(), make_meeting_type(), TUESDAY, "13:00", now=NOW)
        assert exc_info.value.error_code == "SLOT_UNAVAILABLE"

    @pytest.mark.asyncio
    async def test_inactive_meeting_type(self, schedule):
        schedule([_block()])

        with pytest.raises(BadRequestError):
            await service.ensure_bookable(make_user(), make_meeting_type(is_active=False), TUESDAY, "09:00", now=NOW)

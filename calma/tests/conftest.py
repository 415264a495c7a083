import os
import sys
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

# The API tests never talk to PostgreSQL; db functions are patched per test
os.environ.setdefault("ENABLE_DB", "0")

from datetime import UTC, datetime
from unittest.mock import patch

import fakeredis.aioredis as fakeredis
import pytest
from fastapi.testclient import TestClient

import calma.lifespan as lifespan
import calma.main as main
from calma.config import clear_settings_cache

HOST_ID = "11111111-1111-1111-1111-111111111111"
MEETING_TYPE_ID = "22222222-2222-2222-2222-222222222222"
BOOKING_ID = "33333333-3333-3333-3333-333333333333"
ACCOUNT_ID = "44444444-4444-4444-4444-444444444444"

AUTH_HEADERS = {"X-User-Id": "user_2abcDEF123", "X-User-Email": "ada@example.com", "X-User-Name": "Ada"}


def make_user(**overrides) -> dict:
    user = {
        "id": HOST_ID,
        "external_id": "user_2abcDEF123",
        "email": "ada@example.com",
        "name": "Ada Lovelace",
        "slug": "ada",
        "timezone": "UTC",
        "subscription_tier": "free",
        "is_admin": False,
        "created_at": "2026-01-01T00:00:00+00:00",
        "updated_at": "2026-01-01T00:00:00+00:00",
    }
    user.update(overrides)
    return user


def make_meeting_type(**overrides) -> dict:
    meeting_type = {
        "id": MEETING_TYPE_ID,
        "user_id": HOST_ID,
        "name": "Intro Call",
        "slug": "intro",
        "duration_minutes": 30,
        "description": None,
        "is_default": True,
        "is_active": True,
        "created_at": "2026-01-01T00:00:00+00:00",
    }
    meeting_type.update(overrides)
    return meeting_type


def make_booking(**overrides) -> dict:
    booking = {
        "id": BOOKING_ID,
        "host_id": HOST_ID,
        "meeting_type_id": MEETING_TYPE_ID,
        "guest_name": "Grace",
        "guest_email": "grace@example.com",
        "guest_timezone": "UTC",
        "start_time": datetime(2026, 3, 3, 10, 0, tzinfo=UTC),
        "end_time": datetime(2026, 3, 3, 10, 30, tzinfo=UTC),
        "notes": None,
        "google_event_id": None,
        "meet_link": None,
        "status": "confirmed",
        "created_at": "2026-03-01T00:00:00+00:00",
        "meeting_type_name": "Intro Call",
        "duration_minutes": 30,
    }
    booking.update(overrides)
    return booking


@pytest.fixture(autouse=True)
def _fresh_settings():
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def fake_redis():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture
def client(monkeypatch, fake_redis):
    monkeypatch.setattr(lifespan.redis, "Redis", lambda *_args, **_kwargs: fake_redis)

    with TestClient(main.app) as c:
        yield c


class MockAsyncCursor:
    def __init__(self, rows=None, rowcount=None):
        self.rows = rows or []
        self.rowcount = len(self.rows) if rowcount is None else rowcount
        self._index = 0

    async def fetchone(self):
        if self.rows:
            return self.rows[0]
        return None

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self._index >= len(self.rows):
            raise StopAsyncIteration
        row = self.rows[self._index]
        self._index += 1
        return row


class _MockTransaction:
    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        return False


class MockAsyncConnection:
    """Replays one result per execute() call: a list of rows, a rowcount, or None."""

    def __init__(self, results=None):
        self.results = list(results or [])
        self.executed: list[tuple[str, object]] = []

    async def execute(self, sql, params=None):
        self.executed.append((sql, params))
        result = self.results.pop(0) if self.results else None
        if isinstance(result, int):
            return MockAsyncCursor([], rowcount=result)
        return MockAsyncCursor(result)

    def transaction(self):
        return _MockTransaction()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        return False


@pytest.fixture
def pg():
    """Install a fake psycopg connection; call with the per-statement results."""
    with patch("calma.db.core.psycopg.AsyncConnection") as mock:

        def install(*results):
            conn = MockAsyncConnection(results)

            async def connect(*_args, **_kwargs):
                return conn

            mock.connect = connect
            return conn

        yield install

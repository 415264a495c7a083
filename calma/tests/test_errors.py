from fastapi import FastAPI
from fastapi.testclient import TestClient

from calma.errors import (
    APIError,
    BadRequestError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    QuotaExceededError,
    register_exception_handlers,
)


class TestAPIErrors:
    def test_not_found_error_defaults(self):
        error = NotFoundError()
        assert error.status_code == 404
        assert error.error == "not_found"
        assert error.detail == "Resource not found"
        assert error.context is None

    def test_context_kwargs(self):
        error = ConflictError(detail="Slot taken", error_code="SLOT_UNAVAILABLE", date="2026-03-03")
        assert error.status_code == 409
        assert error.error_code == "SLOT_UNAVAILABLE"
        assert error.context == {"date": "2026-03-03"}

    def test_quota_exceeded_is_402(self):
        assert QuotaExceededError().status_code == 402
        assert QuotaExceededError().error == "quota_exceeded"

    def test_external_service_error_is_502(self):
        assert ExternalServiceError().status_code == 502

    def test_is_exception(self):
        assert issubclass(BadRequestError, APIError)
        assert str(BadRequestError(detail="nope")) == "nope"


def _app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/conflict")
    async def conflict():
        raise ConflictError(detail="Slot taken", error_code="SLOT_UNAVAILABLE", start_time="10:00")

    @app.get("/boom")
    async def boom():
        raise RuntimeError("unexpected")

    return app


class TestExceptionHandlers:
    def test_api_error_rendered(self):
        res = TestClient(_app()).get("/conflict")
        assert res.status_code == 409
        assert res.json() == {
            "error": "conflict",
            "detail": "Slot taken",
            "error_code": "SLOT_UNAVAILABLE",
            "context": {"start_time": "10:00"},
        }

    def test_unknown_route_uses_standard_format(self):
        res = TestClient(_app()).get("/missing")
        assert res.status_code == 404
        assert res.json()["error"] == "not_found"

    def test_unhandled_exception_is_500(self):
        res = TestClient(_app(), raise_server_exceptions=False).get("/boom")
        assert res.status_code == 500
        assert res.json() == {"error": "internal_error", "detail": "An unexpected error occurred"}

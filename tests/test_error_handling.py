"""
Tests for error formatting, exception handlers and the request middleware.
"""

import pytest
from fastapi import FastAPI, Request
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import IntegrityError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.middleware import ValidationMiddleware
from app.services.error_handler import ErrorHandlerService
from app.utils.exceptions import (
    ApartmentNotFoundError,
    DuplicateEmailError,
    FileSizeExceededError,
    ValidationError,
)
from tests.conftest import API


class TestErrorFormatting:
    """Test ErrorHandlerService formatting helpers."""

    def test_format_error_response(self):
        response = ErrorHandlerService.format_error_response(
            error_code="NOT_FOUND", message="Apartment not found", request_id="abc123"
        )

        assert response["success"] is False
        assert response["message"] == "Apartment not found"
        assert response["error"]["code"] == "NOT_FOUND"
        assert response["error"]["message"] == "Apartment not found"
        assert response["error"]["request_id"] == "abc123"
        assert response["error"]["timestamp"].endswith("Z")
        assert "details" not in response["error"]

    def test_validation_detail_strips_location_and_prefix(self):
        detail = ErrorHandlerService._format_validation_detail({
            "loc": ("body", "contactPhone"),
            "msg": "Value error, Please provide a valid phone number",
            "type": "value_error",
            "input": "abc",
        })

        assert detail == {
            "field": "contactPhone",
            "message": "Please provide a valid phone number",
            "type": "value_error",
            "input": "abc",
        }

    def test_validation_detail_hides_passwords(self):
        detail = ErrorHandlerService._format_validation_detail({
            "loc": ("body", "newPassword"),
            "msg": "Value error, Password must be at least 8 characters long",
            "type": "value_error",
            "input": "short",
        })
        assert "input" not in detail

    def test_model_level_error_has_no_field(self):
        detail = ErrorHandlerService._format_validation_detail({
            "loc": (),
            "msg": "Value error, Password confirmation does not match",
            "type": "value_error",
        })
        assert detail["field"] is None
        assert detail["message"] == "Password confirmation does not match"

    def test_api_exception_status_codes(self):
        assert ErrorHandlerService.handle_api_exception(ApartmentNotFoundError()).status_code == 404
        assert ErrorHandlerService.handle_api_exception(DuplicateEmailError()).status_code == 409
        assert ErrorHandlerService.handle_api_exception(FileSizeExceededError(10, 5)).status_code == 400

    def test_api_exception_field_errors(self):
        exc = ValidationError("Bad list", field_errors=[{"field": "images", "message": "Expected a list"}])
        response = ErrorHandlerService.handle_api_exception(exc)

        assert response.status_code == 400
        assert b'"details":[{"field":"images"' in response.body

    def test_integrity_error_maps_to_conflict(self):
        exc = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: users.email"))
        response = ErrorHandlerService.handle_database_error(exc)

        assert response.status_code == 409
        assert b"Duplicate value for unique field" in response.body

    def test_other_database_error_is_500(self):
        exc = OperationalError("SELECT", {}, Exception("connection refused"))
        response = ErrorHandlerService.handle_database_error(exc)

        assert response.status_code == 500
        assert b"connection refused" not in response.body

    def test_http_exception_keeps_detail(self):
        response = ErrorHandlerService.handle_http_exception(StarletteHTTPException(405, "Method Not Allowed"))
        assert response.status_code == 405
        assert b"HTTP_405" in response.body


class TestApplicationErrors:
    """Error responses produced through the application."""

    @pytest.mark.asyncio
    async def test_unknown_route(self, async_client: AsyncClient):
        response = await async_client.get(f"{API}/nowhere")

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["message"] == f"Route {API}/nowhere not found"

    @pytest.mark.asyncio
    async def test_request_id_header_matches_body(self, async_client: AsyncClient):
        response = await async_client.get(f"{API}/nowhere")

        request_id = response.headers["X-Request-ID"]
        assert request_id
        assert response.json()["error"]["request_id"] == request_id

    @pytest.mark.asyncio
    async def test_success_responses_carry_request_id(self, async_client: AsyncClient):
        response = await async_client.get(f"{API}/apartments")
        assert response.headers.get("X-Request-ID")

    @pytest.mark.asyncio
    async def test_method_not_allowed(self, async_client: AsyncClient):
        response = await async_client.patch(f"{API}/apartments")

        assert response.status_code == 405
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_root(self, async_client: AsyncClient):
        response = await async_client.get("/")

        assert response.status_code == 200
        assert response.json()["api_prefix"] == API

    @pytest.mark.asyncio
    async def test_health(self, async_client: AsyncClient):
        response = await async_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Apartments API is running"
        assert body["database"] == "connected"
        assert body["uptime"] >= 0
        assert "timestamp" in body


class TestValidationMiddleware:
    """Test the request middleware in isolation."""

    @pytest.fixture
    async def small_client(self):
        small_app = FastAPI()
        small_app.add_middleware(ValidationMiddleware, max_request_size=16, enable_request_logging=False)

        @small_app.post("/echo")
        async def echo(request: Request):
            return {"size": len(await request.body())}

        async with AsyncClient(transport=ASGITransport(app=small_app), base_url="http://test") as client:
            yield client

    @pytest.mark.asyncio
    async def test_small_body_passes(self, small_client: AsyncClient):
        response = await small_client.post("/echo", content=b"tiny")

        assert response.status_code == 200
        assert response.json() == {"size": 4}
        assert response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_oversized_body_rejected(self, small_client: AsyncClient):
        response = await small_client.post("/echo", content=b"x" * 64)

        assert response.status_code == 413
        body = response.json()
        assert body["error"]["code"] == "PAYLOAD_TOO_LARGE"
        assert body["error"]["request_id"] == response.headers["X-Request-ID"]

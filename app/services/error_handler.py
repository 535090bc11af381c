"""
Error handling service that turns every failure into the common error body.

Body shape: ``{"success": false, "message": ..., "error": {"code", "message",
"timestamp", "request_id", "details"?}}``. The request ID is the one the
middleware put on ``request.state`` so it matches the ``X-Request-ID`` header.
"""

from typing import Dict, Any, Optional, List, Mapping, Sequence
from datetime import datetime, timezone
from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from app.utils.exceptions import APIException
import logging
import uuid

logger = logging.getLogger(__name__)

# Location prefixes FastAPI adds to request validation errors
LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie", "form"}

# Inputs that are never echoed back
SENSITIVE_FIELDS = {"password", "currentPassword", "newPassword", "confirmPassword"}

VALUE_ERROR_PREFIX = "Value error, "

# Substring of the driver message -> client-facing reason
CONSTRAINT_MESSAGES = (
    ("unique", "Duplicate value for unique field"),
    ("foreign key", "Referenced record does not exist"),
    ("not null", "Required field cannot be empty"),
    ("check constraint", "Value does not meet validation requirements"),
)


class ErrorHandlerService:
    """Builds error responses for the application's exception handlers."""

    @staticmethod
    def format_error_response(
        error_code: str,
        message: str,
        details: Optional[List[Dict[str, Any]]] = None,
        request_id: Optional[str] = None
    ) -> Dict[str, Any]:
        error: Dict[str, Any] = {
            "code": error_code,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        }
        if request_id:
            error["request_id"] = request_id
        if details:
            error["details"] = details

        return {"success": False, "message": message, "error": error}

    @staticmethod
    def _respond(
        request: Optional[Request],
        status_code: int,
        error_code: str,
        message: str,
        details: Optional[List[Dict[str, Any]]] = None,
        headers: Optional[Mapping[str, str]] = None
    ) -> JSONResponse:
        body = ErrorHandlerService.format_error_response(
            error_code=error_code,
            message=message,
            details=details,
            request_id=ErrorHandlerService._get_request_id(request),
        )
        return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=headers)

    @staticmethod
    def handle_api_exception(
        exception: APIException,
        request: Optional[Request] = None
    ) -> JSONResponse:
        logger.warning(
            f"API exception on {_path(request)}: {exception.error_code} - {exception.detail}"
        )
        return ErrorHandlerService._respond(
            request,
            exception.status_code,
            exception.error_code or "API_ERROR",
            exception.detail,
            details=getattr(exception, "field_errors", None),
            headers=exception.headers,
        )

    @staticmethod
    def handle_validation_error(
        errors: Sequence[Dict[str, Any]],
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Respond 400 VALIDATION_ERROR listing every failing field.

        Args:
            errors: ``errors()`` of a RequestValidationError or pydantic ValidationError
            request: Request being handled, if any
        """
        details = [ErrorHandlerService._format_validation_detail(error) for error in errors]
        logger.warning(f"Validation failed on {_path(request)}: {len(details)} field errors")

        return ErrorHandlerService._respond(request, 400, "VALIDATION_ERROR", "Validation failed", details=details)

    @staticmethod
    def handle_database_error(
        exception: SQLAlchemyError,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Integrity violations map to 409 with a generic reason; anything else is a 500.
        Driver messages are logged, never returned.
        """
        logger.error(f"Database error on {_path(request)}: {exception}", exc_info=True)

        if isinstance(exception, IntegrityError):
            reason = ErrorHandlerService._extract_constraint_info(exception)
            message = f"Constraint violation: {reason}" if reason else "Data integrity constraint violation"
            return ErrorHandlerService._respond(request, 409, "INTEGRITY_ERROR", message)

        return ErrorHandlerService._respond(request, 500, "DATABASE_ERROR", "Database operation failed")

    @staticmethod
    def handle_http_exception(
        exception: StarletteHTTPException,
        request: Optional[Request] = None
    ) -> JSONResponse:
        message = str(exception.detail)
        if exception.status_code == 404 and message == "Not Found" and request is not None:
            message = f"Route {request.url.path} not found"

        logger.warning(f"HTTP {exception.status_code} on {_path(request)}: {message}")
        return ErrorHandlerService._respond(
            request,
            exception.status_code,
            f"HTTP_{exception.status_code}",
            message,
            headers=getattr(exception, "headers", None),
        )

    @staticmethod
    def handle_unexpected_error(
        exception: Exception,
        request: Optional[Request] = None
    ) -> JSONResponse:
        logger.error(
            f"Unexpected error on {_path(request)}: {type(exception).__name__} - {exception}",
            exc_info=exception
        )
        return ErrorHandlerService._respond(
            request, 500, "INTERNAL_SERVER_ERROR", "An unexpected error occurred. Please try again later."
        )

    @staticmethod
    def _format_validation_detail(error: Dict[str, Any]) -> Dict[str, Any]:
        """Turn one pydantic error into a {field, message, type, input} entry."""
        location = [str(part) for part in error.get("loc", ())]
        if location and location[0] in LOCATION_PREFIXES:
            location = location[1:]

        message = error.get("msg", "Invalid value")
        if message.startswith(VALUE_ERROR_PREFIX):
            message = message[len(VALUE_ERROR_PREFIX):]

        detail = {
            "field": ".".join(location) or None,
            "message": message,
            "type": error.get("type"),
        }
        if location and location[0] not in SENSITIVE_FIELDS and "input" in error:
            detail["input"] = error["input"]
        return detail

    @staticmethod
    def _get_request_id(request: Optional[Request]) -> str:
        """Request ID assigned by the middleware, or a fresh one."""
        if request is not None:
            request_id = getattr(request.state, "request_id", None)
            if request_id:
                return request_id
        return str(uuid.uuid4())[:8]

    @staticmethod
    def _extract_constraint_info(exception: IntegrityError) -> Optional[str]:
        driver_message = str(exception.orig).lower()
        for needle, reason in CONSTRAINT_MESSAGES:
            if needle in driver_message:
                return reason
        return None


def _path(request: Optional[Request]) -> str:
    return request.url.path if request is not None else "<no request>"

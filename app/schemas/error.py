"""
Error response models and the per-route ``responses`` tables used in the OpenAPI docs.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Any, Dict


class ErrorDetail(BaseModel):
    """One failing field of a validation error."""

    field: Optional[str] = Field(None, description="Field that failed, without its location", examples=["price"])
    message: str = Field(..., description="Human-readable reason")
    type: Optional[str] = Field(None, description="Pydantic error type", examples=["greater_than_equal"])
    input: Optional[Any] = Field(None, description="Rejected value; omitted for password fields")


class ErrorBody(BaseModel):
    code: str = Field(..., examples=["VALIDATION_ERROR"])
    message: str
    timestamp: str = Field(..., description="UTC time of the error, ISO 8601 with a Z suffix")
    request_id: Optional[str] = Field(None, description="Same value as the X-Request-ID header")
    details: Optional[List[ErrorDetail]] = None


class APIErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    success: bool = False
    message: str
    error: ErrorBody


def _example(code: str, message: str, details: Optional[list] = None) -> Dict[str, Any]:
    error = {
        "code": code,
        "message": message,
        "timestamp": "2024-01-01T00:00:00Z",
        "request_id": "abc12345",
    }
    if details:
        error["details"] = details
    return {"success": False, "message": message, "error": error}


def _documented(description: str, **examples: Dict[str, Any]) -> Dict[str, Any]:
    """OpenAPI entry for one status code with named examples."""
    return {
        "description": description,
        "model": APIErrorResponse,
        "content": {
            "application/json": {
                "examples": {
                    name: {"summary": name.replace("_", " ").capitalize(), "value": value}
                    for name, value in examples.items()
                }
            }
        },
    }


ERROR_RESPONSES = {
    400: _documented(
        "Invalid parameters or body",
        validation_error=_example(
            "VALIDATION_ERROR",
            "Validation failed",
            [{"field": "price", "message": "Input should be greater than or equal to 0",
              "type": "greater_than_equal", "input": -1}]
        ),
        bad_request=_example("BAD_REQUEST", "Invalid apartment ID"),
        file_upload=_example("FILE_UPLOAD_ERROR", "File upload error: Invalid image file"),
    ),
    401: _documented(
        "Missing, invalid or expired token",
        missing_token=_example("UNAUTHORIZED", "Access token is required"),
        expired_token=_example("UNAUTHORIZED", "Token has expired"),
    ),
    403: _documented(
        "Caller does not own the apartment",
        not_owner=_example("FORBIDDEN", "You can only update your own apartments"),
    ),
    404: _documented(
        "Apartment not found",
        not_found=_example("NOT_FOUND", "Apartment not found"),
    ),
    409: _documented(
        "Email or unit number already taken",
        duplicate_unit=_example(
            "DUPLICATE_RESOURCE", "An apartment with this unit number already exists in this project"
        ),
        duplicate_email=_example("DUPLICATE_RESOURCE", "User with this email already exists"),
    ),
    500: _documented(
        "Unexpected server error",
        internal=_example("INTERNAL_SERVER_ERROR", "An unexpected error occurred. Please try again later."),
    ),
}


def get_error_responses(*status_codes: int) -> Dict[int, Dict[str, Any]]:
    return {code: ERROR_RESPONSES[code] for code in status_codes if code in ERROR_RESPONSES}


def get_auth_error_responses() -> Dict[int, Dict[str, Any]]:
    return get_error_responses(400, 401, 409, 500)


def get_common_error_responses() -> Dict[int, Dict[str, Any]]:
    return get_error_responses(400, 401, 404, 500)


def get_crud_error_responses() -> Dict[int, Dict[str, Any]]:
    """Responses for create, update and delete, which add ownership and uniqueness errors."""
    return get_error_responses(400, 401, 403, 404, 409, 500)

"""
Exceptions raised by services and routes.
Each one carries its HTTP status and an error code for the response body.
"""

from typing import Any, Dict, Optional, List
from fastapi import HTTPException, status


class APIException(HTTPException):
    """
    Base class for errors that map directly onto an error response.
    Subclasses set ``status_code`` and ``error_code`` as class attributes.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "API_ERROR"
    headers: Optional[Dict[str, str]] = None

    def __init__(
        self,
        detail: str,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None
    ):
        super().__init__(
            status_code=status_code or type(self).status_code,
            detail=detail,
            headers=headers or type(self).headers,
        )
        self.error_code = error_code or type(self).error_code


class ValidationError(APIException):
    """Request data rejected outside of pydantic, e.g. a malformed form field."""

    error_code = "VALIDATION_ERROR"

    def __init__(self, detail: str, field_errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(detail)
        self.field_errors = field_errors or []


class BadRequestError(APIException):
    error_code = "BAD_REQUEST"


class UnauthorizedError(APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "UNAUTHORIZED"
    headers = {"WWW-Authenticate": "Bearer"}

    def __init__(self, detail: str = "Authentication required"):
        super().__init__(detail)


class ForbiddenError(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "FORBIDDEN"


class NotFoundError(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"

    def __init__(self, resource: str):
        super().__init__(f"{resource} not found")


class ConflictError(APIException):
    status_code = status.HTTP_409_CONFLICT
    error_code = "CONFLICT"


class PayloadTooLargeError(APIException):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    error_code = "PAYLOAD_TOO_LARGE"

    def __init__(self, max_size: int):
        super().__init__(f"Request body exceeds the maximum allowed size of {max_size} bytes")


# Authentication
class InvalidCredentialsError(UnauthorizedError):
    def __init__(self, detail: str = "Invalid email or password"):
        super().__init__(detail)


class TokenExpiredError(UnauthorizedError):
    def __init__(self, detail: str = "Token has expired"):
        super().__init__(detail)


class InvalidTokenError(UnauthorizedError):
    def __init__(self, detail: str = "Invalid token"):
        super().__init__(detail)


class DuplicateResourceError(ConflictError):
    error_code = "DUPLICATE_RESOURCE"


class DuplicateEmailError(DuplicateResourceError):
    def __init__(self):
        super().__init__("User with this email already exists")


# Apartments
class ApartmentNotFoundError(NotFoundError):
    def __init__(self):
        super().__init__("Apartment")


class ApartmentOwnershipError(ForbiddenError):
    """Raised when a user mutates an apartment they do not own."""

    def __init__(self, action: str):
        super().__init__(f"You can only {action} your own apartments")


class DuplicateApartmentError(DuplicateResourceError):
    def __init__(self):
        super().__init__("An apartment with this unit number already exists in this project")


# Image uploads
class FileUploadError(BadRequestError):
    error_code = "FILE_UPLOAD_ERROR"

    def __init__(self, detail: str):
        super().__init__(f"File upload error: {detail}")


class UnsupportedFileTypeError(FileUploadError):
    def __init__(self, file_type: str, supported_types: List[str]):
        super().__init__(f"Unsupported file type '{file_type}'. Supported types: {', '.join(supported_types)}")


class FileSizeExceededError(FileUploadError):
    def __init__(self, size: int, max_size: int):
        super().__init__(f"File size {size} bytes exceeds maximum allowed size {max_size} bytes")


class ImageLimitExceededError(FileUploadError):
    def __init__(self, limit: int):
        super().__init__(f"An apartment can have at most {limit} images")

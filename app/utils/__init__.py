"""
Utility modules for the Apartments API.
"""

from .auth import (
    create_access_token,
    verify_token,
    hash_password,
    verify_password,
    TokenPayload
)

from .exceptions import (
    APIException,
    ValidationError,
    NotFoundError,
    UnauthorizedError,
    ForbiddenError,
    ConflictError,
    BadRequestError,
    InvalidCredentialsError,
    TokenExpiredError,
    InvalidTokenError,
    DuplicateResourceError,
    DuplicateEmailError,
    ApartmentNotFoundError,
    ApartmentOwnershipError,
    DuplicateApartmentError,
    PayloadTooLargeError,
)

# Dependencies are imported directly where needed to avoid circular imports

__all__ = [
    # Auth utilities
    "create_access_token",
    "verify_token",
    "hash_password",
    "verify_password",
    "TokenPayload",

    # Exceptions
    "APIException",
    "ValidationError",
    "NotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    "ConflictError",
    "BadRequestError",
    "InvalidCredentialsError",
    "TokenExpiredError",
    "InvalidTokenError",
    "DuplicateResourceError",
    "DuplicateEmailError",
    "ApartmentNotFoundError",
    "ApartmentOwnershipError",
    "DuplicateApartmentError",
    "PayloadTooLargeError",
]

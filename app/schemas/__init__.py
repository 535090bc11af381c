"""
Pydantic schemas for request/response validation.
"""

from .common import CamelModel, PaginationMeta, MessageResponse

# Authentication schemas
from .auth import (
    RegisterRequest,
    LoginRequest,
    ProfileUpdateRequest,
    AuthData,
    AuthResponse,
    UserProfileResponse
)

# User schemas
from .user import UserResponse

# Apartment schemas
from .apartment import (
    ApartmentCreate,
    ApartmentUpdate,
    ApartmentResponse,
    ApartmentEnvelope,
    ApartmentListResponse,
    ApartmentListQuery,
    MyApartmentsQuery,
    TextSearchQuery,
    ApartmentStats,
    ApartmentStatsResponse
)

__all__ = [
    "CamelModel",
    "PaginationMeta",
    "MessageResponse",

    # Authentication
    "RegisterRequest",
    "LoginRequest",
    "ProfileUpdateRequest",
    "AuthData",
    "AuthResponse",
    "UserProfileResponse",

    # User
    "UserResponse",

    # Apartment
    "ApartmentCreate",
    "ApartmentUpdate",
    "ApartmentResponse",
    "ApartmentEnvelope",
    "ApartmentListResponse",
    "ApartmentListQuery",
    "MyApartmentsQuery",
    "TextSearchQuery",
    "ApartmentStats",
    "ApartmentStatsResponse",
]

"""
Pydantic schemas for user responses.
"""

from pydantic import Field
from datetime import datetime
from app.schemas.common import CamelModel


class UserResponse(CamelModel):
    """User response schema (excluding sensitive data)."""

    id: str = Field(
        ...,
        description="User's unique identifier",
        examples=["123e4567-e89b-12d3-a456-426614174000"]
    )
    name: str = Field(..., description="User's name", examples=["John Smith"])
    email: str = Field(..., description="User's email address", examples=["john.smith@example.com"])
    phone: str = Field(..., description="User's phone number", examples=["+14155550101"])
    created_at: datetime = Field(..., description="Account creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

"""
Pydantic schemas for authentication requests and responses.
Handles registration, login and profile update data validation.
"""

from pydantic import EmailStr, Field, field_validator, model_validator
from typing import Optional
import re
from app.schemas.common import CamelModel, normalize_phone
from app.schemas.user import UserResponse


NAME_PATTERN = re.compile(r"^[a-zA-Z\s]+$")
PASSWORD_SPECIALS = "@$!%*?&"


def validate_password_strength(password: str) -> str:
    """
    Check the password policy.

    Raises:
        ValueError: If the password is too short or misses a character class
    """
    if len(password) < 8:
        raise ValueError("Password must be at least 8 characters long")
    if not (
        re.search(r"[a-z]", password)
        and re.search(r"[A-Z]", password)
        and re.search(r"\d", password)
        and any(ch in PASSWORD_SPECIALS for ch in password)
    ):
        raise ValueError(
            "Password must contain at least one lowercase letter, one uppercase letter, "
            f"one number, and one special character ({PASSWORD_SPECIALS})"
        )
    return password


def validate_name(name: str) -> str:
    name = name.strip()
    if len(name) < 2 or len(name) > 50:
        raise ValueError("Name must be between 2 and 50 characters")
    if not NAME_PATTERN.match(name):
        raise ValueError("Name can only contain letters and spaces")
    return name


class RegisterRequest(CamelModel):
    """Registration request schema."""

    name: str = Field(..., description="User's name", examples=["John Smith"])
    email: EmailStr = Field(
        ...,
        description="User's email address",
        examples=["john.smith@example.com"]
    )
    password: str = Field(
        ...,
        max_length=128,
        description="Password with lowercase, uppercase, digit and special character",
        examples=["Password123!"]
    )
    phone: str = Field(..., description="Phone number", examples=["+14155550101"])

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        return validate_name(v)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        v = v.lower().strip()
        if len(v) > 100:
            raise ValueError("Email cannot exceed 100 characters")
        return v

    @field_validator("password")
    @classmethod
    def check_password(cls, v):
        return validate_password_strength(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return normalize_phone(v)


class LoginRequest(CamelModel):
    """Login request schema."""

    email: EmailStr = Field(..., description="User's email address", examples=["test@test.com"])
    password: str = Field(..., min_length=1, description="User's password", examples=["Password123!"])

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        """Normalize email to lowercase."""
        return v.lower().strip()


class ProfileUpdateRequest(CamelModel):
    """
    Profile update schema.

    All fields are optional. A password change needs ``newPassword`` together
    with the ``currentPassword``; ``confirmPassword`` must match when given.
    """

    name: Optional[str] = Field(None, description="New name")
    phone: Optional[str] = Field(None, description="New phone number")
    current_password: Optional[str] = Field(None, description="Current password")
    new_password: Optional[str] = Field(None, max_length=128, description="New password")
    confirm_password: Optional[str] = Field(None, description="Repeat of the new password")

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        return validate_name(v) if v is not None else v

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return normalize_phone(v) if v is not None else v

    @field_validator("new_password")
    @classmethod
    def check_new_password(cls, v):
        return validate_password_strength(v) if v else v

    @model_validator(mode="after")
    def check_confirmation(self):
        if self.confirm_password is not None and self.confirm_password != self.new_password:
            raise ValueError("Password confirmation does not match")
        return self


class AuthData(CamelModel):
    """Token and user returned by register and login."""

    token: str = Field(..., description="JWT access token")
    user: UserResponse


class AuthResponse(CamelModel):
    """Envelope for register and login."""

    success: bool = True
    message: str
    data: AuthData


class UserProfileResponse(CamelModel):
    """Envelope for the current user's profile."""

    success: bool = True
    message: str
    data: UserResponse

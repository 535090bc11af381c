"""
Authentication API endpoints for registration, login, profile and logout.
Provides stateless JWT bearer authentication.
"""

from fastapi import APIRouter, Depends, status
from app.models.user import User
from app.services.auth import AuthService
from app.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    ProfileUpdateRequest,
    AuthData,
    AuthResponse,
    UserProfileResponse,
)
from app.schemas.common import MessageResponse
from app.schemas.user import UserResponse
from app.schemas.error import get_auth_error_responses, get_common_error_responses
from app.utils.dependencies import get_auth_service, get_current_user
from app.utils.exceptions import APIException, BadRequestError, InvalidCredentialsError


router = APIRouter(prefix="/auth", tags=["Authentication"])


def _auth_response(user: User, token: str, message: str) -> AuthResponse:
    return AuthResponse(
        message=message,
        data=AuthData(token=token, user=UserResponse.model_validate(user.to_dict()))
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="Create an account and return a JWT token",
    responses=get_auth_error_responses()
)
async def register(
    user_data: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> AuthResponse:
    """
    Register a new user and return a token.

    Raises:
        DuplicateEmailError: If the email is already registered
    """
    try:
        user, token = await auth_service.register(user_data)
        return _auth_response(user, token, "User registered successfully")

    except APIException:
        raise
    except Exception as e:
        raise BadRequestError(f"Failed to register user: {str(e)}")


@router.post(
    "/login",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    summary="User login",
    description="Authenticate user with email and password, returns a JWT token",
    responses=get_auth_error_responses()
)
async def login(
    login_data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> AuthResponse:
    """
    Authenticate user and return a token.

    Raises:
        InvalidCredentialsError: If credentials are invalid
    """
    try:
        user, token = await auth_service.login(
            email=login_data.email,
            password=login_data.password
        )
        return _auth_response(user, token, "Login successful")

    except APIException:
        raise
    except Exception:
        raise InvalidCredentialsError()


@router.get(
    "/me",
    response_model=UserProfileResponse,
    status_code=status.HTTP_200_OK,
    summary="Get current user",
    description="Get the profile of the authenticated user",
    responses=get_common_error_responses()
)
async def get_me(current_user: User = Depends(get_current_user)) -> UserProfileResponse:
    return UserProfileResponse(
        message="User profile retrieved successfully",
        data=UserResponse.model_validate(current_user.to_dict())
    )


@router.put(
    "/profile",
    response_model=UserProfileResponse,
    status_code=status.HTTP_200_OK,
    summary="Update profile",
    description="Update name and phone, and optionally change the password",
    responses=get_common_error_responses()
)
async def update_profile(
    update_data: ProfileUpdateRequest,
    current_user: User = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> UserProfileResponse:
    """
    Update the current user's profile.

    Raises:
        BadRequestError: If the current password is missing or incorrect
    """
    try:
        user, password_changed = await auth_service.update_profile(current_user, update_data)
        message = (
            "Profile and password updated successfully"
            if password_changed
            else "Profile updated successfully"
        )
        return UserProfileResponse(
            message=message,
            data=UserResponse.model_validate(user.to_dict())
        )

    except APIException:
        raise
    except Exception as e:
        raise BadRequestError(f"Failed to update profile: {str(e)}")


@router.post(
    "/logout",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Logout",
    description="Tokens are stateless; the client discards its token",
    responses=get_common_error_responses()
)
async def logout(current_user: User = Depends(get_current_user)) -> MessageResponse:
    return MessageResponse(message="Logout successful. Please remove the token from client storage.")

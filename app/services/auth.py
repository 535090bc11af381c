"""
Authentication service for registration, login, token handling and profile updates.
"""

from typing import Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from app.repositories.user import UserRepository
from app.models.user import User
from app.schemas.auth import RegisterRequest, ProfileUpdateRequest
from app.utils.auth import create_access_token, verify_token
from app.utils.exceptions import (
    APIException,
    InvalidCredentialsError,
    InvalidTokenError,
    TokenExpiredError,
    DuplicateEmailError,
    BadRequestError,
)
from jose import JWTError, ExpiredSignatureError
import uuid
import logging

logger = logging.getLogger(__name__)


class AuthService:
    """
    Authentication service for managing accounts and access tokens.
    Tokens are stateless; logout is handled by the client discarding its token.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.user_repo = UserRepository(db_session)

    def create_token(self, user: User) -> str:
        return create_access_token(user_id=user.id, email=user.email)

    async def register(self, user_data: RegisterRequest) -> Tuple[User, str]:
        """
        Register a new user and issue a token.

        Args:
            user_data: Validated registration payload

        Returns:
            Tuple of (user, access_token)

        Raises:
            DuplicateEmailError: If the email is already registered
        """
        try:
            if await self.user_repo.email_exists(user_data.email):
                raise DuplicateEmailError()

            user = await self.user_repo.create_user(user_data.model_dump())
            logger.info(f"User registered: {user.email}")
            return user, self.create_token(user)

        except APIException:
            raise
        except IntegrityError:
            raise DuplicateEmailError()
        except Exception as e:
            logger.error(f"Registration failed for {user_data.email}: {e}")
            raise BadRequestError(f"Failed to register user: {str(e)}")

    async def authenticate_user(self, email: str, password: str) -> User:
        """
        Authenticate user with email and password.

        Raises:
            InvalidCredentialsError: If the email is unknown or the password is wrong
        """
        try:
            user = await self.user_repo.authenticate_user(email, password)

            if not user:
                logger.warning(f"Failed authentication attempt for email: {email}")
                raise InvalidCredentialsError()

            return user

        except InvalidCredentialsError:
            raise
        except Exception as e:
            logger.error(f"Authentication error for {email}: {e}")
            raise InvalidCredentialsError()

    async def login(self, email: str, password: str) -> Tuple[User, str]:
        """
        Authenticate user and create a token.

        Returns:
            Tuple of (user, access_token)
        """
        user = await self.authenticate_user(email, password)
        return user, self.create_token(user)

    async def get_current_user(self, token: str) -> User:
        """
        Resolve the user behind an access token.

        Raises:
            TokenExpiredError: If token is expired
            InvalidTokenError: If token is invalid or its user no longer exists
        """
        try:
            token_payload = verify_token(token, token_type="access")
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except JWTError as e:
            logger.debug(f"Rejected token: {e}")
            raise InvalidTokenError()

        try:
            user_id = uuid.UUID(token_payload.user_id)
        except ValueError:
            raise InvalidTokenError()

        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise InvalidTokenError("Invalid token - user not found")

        return user

    async def update_profile(self, user: User, update_data: ProfileUpdateRequest) -> Tuple[User, bool]:
        """
        Update name, phone and optionally the password.

        Args:
            user: Current user
            update_data: Validated profile update payload

        Returns:
            Tuple of (updated user, whether the password changed)

        Raises:
            BadRequestError: If the current password is missing or wrong
        """
        try:
            password_changed = bool(update_data.new_password)

            if password_changed:
                if not update_data.current_password:
                    raise BadRequestError("Current password is required to change password")
                if not user.verify_password(update_data.current_password):
                    raise BadRequestError("Current password is incorrect")

            profile_data = update_data.model_dump(
                include={"name", "phone"},
                exclude_none=True
            )

            updated_user = await self.user_repo.update_profile(
                user,
                profile_data,
                new_password=update_data.new_password if password_changed else None
            )
            logger.info(f"Profile updated for user: {updated_user.email}")
            return updated_user, password_changed

        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to update profile for {user.id}: {e}")
            raise BadRequestError(f"Failed to update profile: {str(e)}")

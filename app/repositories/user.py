"""
User repository for authentication and account operations.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.repositories.base import BaseRepository
from app.models.user import User
from app.utils.auth import hash_password
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for user accounts.
    Emails are compared and stored in lowercase.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        """
        Create a new user, hashing the plain text password.

        Args:
            user_data: Dictionary with name, email, password and phone

        Returns:
            Created user instance
        """
        try:
            data = dict(user_data)
            password = data.pop("password")
            create_data = {
                **data,
                "email": data["email"].strip().lower(),
                "hashed_password": hash_password(password),
            }

            created_user = await self.create(create_data)
            logger.info(f"Created user: {created_user.email} (ID: {created_user.id})")
            return created_user
        except Exception as e:
            logger.error(f"Failed to create user: {e}")
            raise

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address.

        Returns:
            User instance if found, None otherwise
        """
        try:
            normalized_email = email.lower().strip()
            result = await self.db.execute(select(User).where(User.email == normalized_email))
            user = result.scalar_one_or_none()

            if user:
                logger.debug(f"Retrieved user by email: {normalized_email}")
            else:
                logger.debug(f"User with email {normalized_email} not found")

            return user
        except Exception as e:
            logger.error(f"Failed to get user by email {email}: {e}")
            raise

    async def email_exists(self, email: str) -> bool:
        return await self.get_by_email(email) is not None

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """
        Authenticate user with email and password.

        Returns:
            User instance if authentication successful, None otherwise
        """
        try:
            user = await self.get_by_email(email)

            if not user:
                logger.debug(f"Authentication failed: user {email} not found")
                return None

            if not user.verify_password(password):
                logger.debug(f"Authentication failed: invalid password for {email}")
                return None

            logger.info(f"User authenticated successfully: {user.email}")
            return user
        except Exception as e:
            logger.error(f"Failed to authenticate user {email}: {e}")
            raise

    async def update_profile(
        self,
        user: User,
        profile_data: Dict[str, Any],
        new_password: Optional[str] = None
    ) -> User:
        """
        Update profile fields and, optionally, the password.

        Args:
            user: Loaded user instance
            profile_data: Profile fields to change (name, phone)
            new_password: New plain text password

        Returns:
            Updated user instance
        """
        try:
            update_data = dict(profile_data)
            if new_password:
                update_data["hashed_password"] = hash_password(new_password)

            updated_user = await self.update(user, update_data)
            if new_password:
                logger.info(f"Password updated for user: {updated_user.email}")
            return updated_user
        except Exception as e:
            logger.error(f"Failed to update profile for user {user.id}: {e}")
            raise

"""
JWT access tokens and bcrypt password hashing.
"""

from datetime import datetime, timedelta, timezone
from typing import NamedTuple, Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from app.config import settings
import uuid


ACCESS_TOKEN_TYPE = "access"
MIN_PASSWORD_LENGTH = 8

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


class TokenPayload(NamedTuple):
    """Claims carried by an access token."""

    user_id: str
    email: str
    exp: datetime


def create_access_token(
    user_id: uuid.UUID,
    email: str,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Sign an access token for a user.

    Args:
        user_id: Subject of the token
        email: Email claim
        expires_delta: Lifetime override; defaults to the configured expiry

    Returns:
        Encoded JWT
    """
    issued_at = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)

    claims = {
        "sub": str(user_id),
        "email": email,
        "type": ACCESS_TOKEN_TYPE,
        "iat": issued_at,
        "exp": issued_at + lifetime,
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str, token_type: str = ACCESS_TOKEN_TYPE) -> TokenPayload:
    """
    Decode a token and check its type and required claims.

    Raises:
        ExpiredSignatureError: If the token is past its expiry
        JWTError: For a bad signature, wrong type or missing claims
    """
    claims = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])

    if claims.get("type") != token_type:
        raise JWTError(f"Invalid token type. Expected {token_type}")

    subject, email, expires = claims.get("sub"), claims.get("email"), claims.get("exp")
    if not subject or not email or expires is None:
        raise JWTError("Invalid token payload")

    return TokenPayload(
        user_id=subject,
        email=email,
        exp=datetime.fromtimestamp(expires, tz=timezone.utc),
    )


def hash_password(password: str) -> str:
    """
    Raises:
        ValueError: If the password is shorter than the minimum length
    """
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

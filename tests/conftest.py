"""
Test configuration and fixtures for the apartments API.
Provides database fixtures, test data factories, and common test utilities.
"""

import os
import tempfile

# Settings are read at import time, so the environment is prepared first
os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="apartments-test-uploads-")
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-with-at-least-thirty-two-characters"

import io
import uuid
from typing import AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from PIL import Image
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import settings
from app.main import app
from app.database import Base, get_db, enable_sqlite_foreign_keys
from app.models.user import User
from app.models.apartment import Apartment
from app.repositories.user import UserRepository
from app.repositories.apartment import ApartmentRepository
from app.services.auth import AuthService
from app.services.apartment import ApartmentService
from app.utils.auth import create_access_token


TEST_PASSWORD = "Password123!"
API = settings.api_v1_prefix


@pytest.fixture
async def test_engine():
    """Fresh database per test."""
    engine = create_async_engine(
        settings.database_url,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False} if settings.is_sqlite else {}
    )
    if settings.is_sqlite:
        enable_sqlite_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    session_factory = async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()
            await session.close()


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client with database session override."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# Repository fixtures
@pytest.fixture
def user_repository(db_session: AsyncSession) -> UserRepository:
    return UserRepository(db_session)


@pytest.fixture
def apartment_repository(db_session: AsyncSession) -> ApartmentRepository:
    return ApartmentRepository(db_session)


# Service fixtures
@pytest.fixture
def auth_service(db_session: AsyncSession) -> AuthService:
    return AuthService(db_session)


@pytest.fixture
def apartment_service(db_session: AsyncSession) -> ApartmentService:
    return ApartmentService(db_session)


# Test data factories
class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    def create_user_data(
        email: Optional[str] = None,
        password: str = TEST_PASSWORD,
        name: str = "Test User",
        phone: str = "+14155550000"
    ) -> dict:
        return {
            "email": email or f"user{uuid.uuid4().hex[:8]}@example.com",
            "password": password,
            "name": name,
            "phone": phone
        }

    @staticmethod
    async def create_user(user_repo: UserRepository, **kwargs) -> User:
        return await user_repo.create_user(UserFactory.create_user_data(**kwargs))


class ApartmentFactory:
    """Factory for apartment payloads and rows."""

    @staticmethod
    def create_apartment_data(**overrides) -> dict:
        """Model-level (snake_case) field values."""
        data = {
            "unit_name": "Skyline Loft",
            "unit_number": f"U{uuid.uuid4().hex[:6].upper()}",
            "project": "Test Heights",
            "description": "Bright corner unit with city views and an open kitchen.",
            "bedrooms": 2,
            "bathrooms": 1.5,
            "square_footage": 950,
            "price": 3200.0,
            "address": "123 Test Street",
            "city": "San Francisco",
            "state": "California",
            "zip_code": "94102",
            "amenities": ["Gym", "Pool"],
            "images": [],
            "is_available": True,
            "pet_policy": "allowed",
            "parking_spaces": 1,
            "lease_terms": ["12 months"],
            "contact_email": "leasing@example.com",
            "contact_phone": "+14155550000",
        }
        data.update(overrides)
        return data

    @staticmethod
    def create_payload(**overrides) -> dict:
        """Wire-level (camelCase) request body."""
        payload = {
            "unitName": "Skyline Loft",
            "unitNumber": f"U{uuid.uuid4().hex[:6].upper()}",
            "project": "Test Heights",
            "description": "Bright corner unit with city views and an open kitchen.",
            "bedrooms": 2,
            "bathrooms": 1.5,
            "squareFootage": 950,
            "price": 3200,
            "address": "123 Test Street",
            "city": "San Francisco",
            "state": "California",
            "zipCode": "94102",
            "amenities": ["Gym", "Pool"],
            "isAvailable": True,
            "petPolicy": "allowed",
            "parkingSpaces": 1,
            "leaseTerms": ["12 months"],
            "contactEmail": "leasing@example.com",
            "contactPhone": "+14155550000",
        }
        payload.update(overrides)
        return payload

    @staticmethod
    async def create_apartment(apartment_repo: ApartmentRepository, user_id: uuid.UUID, **overrides) -> Apartment:
        data = ApartmentFactory.create_apartment_data(**overrides)
        data["user_id"] = user_id
        return await apartment_repo.create_apartment(data)


def make_image_bytes(image_format: str = "JPEG", size=(40, 30), color=(200, 80, 40)) -> bytes:
    """Small in-memory image for upload tests."""
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=image_format)
    return buffer.getvalue()


def auth_header_for(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id=user.id, email=user.email)}"}


# Common test fixtures
@pytest.fixture
async def test_user(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="owner@example.com",
        name="Olivia Owner"
    )


@pytest.fixture
async def other_user(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="other@example.com",
        name="Oscar Other",
        phone="+12125551234"
    )


@pytest.fixture
async def test_apartment(apartment_repository: ApartmentRepository, test_user: User) -> Apartment:
    return await ApartmentFactory.create_apartment(
        apartment_repository,
        test_user.id,
        unit_name="Test Property 1 - Luxury Studio",
        unit_number="T101",
        bedrooms=0,
        bathrooms=1,
        square_footage=550,
        price=2200.0
    )


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    return auth_header_for(test_user)


@pytest.fixture
def other_auth_headers(other_user: User) -> dict:
    return auth_header_for(other_user)

"""
Tests for service classes.
Tests business rules: registration, tokens, profile updates, ownership and image handling.
"""

import io
import pytest
import uuid
from datetime import timedelta

from starlette.datastructures import Headers, UploadFile

from app.models.user import User
from app.models.apartment import Apartment
from app.schemas.auth import RegisterRequest, ProfileUpdateRequest
from app.schemas.apartment import ApartmentCreate, ApartmentUpdate, ApartmentListQuery, TextSearchQuery
from app.services.auth import AuthService
from app.services.apartment import ApartmentService
from app.services.image import ImageService
from app.utils.auth import create_access_token
from app.utils.exceptions import (
    ApartmentNotFoundError,
    ApartmentOwnershipError,
    BadRequestError,
    DuplicateApartmentError,
    DuplicateEmailError,
    FileUploadError,
    ImageLimitExceededError,
    InvalidCredentialsError,
    InvalidTokenError,
    TokenExpiredError,
    ValidationError,
)
from app.utils.file_utils import FileStorage
from tests.conftest import ApartmentFactory, TEST_PASSWORD, make_image_bytes


def upload(filename: str = "photo.jpg", content_type: str = "image/jpeg", data: bytes = None) -> UploadFile:
    return UploadFile(
        file=io.BytesIO(make_image_bytes() if data is None else data),
        filename=filename,
        headers=Headers({"content-type": content_type})
    )


def build_url(name: str) -> str:
    return f"http://test/uploads/apartments/{name}"


@pytest.fixture
def image_service(tmp_path) -> ImageService:
    return ImageService(storage=FileStorage(base_dir=tmp_path))


@pytest.fixture
def apartment_service_with_storage(db_session, image_service) -> ApartmentService:
    return ApartmentService(db_session, image_service=image_service)


class TestAuthService:
    """Test AuthService functionality."""

    @pytest.mark.asyncio
    async def test_register_returns_user_and_token(self, auth_service: AuthService):
        request = RegisterRequest(
            name="Jane Doe", email="Jane.Doe@Example.com", password=TEST_PASSWORD, phone="+14155550101"
        )
        user, token = await auth_service.register(request)

        assert user.email == "jane.doe@example.com"
        assert token
        assert (await auth_service.get_current_user(token)).id == user.id

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, auth_service: AuthService, test_user: User):
        request = RegisterRequest(
            name="Copy Cat", email="OWNER@example.com", password=TEST_PASSWORD, phone="+14155550101"
        )
        with pytest.raises(DuplicateEmailError):
            await auth_service.register(request)

    @pytest.mark.asyncio
    async def test_login(self, auth_service: AuthService, test_user: User):
        user, token = await auth_service.login(test_user.email, TEST_PASSWORD)
        assert user.id == test_user.id
        assert token

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, auth_service: AuthService, test_user: User):
        with pytest.raises(InvalidCredentialsError):
            await auth_service.login(test_user.email, "WrongPass1!")

    @pytest.mark.asyncio
    async def test_login_unknown_email(self, auth_service: AuthService):
        with pytest.raises(InvalidCredentialsError):
            await auth_service.login("ghost@example.com", TEST_PASSWORD)

    @pytest.mark.asyncio
    async def test_expired_token(self, auth_service: AuthService, test_user: User):
        token = create_access_token(test_user.id, test_user.email, expires_delta=timedelta(seconds=-10))
        with pytest.raises(TokenExpiredError):
            await auth_service.get_current_user(token)

    @pytest.mark.asyncio
    async def test_malformed_token(self, auth_service: AuthService):
        with pytest.raises(InvalidTokenError) as exc_info:
            await auth_service.get_current_user("not-a-jwt")
        assert exc_info.value.detail == "Invalid token"

    @pytest.mark.asyncio
    async def test_token_for_deleted_user(self, auth_service: AuthService):
        token = create_access_token(uuid.uuid4(), "gone@example.com")
        with pytest.raises(InvalidTokenError) as exc_info:
            await auth_service.get_current_user(token)
        assert exc_info.value.detail == "Invalid token - user not found"

    @pytest.mark.asyncio
    async def test_update_profile_fields(self, auth_service: AuthService, test_user: User):
        update = ProfileUpdateRequest(name="Renamed User", phone="+12125550000")
        user, password_changed = await auth_service.update_profile(test_user, update)

        assert password_changed is False
        assert user.name == "Renamed User"
        assert user.phone == "+12125550000"

    @pytest.mark.asyncio
    async def test_change_password(self, auth_service: AuthService, test_user: User):
        update = ProfileUpdateRequest.model_validate({
            "currentPassword": TEST_PASSWORD,
            "newPassword": "BrandNew1!",
            "confirmPassword": "BrandNew1!",
        })
        user, password_changed = await auth_service.update_profile(test_user, update)

        assert password_changed is True
        assert user.verify_password("BrandNew1!")

    @pytest.mark.asyncio
    async def test_change_password_requires_current(self, auth_service: AuthService, test_user: User):
        update = ProfileUpdateRequest.model_validate({"newPassword": "BrandNew1!"})
        with pytest.raises(BadRequestError, match="Current password is required to change password"):
            await auth_service.update_profile(test_user, update)

    @pytest.mark.asyncio
    async def test_change_password_wrong_current(self, auth_service: AuthService, test_user: User):
        update = ProfileUpdateRequest.model_validate({
            "currentPassword": "NotMine1!",
            "newPassword": "BrandNew1!",
        })
        with pytest.raises(BadRequestError, match="Current password is incorrect"):
            await auth_service.update_profile(test_user, update)


class TestApartmentService:
    """Test ApartmentService business rules."""

    @pytest.mark.asyncio
    async def test_create_apartment(self, apartment_service: ApartmentService, test_user: User):
        data = ApartmentCreate.model_validate(ApartmentFactory.create_payload(unitNumber="N1"))
        apartment = await apartment_service.create_apartment(data, test_user)

        assert apartment.unit_number == "N1"
        assert apartment.user_id == test_user.id
        assert apartment.images == []

    @pytest.mark.asyncio
    async def test_create_duplicate_unit(
        self, apartment_service: ApartmentService, test_user: User, test_apartment: Apartment
    ):
        data = ApartmentCreate.model_validate(
            ApartmentFactory.create_payload(unitNumber="T101", project="Test Heights")
        )
        with pytest.raises(DuplicateApartmentError):
            await apartment_service.create_apartment(data, test_user)

    @pytest.mark.asyncio
    async def test_get_missing_apartment(self, apartment_service: ApartmentService):
        with pytest.raises(ApartmentNotFoundError):
            await apartment_service.get_apartment(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_update_by_owner(
        self, apartment_service: ApartmentService, test_user: User, test_apartment: Apartment
    ):
        update = ApartmentUpdate.model_validate({"price": 2500, "isAvailable": False})
        updated = await apartment_service.update_apartment(test_apartment.id, update, test_user)

        assert updated.price == 2500.0
        assert updated.is_available is False
        assert updated.unit_name == "Test Property 1 - Luxury Studio"

    @pytest.mark.asyncio
    async def test_update_by_other_user(
        self, apartment_service: ApartmentService, other_user: User, test_apartment: Apartment
    ):
        update = ApartmentUpdate.model_validate({"price": 1})
        with pytest.raises(ApartmentOwnershipError) as exc_info:
            await apartment_service.update_apartment(test_apartment.id, update, other_user)
        assert exc_info.value.detail == "You can only update your own apartments"

    @pytest.mark.asyncio
    async def test_update_to_taken_unit(
        self, apartment_service: ApartmentService, apartment_repository, test_user: User, test_apartment: Apartment
    ):
        second = await ApartmentFactory.create_apartment(apartment_repository, test_user.id, unit_number="T102")
        update = ApartmentUpdate.model_validate({"unitNumber": "T101"})

        with pytest.raises(DuplicateApartmentError):
            await apartment_service.update_apartment(second.id, update, test_user)

    @pytest.mark.asyncio
    async def test_update_keeping_own_unit_number(
        self, apartment_service: ApartmentService, test_user: User, test_apartment: Apartment
    ):
        update = ApartmentUpdate.model_validate({"unitNumber": "T101", "project": "Test Heights"})
        updated = await apartment_service.update_apartment(test_apartment.id, update, test_user)
        assert updated.unit_number == "T101"

    @pytest.mark.asyncio
    async def test_delete_by_other_user(
        self, apartment_service: ApartmentService, other_user: User, test_apartment: Apartment
    ):
        with pytest.raises(ApartmentOwnershipError) as exc_info:
            await apartment_service.delete_apartment(test_apartment.id, other_user)
        assert exc_info.value.detail == "You can only delete your own apartments"

    @pytest.mark.asyncio
    async def test_delete_by_owner(
        self, apartment_service: ApartmentService, test_user: User, test_apartment: Apartment
    ):
        await apartment_service.delete_apartment(test_apartment.id, test_user)
        with pytest.raises(ApartmentNotFoundError):
            await apartment_service.get_apartment(test_apartment.id)

    @pytest.mark.asyncio
    async def test_list_uses_page_and_limit(
        self, apartment_service: ApartmentService, apartment_repository, test_user: User
    ):
        for number in range(3):
            await ApartmentFactory.create_apartment(apartment_repository, test_user.id, unit_number=f"P{number}")

        apartments, total = await apartment_service.list_apartments(
            ApartmentListQuery(page=2, limit=2, sort_by="createdAt", sort_order="asc")
        )
        assert total == 3
        assert [a.unit_number for a in apartments] == ["P2"]

    @pytest.mark.asyncio
    async def test_search_requires_query(self, apartment_service: ApartmentService):
        with pytest.raises(BadRequestError, match="Search query is required"):
            await apartment_service.search_apartments(TextSearchQuery(q="   "))

    @pytest.mark.asyncio
    async def test_statistics(self, apartment_service: ApartmentService, test_apartment: Apartment):
        stats = await apartment_service.get_statistics()
        assert stats["total"] == 1
        assert stats["project_counts"] == {"Test Heights": 1}


class TestApartmentImages:
    """Test image handling in the apartment service."""

    @pytest.mark.asyncio
    async def test_create_with_uploads(
        self, apartment_service_with_storage: ApartmentService, image_service: ImageService, test_user: User
    ):
        data = ApartmentCreate.model_validate(
            ApartmentFactory.create_payload(images=["https://cdn.example.com/a.jpg"])
        )
        apartment = await apartment_service_with_storage.create_apartment(
            data, test_user, files=[upload("one.jpg"), upload("two.png", "image/png", make_image_bytes("PNG"))],
            build_url=build_url
        )

        assert len(apartment.images) == 3
        assert apartment.images[0] == "https://cdn.example.com/a.jpg"
        stored = sorted(p.name for p in image_service.storage.image_dir.iterdir())
        assert len(stored) == 2
        assert all(url.startswith("http://test/uploads/apartments/") for url in apartment.images[1:])

    @pytest.mark.asyncio
    async def test_invalid_upload_leaves_no_files(
        self, apartment_service_with_storage: ApartmentService, image_service: ImageService, test_user: User
    ):
        data = ApartmentCreate.model_validate(ApartmentFactory.create_payload())
        with pytest.raises(FileUploadError):
            await apartment_service_with_storage.create_apartment(
                data, test_user, files=[upload("notes.txt", "text/plain", b"hello")], build_url=build_url
            )
        assert list(image_service.storage.image_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_duplicate_unit_discards_uploads(
        self, apartment_service_with_storage: ApartmentService, image_service: ImageService,
        test_user: User, test_apartment: Apartment
    ):
        data = ApartmentCreate.model_validate(ApartmentFactory.create_payload(unitNumber="T101"))
        with pytest.raises(DuplicateApartmentError):
            await apartment_service_with_storage.create_apartment(
                data, test_user, files=[upload()], build_url=build_url
            )
        assert list(image_service.storage.image_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_image_limit(
        self, apartment_service_with_storage: ApartmentService, test_user: User
    ):
        existing = [f"https://cdn.example.com/{n}.jpg" for n in range(9)]
        data = ApartmentCreate.model_validate(ApartmentFactory.create_payload(images=existing))

        with pytest.raises(ImageLimitExceededError):
            await apartment_service_with_storage.create_apartment(
                data, test_user, files=[upload(), upload()], build_url=build_url
            )

    @pytest.mark.asyncio
    async def test_update_replaces_removed_local_files(
        self, apartment_service_with_storage: ApartmentService, image_service: ImageService, test_user: User
    ):
        data = ApartmentCreate.model_validate(ApartmentFactory.create_payload())
        apartment = await apartment_service_with_storage.create_apartment(
            data, test_user, files=[upload("first.jpg")], build_url=build_url
        )
        old_url = apartment.images[0]
        old_path = image_service.storage.path_from_url(old_url)
        assert old_path.exists()

        updated = await apartment_service_with_storage.update_apartment(
            apartment.id,
            ApartmentUpdate.model_validate({"images": []}),
            test_user,
            files=[upload("second.jpg")],
            build_url=build_url
        )

        assert len(updated.images) == 1
        assert updated.images[0] != old_url
        assert not old_path.exists()
        assert image_service.storage.path_from_url(updated.images[0]).exists()

    @pytest.mark.asyncio
    async def test_update_keeps_images_when_not_mentioned(
        self, apartment_service_with_storage: ApartmentService, test_user: User
    ):
        data = ApartmentCreate.model_validate(
            ApartmentFactory.create_payload(images=["https://cdn.example.com/keep.jpg"])
        )
        apartment = await apartment_service_with_storage.create_apartment(data, test_user)

        updated = await apartment_service_with_storage.update_apartment(
            apartment.id, ApartmentUpdate.model_validate({"price": 999}), test_user
        )
        assert updated.images == ["https://cdn.example.com/keep.jpg"]

    @pytest.mark.asyncio
    async def test_delete_removes_files(
        self, apartment_service_with_storage: ApartmentService, image_service: ImageService, test_user: User
    ):
        data = ApartmentCreate.model_validate(ApartmentFactory.create_payload())
        apartment = await apartment_service_with_storage.create_apartment(
            data, test_user, files=[upload()], build_url=build_url
        )
        path = image_service.storage.path_from_url(apartment.images[0])

        await apartment_service_with_storage.delete_apartment(apartment.id, test_user)
        assert not path.exists()

    @pytest.mark.asyncio
    async def test_create_cannot_reference_another_apartments_upload(
        self, apartment_service_with_storage: ApartmentService, image_service: ImageService,
        test_user: User, other_user: User
    ):
        original = await apartment_service_with_storage.create_apartment(
            ApartmentCreate.model_validate(ApartmentFactory.create_payload()), test_user,
            files=[upload()], build_url=build_url
        )
        borrowed_url = original.images[0]

        data = ApartmentCreate.model_validate(ApartmentFactory.create_payload(images=[borrowed_url]))
        with pytest.raises(ValidationError):
            await apartment_service_with_storage.create_apartment(data, other_user)

        assert image_service.storage.path_from_url(borrowed_url).exists()

    @pytest.mark.asyncio
    async def test_update_cannot_reference_another_apartments_upload(
        self, apartment_service_with_storage: ApartmentService, image_service: ImageService,
        test_user: User, other_user: User
    ):
        original = await apartment_service_with_storage.create_apartment(
            ApartmentCreate.model_validate(ApartmentFactory.create_payload()), test_user,
            files=[upload()], build_url=build_url
        )
        mine = await apartment_service_with_storage.create_apartment(
            ApartmentCreate.model_validate(ApartmentFactory.create_payload()), other_user
        )

        with pytest.raises(ValidationError):
            await apartment_service_with_storage.update_apartment(
                mine.id, ApartmentUpdate.model_validate({"images": original.images}), other_user
            )

        await apartment_service_with_storage.delete_apartment(mine.id, other_user)
        assert image_service.storage.path_from_url(original.images[0]).exists()

    @pytest.mark.asyncio
    async def test_update_image_list_respects_limit(
        self, apartment_service_with_storage: ApartmentService, image_service: ImageService, test_user: User
    ):
        apartment = await apartment_service_with_storage.create_apartment(
            ApartmentCreate.model_validate(ApartmentFactory.create_payload()), test_user
        )
        image_service.max_images = 2
        urls = [f"https://cdn.example.com/{n}.jpg" for n in range(3)]

        with pytest.raises(ImageLimitExceededError):
            await apartment_service_with_storage.update_apartment(
                apartment.id, ApartmentUpdate.model_validate({"images": urls}), test_user
            )

    def test_external_urls_are_not_deleted(self, image_service: ImageService):
        assert image_service.storage.path_from_url("https://cdn.example.com/uploads/x.jpg") is None
        assert image_service.delete_images(["https://cdn.example.com/a.jpg"]) == 0

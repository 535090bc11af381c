"""
Apartment service for managing listings with business rule validation.
Handles CRUD operations, ownership checks, listing queries, text search and statistics.
"""

from typing import Callable, Dict, Any, List, Optional, Sequence, Tuple
from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from app.repositories.apartment import ApartmentRepository, ApartmentSearchFilters
from app.models.apartment import Apartment
from app.models.user import User
from app.schemas.apartment import (
    ApartmentCreate,
    ApartmentUpdate,
    ApartmentListQuery,
    MyApartmentsQuery,
    TextSearchQuery,
)
from app.services.image import ImageService
from app.utils.exceptions import (
    APIException,
    ApartmentNotFoundError,
    ApartmentOwnershipError,
    BadRequestError,
    DuplicateApartmentError,
)
import uuid
import logging

logger = logging.getLogger(__name__)


class ApartmentService:
    """
    Apartment service for listing management.
    Only the owner of an apartment may change or delete it.
    """

    def __init__(self, db_session: AsyncSession, image_service: Optional[ImageService] = None):
        self.db = db_session
        self.apartment_repo = ApartmentRepository(db_session)
        self.image_service = image_service or ImageService()

    async def list_apartments(self, query: ApartmentListQuery) -> Tuple[List[Apartment], int]:
        """
        List apartments with filters, sorting and pagination.

        Returns:
            Tuple of (apartments, total count)
        """
        try:
            filters = ApartmentSearchFilters(
                search=query.search,
                unit_name=query.unit_name,
                unit_number=query.unit_number,
                project=query.project,
                city=query.city,
                state=query.state,
                min_price=query.min_price,
                max_price=query.max_price,
                bedrooms=query.bedrooms,
                bathrooms=query.bathrooms,
                is_available=query.is_available,
                pet_policy=query.pet_policy,
            )
            return await self.apartment_repo.search_apartments(
                filters,
                skip=(query.page - 1) * query.limit,
                limit=query.limit,
                sort_by=query.sort_by,
                sort_order=query.sort_order,
            )
        except SQLAlchemyError:
            raise
        except Exception as e:
            logger.error(f"Failed to list apartments: {e}")
            raise BadRequestError(f"Failed to list apartments: {str(e)}")

    async def list_user_apartments(
        self,
        current_user: User,
        query: MyApartmentsQuery
    ) -> Tuple[List[Apartment], int]:
        """Listings owned by the current user."""
        try:
            return await self.apartment_repo.get_apartments_by_owner(
                current_user.id,
                skip=(query.page - 1) * query.limit,
                limit=query.limit,
                sort_by=query.sort_by,
                sort_order=query.sort_order,
                search=query.search,
            )
        except SQLAlchemyError:
            raise
        except Exception as e:
            logger.error(f"Failed to list apartments of user {current_user.id}: {e}")
            raise BadRequestError(f"Failed to retrieve your apartments: {str(e)}")

    async def search_apartments(self, query: TextSearchQuery) -> Tuple[List[Apartment], int]:
        """
        Relevance-ranked text search.

        Raises:
            BadRequestError: If the search text is missing
        """
        if not query.q or not query.q.strip():
            raise BadRequestError("Search query is required")

        try:
            return await self.apartment_repo.text_search(
                query.q.strip(),
                skip=(query.page - 1) * query.limit,
                limit=query.limit,
            )
        except SQLAlchemyError:
            raise
        except Exception as e:
            logger.error(f"Failed to search apartments for '{query.q}': {e}")
            raise BadRequestError(f"Failed to search apartments: {str(e)}")

    async def get_apartment(self, apartment_id: uuid.UUID) -> Apartment:
        """
        Get apartment by ID.

        Raises:
            ApartmentNotFoundError: If apartment doesn't exist
        """
        apartment = await self.apartment_repo.get_by_id(apartment_id)
        if not apartment:
            raise ApartmentNotFoundError()
        return apartment

    async def create_apartment(
        self,
        apartment_data: ApartmentCreate,
        current_user: User,
        files: Sequence[UploadFile] = (),
        build_url: Optional[Callable[[str], str]] = None
    ) -> Apartment:
        """
        Create an apartment owned by the current user.

        Args:
            apartment_data: Validated apartment payload
            current_user: Owner of the new listing
            files: Uploaded images appended after any image URLs in the payload
            build_url: Maps a stored image filename to its public URL

        Returns:
            Created apartment

        Raises:
            DuplicateApartmentError: If the unit number is taken within the project
            FileUploadError: If an upload is invalid
        """
        saved = None
        try:
            await self._ensure_unit_available(apartment_data.unit_number, apartment_data.project)

            create_data = apartment_data.model_dump()
            create_data["user_id"] = current_user.id

            self.image_service.check_local_images(create_data["images"])
            self.image_service.check_image_limit(len(create_data["images"]))

            if files:
                await self.image_service.validate_uploads(files, existing_count=len(create_data["images"]))
                saved = await self.image_service.save_uploads(files, build_url)
                create_data["images"] = create_data["images"] + saved.urls

            apartment = await self.apartment_repo.create_apartment(create_data)
            logger.info(f"Apartment created by user {current_user.email}: {apartment.id}")
            return apartment

        except APIException:
            self._discard(saved)
            raise
        except IntegrityError:
            self._discard(saved)
            raise DuplicateApartmentError()
        except Exception as e:
            self._discard(saved)
            logger.error(f"Failed to create apartment for user {current_user.id}: {e}")
            raise BadRequestError(f"Failed to create apartment: {str(e)}")

    async def update_apartment(
        self,
        apartment_id: uuid.UUID,
        apartment_data: ApartmentUpdate,
        current_user: User,
        files: Sequence[UploadFile] = (),
        build_url: Optional[Callable[[str], str]] = None
    ) -> Apartment:
        """
        Partially update an apartment owned by the current user.

        The image list becomes the ``images`` field of the payload (or the stored
        list) followed by the URLs of new uploads. Uploaded files may only be kept
        by the apartment that holds them. Local files dropped from the list are
        deleted once the update is stored.

        Raises:
            ApartmentNotFoundError: If apartment doesn't exist
            ApartmentOwnershipError: If the current user is not the owner
            DuplicateApartmentError: If the new unit number is taken within the project
            ValidationError: If the list names another apartment's upload
            ImageLimitExceededError: If the apartment would hold too many images
        """
        saved = None
        try:
            apartment = await self.get_apartment(apartment_id)
            if not apartment.is_owned_by(current_user.id):
                raise ApartmentOwnershipError("update")

            update_data = apartment_data.to_update_dict()

            unit_number = update_data.get("unit_number", apartment.unit_number)
            project = update_data.get("project", apartment.project)
            if unit_number != apartment.unit_number or project != apartment.project:
                await self._ensure_unit_available(unit_number, project, exclude_id=apartment.id)

            previous_images = list(apartment.images or [])
            kept_images = update_data.get("images", previous_images)
            if "images" in update_data:
                self.image_service.check_local_images(kept_images, owned_urls=previous_images)
                self.image_service.check_image_limit(len(kept_images))

            if files:
                await self.image_service.validate_uploads(files, existing_count=len(kept_images))
                saved = await self.image_service.save_uploads(files, build_url)
                update_data["images"] = list(kept_images) + saved.urls

            updated = await self.apartment_repo.update(apartment, update_data)

            removed = [url for url in previous_images if url not in (updated.images or [])]
            if removed:
                self.image_service.delete_images(removed)

            logger.info(f"Apartment updated by user {current_user.email}: {apartment_id}")
            return updated

        except APIException:
            self._discard(saved)
            raise
        except IntegrityError:
            self._discard(saved)
            raise DuplicateApartmentError()
        except Exception as e:
            self._discard(saved)
            logger.error(f"Failed to update apartment {apartment_id}: {e}")
            raise BadRequestError(f"Failed to update apartment: {str(e)}")

    async def delete_apartment(self, apartment_id: uuid.UUID, current_user: User) -> None:
        """
        Delete an apartment owned by the current user, with its stored images.

        Raises:
            ApartmentNotFoundError: If apartment doesn't exist
            ApartmentOwnershipError: If the current user is not the owner
        """
        try:
            apartment = await self.get_apartment(apartment_id)
            if not apartment.is_owned_by(current_user.id):
                raise ApartmentOwnershipError("delete")

            images = list(apartment.images or [])
            await self.apartment_repo.delete(apartment)
            self.image_service.delete_images(images)

            logger.info(f"Apartment deleted by user {current_user.email}: {apartment_id}")

        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to delete apartment {apartment_id}: {e}")
            raise BadRequestError(f"Failed to delete apartment: {str(e)}")

    async def get_statistics(self) -> Dict[str, Any]:
        try:
            return await self.apartment_repo.get_apartment_statistics()
        except SQLAlchemyError:
            raise
        except Exception as e:
            logger.error(f"Failed to get apartment statistics: {e}")
            raise BadRequestError(f"Failed to get apartment statistics: {str(e)}")

    async def _ensure_unit_available(
        self,
        unit_number: str,
        project: str,
        exclude_id: Optional[uuid.UUID] = None
    ) -> None:
        existing = await self.apartment_repo.get_by_unit(unit_number, project, exclude_id=exclude_id)
        if existing:
            raise DuplicateApartmentError()

    def _discard(self, saved) -> None:
        if saved:
            self.image_service.discard(saved.paths)

"""
Apartment API endpoints for listing, search, statistics and owner CRUD operations.
Literal paths are declared before /{apartment_id} so they are matched first.
"""

from fastapi import APIRouter, Depends, Request, status, Query, Path
from pydantic import ValidationError as PydanticValidationError
from typing import List, Optional
from uuid import UUID

from app.models.apartment import Apartment
from app.models.user import User
from app.services.apartment import ApartmentService
from app.schemas.apartment import (
    ApartmentCreate,
    ApartmentUpdate,
    ApartmentResponse,
    ApartmentEnvelope,
    ApartmentListResponse,
    ApartmentListQuery,
    MyApartmentsQuery,
    TextSearchQuery,
    ApartmentStats,
    ApartmentStatsResponse,
)
from app.schemas.common import MessageResponse, PaginationMeta
from app.schemas.error import get_common_error_responses, get_crud_error_responses
from app.utils.dependencies import get_apartment_service, get_current_user
from app.utils.exceptions import APIException, BadRequestError
from app.utils.file_utils import APARTMENT_IMAGE_DIR
from app.utils.forms import parse_apartment_body


router = APIRouter(prefix="/apartments", tags=["Apartments"])


def _to_response(apartment: Apartment) -> ApartmentResponse:
    return ApartmentResponse.model_validate(apartment.to_dict())


def _list_response(apartments: List[Apartment], total: int, page: int, limit: int) -> ApartmentListResponse:
    return ApartmentListResponse(
        data=[_to_response(apartment) for apartment in apartments],
        pagination=PaginationMeta.build(page=page, limit=limit, total=total)
    )


def _parse_apartment_id(apartment_id: str) -> UUID:
    try:
        return UUID(apartment_id)
    except ValueError:
        raise BadRequestError("Invalid apartment ID")


def _image_url_builder(request: Request):
    def build_url(filename: str) -> str:
        return str(request.url_for("uploads", path=f"{APARTMENT_IMAGE_DIR}/{filename}"))
    return build_url


def _drop_none(params: dict) -> dict:
    return {key: value for key, value in params.items() if value is not None}


async def get_list_query(
    page: Optional[str] = Query(None, description="Page number (starts from 1)"),
    limit: Optional[str] = Query(None, description="Items per page (1-100)"),
    search: Optional[str] = Query(None, description="Text matched across name, number, project, description, address and city"),
    unit_name: Optional[str] = Query(None, alias="unitName", description="Unit name contains"),
    unit_number: Optional[str] = Query(None, alias="unitNumber", description="Unit number contains"),
    project: Optional[str] = Query(None, description="Project contains"),
    city: Optional[str] = Query(None, description="City contains"),
    state: Optional[str] = Query(None, description="State contains"),
    min_price: Optional[str] = Query(None, alias="minPrice", description="Minimum price"),
    max_price: Optional[str] = Query(None, alias="maxPrice", description="Maximum price"),
    bedrooms: Optional[str] = Query(None, description="Minimum number of bedrooms"),
    bathrooms: Optional[str] = Query(None, description="Minimum number of bathrooms"),
    is_available: Optional[str] = Query(None, alias="isAvailable", description="Availability"),
    pet_policy: Optional[str] = Query(None, alias="petPolicy", description="allowed, not-allowed or conditional"),
    sort_by: Optional[str] = Query(None, alias="sortBy", description="price, bedrooms, bathrooms, squareFootage, createdAt or unitName"),
    sort_order: Optional[str] = Query(None, alias="sortOrder", description="asc or desc"),
) -> ApartmentListQuery:
    """Collect listing query parameters; blank values count as absent."""
    return ApartmentListQuery.model_validate(_drop_none({
        "page": page,
        "limit": limit,
        "search": search,
        "unitName": unit_name,
        "unitNumber": unit_number,
        "project": project,
        "city": city,
        "state": state,
        "minPrice": min_price,
        "maxPrice": max_price,
        "bedrooms": bedrooms,
        "bathrooms": bathrooms,
        "isAvailable": is_available,
        "petPolicy": pet_policy,
        "sortBy": sort_by,
        "sortOrder": sort_order,
    }))


async def get_my_apartments_query(
    page: Optional[str] = Query(None, description="Page number (starts from 1)"),
    limit: Optional[str] = Query(None, description="Items per page (1-100)"),
    search: Optional[str] = Query(None, description="Text matched across name, project, description, address and city"),
    sort_by: Optional[str] = Query(None, alias="sortBy", description="Sort field"),
    sort_order: Optional[str] = Query(None, alias="sortOrder", description="asc or desc"),
) -> MyApartmentsQuery:
    return MyApartmentsQuery.model_validate(_drop_none({
        "page": page,
        "limit": limit,
        "search": search,
        "sortBy": sort_by,
        "sortOrder": sort_order,
    }))


async def get_text_search_query(
    q: Optional[str] = Query(None, description="Search text"),
    page: Optional[str] = Query(None, description="Page number (starts from 1)"),
    limit: Optional[str] = Query(None, description="Items per page (1-100)"),
) -> TextSearchQuery:
    return TextSearchQuery.model_validate(_drop_none({"q": q, "page": page, "limit": limit}))


@router.get(
    "/stats",
    response_model=ApartmentStatsResponse,
    status_code=status.HTTP_200_OK,
    summary="Apartment statistics",
    description="Totals, availability, price aggregates, bedroom distribution and project counts"
)
async def get_apartment_stats(
    apartment_service: ApartmentService = Depends(get_apartment_service)
) -> ApartmentStatsResponse:
    stats = await apartment_service.get_statistics()
    return ApartmentStatsResponse(data=ApartmentStats.model_validate(stats))


@router.get(
    "/search",
    response_model=ApartmentListResponse,
    status_code=status.HTTP_200_OK,
    summary="Text search",
    description="Search unit names, projects and descriptions ranked by relevance",
    responses=get_common_error_responses()
)
async def search_apartments(
    query: TextSearchQuery = Depends(get_text_search_query),
    apartment_service: ApartmentService = Depends(get_apartment_service)
) -> ApartmentListResponse:
    """
    Relevance-ranked search.

    Raises:
        BadRequestError: If ``q`` is missing or blank
    """
    apartments, total = await apartment_service.search_apartments(query)
    return _list_response(apartments, total, query.page, query.limit)


@router.get(
    "/my-apartments",
    response_model=ApartmentListResponse,
    status_code=status.HTTP_200_OK,
    summary="My apartments",
    description="Paginated list of the authenticated user's apartments",
    responses=get_common_error_responses()
)
@router.get("/my-listings", response_model=ApartmentListResponse, include_in_schema=False)
async def get_my_apartments(
    query: MyApartmentsQuery = Depends(get_my_apartments_query),
    current_user: User = Depends(get_current_user),
    apartment_service: ApartmentService = Depends(get_apartment_service)
) -> ApartmentListResponse:
    apartments, total = await apartment_service.list_user_apartments(current_user, query)
    return _list_response(apartments, total, query.page, query.limit)


@router.get(
    "",
    response_model=ApartmentListResponse,
    status_code=status.HTTP_200_OK,
    summary="List apartments with search and filtering",
    description="Get a paginated list of apartments with optional filters and sorting",
    responses=get_common_error_responses()
)
async def list_apartments(
    query: ApartmentListQuery = Depends(get_list_query),
    apartment_service: ApartmentService = Depends(get_apartment_service)
) -> ApartmentListResponse:
    """
    Get paginated list of apartments.

    Returns:
        Apartments with ``pagination`` metadata where pages = ceil(total / limit)
    """
    apartments, total = await apartment_service.list_apartments(query)
    return _list_response(apartments, total, query.page, query.limit)


@router.post(
    "",
    response_model=ApartmentEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create apartment",
    description="Create a listing from a JSON body or a multipart form with image files under 'images'",
    responses=get_crud_error_responses()
)
async def create_apartment(
    request: Request,
    current_user: User = Depends(get_current_user),
    apartment_service: ApartmentService = Depends(get_apartment_service)
) -> ApartmentEnvelope:
    """
    Create a new apartment owned by the current user.

    Raises:
        ValidationError: If the payload is invalid
        DuplicateApartmentError: If the unit number is taken within the project
        FileUploadError: If an uploaded image is invalid
    """
    body = await parse_apartment_body(request)
    apartment_data = ApartmentCreate.model_validate(body.data)

    try:
        apartment = await apartment_service.create_apartment(
            apartment_data,
            current_user,
            files=body.files,
            build_url=_image_url_builder(request)
        )
        return ApartmentEnvelope(data=_to_response(apartment), message="Apartment created successfully")

    except (APIException, PydanticValidationError):
        raise
    except Exception as e:
        raise BadRequestError(f"Failed to create apartment: {str(e)}")


@router.get(
    "/{apartment_id}",
    response_model=ApartmentEnvelope,
    status_code=status.HTTP_200_OK,
    summary="Get apartment details",
    responses=get_common_error_responses()
)
async def get_apartment(
    apartment_id: str = Path(..., description="Apartment ID"),
    apartment_service: ApartmentService = Depends(get_apartment_service)
) -> ApartmentEnvelope:
    apartment = await apartment_service.get_apartment(_parse_apartment_id(apartment_id))
    return ApartmentEnvelope(data=_to_response(apartment))


@router.put(
    "/{apartment_id}",
    response_model=ApartmentEnvelope,
    status_code=status.HTTP_200_OK,
    summary="Update apartment",
    description="Partial update by the owner. Multipart requests may send 'existingImages' and new 'images' files.",
    responses=get_crud_error_responses()
)
async def update_apartment(
    request: Request,
    apartment_id: str = Path(..., description="Apartment ID"),
    current_user: User = Depends(get_current_user),
    apartment_service: ApartmentService = Depends(get_apartment_service)
) -> ApartmentEnvelope:
    """
    Update an apartment.

    Raises:
        ApartmentNotFoundError: If apartment doesn't exist
        ApartmentOwnershipError: If the current user is not the owner
        DuplicateApartmentError: If the unit number is taken within the project
    """
    apartment_uuid = _parse_apartment_id(apartment_id)
    body = await parse_apartment_body(request)
    apartment_data = ApartmentUpdate.model_validate(body.update_fields())

    try:
        apartment = await apartment_service.update_apartment(
            apartment_uuid,
            apartment_data,
            current_user,
            files=body.files,
            build_url=_image_url_builder(request)
        )
        return ApartmentEnvelope(data=_to_response(apartment), message="Apartment updated successfully")

    except (APIException, PydanticValidationError):
        raise
    except Exception as e:
        raise BadRequestError(f"Failed to update apartment: {str(e)}")


@router.delete(
    "/{apartment_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete apartment",
    description="Delete a listing. Only the owner can delete.",
    responses=get_crud_error_responses()
)
async def delete_apartment(
    apartment_id: str = Path(..., description="Apartment ID"),
    current_user: User = Depends(get_current_user),
    apartment_service: ApartmentService = Depends(get_apartment_service)
) -> MessageResponse:
    await apartment_service.delete_apartment(_parse_apartment_id(apartment_id), current_user)
    return MessageResponse(message="Apartment deleted successfully")

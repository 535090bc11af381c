"""
Pydantic schemas for apartment requests and responses.
Handles apartment CRUD payloads, listing query parameters and statistics.
"""

from pydantic import EmailStr, Field, field_validator, model_validator
from pydantic_core import PydanticUseDefault
from typing import Optional, List, Dict, Literal
from datetime import datetime
from app.config import settings
from app.models.apartment import PetPolicy
from app.schemas.common import CamelModel, PaginationMeta, normalize_phone, URL_PATTERN


SortField = Literal["price", "bedrooms", "bathrooms", "squareFootage", "createdAt", "unitName"]
SortOrder = Literal["asc", "desc"]

# Fields that may be cleared on update
NULLABLE_FIELDS = {"floor_plan", "virtual_tour_url"}


def _strip_required(value: str, label: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError(f"{label} is required")
    return value


def _check_url(value: Optional[str], label: str) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if not URL_PATTERN.match(value):
        raise ValueError(f"{label} must be a valid URL")
    return value


class ApartmentFields(CamelModel):
    """Validation rules shared by create and update payloads."""

    @field_validator(
        "unit_name", "unit_number", "project", "description",
        "address", "city", "state", "zip_code",
        check_fields=False
    )
    @classmethod
    def strip_text(cls, v, info):
        if v is None:
            return v
        return _strip_required(v, info.field_name.replace("_", " ").capitalize())

    @field_validator("amenities", "lease_terms", "images", check_fields=False)
    @classmethod
    def strip_items(cls, v):
        if v is None:
            return v
        return [item.strip() for item in v if item and item.strip()]

    @field_validator("images", check_fields=False)
    @classmethod
    def check_image_urls(cls, v):
        if v is None:
            return v
        for url in v:
            if not URL_PATTERN.match(url):
                raise ValueError("Each image must be a valid URL")
        return v

    @field_validator("contact_email", check_fields=False)
    @classmethod
    def normalize_email(cls, v):
        if v is None:
            return v
        v = v.lower().strip()
        if len(v) > 100:
            raise ValueError("Contact email cannot exceed 100 characters")
        return v

    @field_validator("contact_phone", check_fields=False)
    @classmethod
    def check_phone(cls, v):
        return normalize_phone(v) if v is not None else v

    @field_validator("floor_plan", check_fields=False)
    @classmethod
    def check_floor_plan(cls, v):
        return _check_url(v, "Floor plan")

    @field_validator("virtual_tour_url", check_fields=False)
    @classmethod
    def check_virtual_tour(cls, v):
        return _check_url(v, "Virtual tour URL")


class ApartmentCreate(ApartmentFields):
    """Schema for creating an apartment listing."""

    unit_name: str = Field(..., max_length=100, examples=["Skyline Loft"])
    unit_number: str = Field(..., max_length=20, examples=["T101"])
    project: str = Field(..., max_length=100, examples=["Test Heights"])
    description: str = Field(..., max_length=2000)
    bedrooms: int = Field(..., ge=0, le=10, examples=[2])
    bathrooms: float = Field(..., ge=0.5, le=10, examples=[1.5])
    square_footage: int = Field(..., ge=100, le=10000, examples=[950])
    price: float = Field(..., ge=0, description="Monthly rent", examples=[3200])
    address: str = Field(..., max_length=200, examples=["123 Market Street"])
    city: str = Field(..., max_length=100, examples=["San Francisco"])
    state: str = Field(..., max_length=50, examples=["California"])
    zip_code: str = Field(..., max_length=10, examples=["94103"])
    amenities: List[str] = Field(default_factory=list, max_length=20)
    images: List[str] = Field(default_factory=list, max_length=10)
    is_available: bool = True
    floor_plan: Optional[str] = Field(None, max_length=500)
    pet_policy: PetPolicy = Field(..., examples=["allowed"])
    parking_spaces: int = Field(..., ge=0, le=10, examples=[1])
    lease_terms: List[str] = Field(..., min_length=1, examples=[["12 months"]])
    contact_email: EmailStr
    contact_phone: str = Field(..., examples=["+14155550000"])
    virtual_tour_url: Optional[str] = Field(None, max_length=500)

    @model_validator(mode="after")
    def check_lease_terms(self):
        if not self.lease_terms:
            raise ValueError("At least one lease term is required")
        return self


class ApartmentUpdate(ApartmentFields):
    """
    Schema for a partial apartment update.
    Only fields present in the payload are applied.
    """

    unit_name: Optional[str] = Field(None, max_length=100)
    unit_number: Optional[str] = Field(None, max_length=20)
    project: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=2000)
    bedrooms: Optional[int] = Field(None, ge=0, le=10)
    bathrooms: Optional[float] = Field(None, ge=0.5, le=10)
    square_footage: Optional[int] = Field(None, ge=100, le=10000)
    price: Optional[float] = Field(None, ge=0)
    address: Optional[str] = Field(None, max_length=200)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=50)
    zip_code: Optional[str] = Field(None, max_length=10)
    amenities: Optional[List[str]] = Field(None, max_length=20)
    images: Optional[List[str]] = Field(None, max_length=10)
    is_available: Optional[bool] = None
    floor_plan: Optional[str] = Field(None, max_length=500)
    pet_policy: Optional[PetPolicy] = None
    parking_spaces: Optional[int] = Field(None, ge=0, le=10)
    lease_terms: Optional[List[str]] = Field(None, min_length=1)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = None
    virtual_tour_url: Optional[str] = Field(None, max_length=500)

    @model_validator(mode="after")
    def reject_null_required(self):
        for field in self.model_fields_set:
            if field not in NULLABLE_FIELDS and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        if self.lease_terms is not None and not self.lease_terms:
            raise ValueError("At least one lease term is required")
        return self

    def to_update_dict(self) -> dict:
        """Fields explicitly sent by the client, in model attribute names."""
        return self.model_dump(exclude_unset=True, mode="python")


class ApartmentResponse(CamelModel):
    """Apartment as returned by the API."""

    id: str
    unit_name: str
    unit_number: str
    project: str
    description: str
    bedrooms: int
    bathrooms: float
    square_footage: int
    price: float
    address: str
    city: str
    state: str
    zip_code: str
    amenities: List[str]
    images: List[str]
    is_available: bool
    floor_plan: Optional[str] = None
    pet_policy: PetPolicy
    parking_spaces: int
    lease_terms: List[str]
    contact_email: str
    contact_phone: str
    virtual_tour_url: Optional[str] = None
    user_id: str
    created_at: datetime
    updated_at: datetime


class ApartmentEnvelope(CamelModel):
    """Envelope for a single apartment."""

    success: bool = True
    message: Optional[str] = None
    data: ApartmentResponse


class ApartmentListResponse(CamelModel):
    """Envelope for a paginated list of apartments."""

    success: bool = True
    data: List[ApartmentResponse]
    pagination: PaginationMeta


class BlankAsDefaultModel(CamelModel):
    """Query models where an empty parameter means "not given"."""

    @field_validator("*", mode="before")
    @classmethod
    def blank_as_default(cls, v):
        if isinstance(v, str) and not v.strip():
            raise PydanticUseDefault()
        return v


class ApartmentListQuery(BlankAsDefaultModel):
    """Query parameters of the apartment listing."""

    page: int = Field(1, ge=1)
    limit: int = Field(settings.default_page_size, ge=1, le=settings.max_page_size)
    search: Optional[str] = Field(None, max_length=100)
    unit_name: Optional[str] = Field(None, max_length=100)
    unit_number: Optional[str] = Field(None, max_length=20)
    project: Optional[str] = Field(None, max_length=100)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=50)
    min_price: Optional[float] = Field(None, ge=0)
    max_price: Optional[float] = Field(None, ge=0)
    bedrooms: Optional[int] = Field(None, ge=0, le=10)
    bathrooms: Optional[float] = Field(None, ge=0.5, le=10)
    is_available: Optional[bool] = None
    pet_policy: Optional[PetPolicy] = None
    sort_by: SortField = "createdAt"
    sort_order: SortOrder = "desc"


class MyApartmentsQuery(BlankAsDefaultModel):
    """Query parameters of the caller's own listings."""

    page: int = Field(1, ge=1)
    limit: int = Field(settings.default_page_size, ge=1, le=settings.max_page_size)
    search: Optional[str] = Field(None, max_length=100)
    sort_by: SortField = "createdAt"
    sort_order: SortOrder = "desc"


class TextSearchQuery(BlankAsDefaultModel):
    """Query parameters of the relevance-ranked search."""

    q: Optional[str] = Field(None, max_length=100)
    page: int = Field(1, ge=1)
    limit: int = Field(settings.default_page_size, ge=1, le=settings.max_page_size)


class PriceRange(CamelModel):
    min: float = 0
    max: float = 0


class ApartmentStats(CamelModel):
    """Aggregate listing statistics."""

    total: int
    available: int
    unavailable: int
    average_price: float
    price_range: PriceRange
    bedroom_distribution: Dict[str, int]
    project_counts: Dict[str, int]


class ApartmentStatsResponse(CamelModel):
    success: bool = True
    data: ApartmentStats

"""
Apartment model for rental listings.
Holds unit details, location, pricing, media and contact information.
"""

from sqlalchemy import (
    String, Text, Integer, Float, Numeric, Boolean, JSON, Enum as SQLEnum,
    ForeignKey, Index, UniqueConstraint, Uuid
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base
import enum
import uuid
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from app.models.user import User


class PetPolicy(str, enum.Enum):
    """Pet policy for a rental unit."""
    ALLOWED = "allowed"
    NOT_ALLOWED = "not-allowed"
    CONDITIONAL = "conditional"


class Apartment(Base):
    """
    Apartment listing owned by a user.
    A unit number is unique within its project.
    """

    __tablename__ = "apartments"
    __table_args__ = (
        UniqueConstraint("unit_number", "project", name="uq_apartments_unit_number_project"),
        Index("idx_apartments_city_state", "city", "state"),
    )

    # Unit identification
    unit_name: Mapped[str] = mapped_column(String(100), nullable=False)
    unit_number: Mapped[str] = mapped_column(String(20), nullable=False)
    project: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # Specifications
    bedrooms: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    bathrooms: Mapped[float] = mapped_column(Float, nullable=False, index=True)
    square_footage: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[float] = mapped_column(
        Numeric(precision=12, scale=2, asdecimal=False),
        nullable=False,
        index=True,
        comment="Monthly rent"
    )

    # Location
    address: Mapped[str] = mapped_column(String(200), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    state: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    zip_code: Mapped[str] = mapped_column(String(10), nullable=False)

    # Features and media
    amenities: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    images: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    floor_plan: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    pet_policy: Mapped[PetPolicy] = mapped_column(
        SQLEnum(
            PetPolicy,
            values_callable=lambda members: [m.value for m in members],
            native_enum=False,
            length=20,
        ),
        nullable=False
    )
    parking_spaces: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    lease_terms: Mapped[List[str]] = mapped_column(JSON, nullable=False)

    # Contact
    contact_email: Mapped[str] = mapped_column(String(100), nullable=False)
    contact_phone: Mapped[str] = mapped_column(String(20), nullable=False)
    virtual_tour_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Ownership
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the user who listed this apartment"
    )

    owner: Mapped["User"] = relationship(
        "User",
        back_populates="apartments",
        lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<Apartment(id={self.id}, unit={self.unit_number}, project={self.project})>"

    def is_owned_by(self, user_id: uuid.UUID) -> bool:
        return self.user_id == user_id

    def to_dict(self) -> dict:
        """
        Convert apartment to dictionary.

        Returns:
            Dictionary representation of apartment
        """
        return {
            "id": str(self.id),
            "unit_name": self.unit_name,
            "unit_number": self.unit_number,
            "project": self.project,
            "description": self.description,
            "bedrooms": self.bedrooms,
            "bathrooms": self.bathrooms,
            "square_footage": self.square_footage,
            "price": float(self.price),
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "zip_code": self.zip_code,
            "amenities": list(self.amenities or []),
            "images": list(self.images or []),
            "is_available": self.is_available,
            "floor_plan": self.floor_plan,
            "pet_policy": self.pet_policy.value,
            "parking_spaces": self.parking_spaces,
            "lease_terms": list(self.lease_terms or []),
            "contact_email": self.contact_email,
            "contact_phone": self.contact_phone,
            "virtual_tour_url": self.virtual_tour_url,
            "user_id": str(self.user_id),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


# Composite index for the default listing order of available units
availability_created_index = Index(
    "idx_apartments_available_created",
    Apartment.is_available,
    Apartment.created_at.desc()
)

# Composite index for an owner's listings
owner_created_index = Index(
    "idx_apartments_owner_created",
    Apartment.user_id,
    Apartment.created_at.desc()
)

"""
User model for authentication.
Handles accounts of people who list apartments.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base
from app.utils.auth import hash_password, verify_password
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from app.models.apartment import Apartment


class User(Base):
    """
    User model for authentication and listing ownership.
    The bcrypt hash is never part of any serialized form.
    """

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="User's display name"
    )

    email: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
        index=True,
        comment="User email address - unique, stored lowercased"
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Bcrypt hashed password"
    )

    phone: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="Contact phone number"
    )

    apartments: Mapped[List["Apartment"]] = relationship(
        "Apartment",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"

    def verify_password(self, password: str) -> bool:
        """Check a plain text password against the stored hash."""
        return verify_password(password, self.hashed_password)

    def set_password(self, password: str) -> None:
        self.hashed_password = hash_password(password)

    def to_dict(self) -> dict:
        """
        Convert user to dictionary (excluding sensitive data).

        Returns:
            Dictionary representation of user
        """
        return {
            "id": str(self.id),
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

"""
Database models for the Apartments API.
Includes User and Apartment models with their relationship.
"""

from app.models.user import User
from app.models.apartment import Apartment, PetPolicy

__all__ = [
    "User",
    "Apartment",
    "PetPolicy",
]

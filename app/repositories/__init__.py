"""
Repository layer for data access operations.
"""

from app.repositories.base import BaseRepository
from app.repositories.apartment import ApartmentRepository, ApartmentSearchFilters
from app.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "ApartmentRepository",
    "ApartmentSearchFilters",
    "UserRepository"
]

"""
Service layer for business logic implementation.
Contains services for authentication, apartment management, image files and error handling.
"""

from .auth import AuthService
from .apartment import ApartmentService
from .image import ImageService
from .error_handler import ErrorHandlerService

__all__ = [
    "AuthService",
    "ApartmentService",
    "ImageService",
    "ErrorHandlerService"
]

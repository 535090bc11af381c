"""
API route handlers for the Apartments API.
"""

from .auth import router as auth_router
from .apartments import router as apartments_router

__all__ = ["auth_router", "apartments_router"]

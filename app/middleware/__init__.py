"""
Middleware package for the Apartments API.
"""

from .validation import ValidationMiddleware

__all__ = ["ValidationMiddleware"]

"""
Shared schema building blocks: camelCase wire models and the response envelope.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional
import math
import re


PHONE_PATTERN = re.compile(r"^[+]?[1-9]\d{0,15}$")
URL_PATTERN = re.compile(r"^https?://", re.IGNORECASE)


class CamelModel(BaseModel):
    """Base model whose fields are exchanged in camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PaginationMeta(CamelModel):
    """Pagination block of a list response."""

    page: int = Field(..., ge=1, description="Current page number", examples=[1])
    limit: int = Field(..., ge=1, description="Items per page", examples=[10])
    total: int = Field(..., ge=0, description="Total number of matching items", examples=[42])
    pages: int = Field(..., ge=0, description="Total number of pages", examples=[5])

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PaginationMeta":
        return cls(page=page, limit=limit, total=total, pages=math.ceil(total / limit))


class MessageResponse(CamelModel):
    """Envelope for responses that carry only a message."""

    success: bool = True
    message: Optional[str] = None


def normalize_phone(value: str) -> str:
    """Strip and check a phone number."""
    value = value.strip()
    if not PHONE_PATTERN.match(value):
        raise ValueError("Please provide a valid phone number")
    return value

"""
Request body parsing for apartment create and update.

Clients send either a JSON object or a multipart form. In forms, list fields
may arrive as repeated keys, as ``key[0]``/``key[1]``/``key[]`` entries or as
a JSON array string, image files arrive under ``images`` and the list of
images to keep arrives as ``existingImages`` (a JSON array).
"""

import json
import re
from typing import Any, Dict, List, Optional, Tuple

from fastapi import Request
from starlette.datastructures import UploadFile as StarletteUploadFile

from app.utils.exceptions import BadRequestError, ValidationError

LIST_FIELDS = {"amenities", "leaseTerms", "images", "lease_terms"}
FILE_FIELD = "images"
EXISTING_IMAGES_FIELD = "existingImages"
FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")

_INDEXED_KEY = re.compile(r"^(?P<name>[A-Za-z_]+)\[(?P<index>\d*)\]$")


class ParsedApartmentBody:
    """Field data, uploaded files and kept image URLs of one request."""

    def __init__(
        self,
        data: Dict[str, Any],
        files: Optional[List[StarletteUploadFile]] = None,
        existing_images: Optional[List[str]] = None
    ):
        self.data = data
        self.files = files or []
        self.existing_images = existing_images

    def update_fields(self) -> Dict[str, Any]:
        """Field data for an update, where ``existingImages`` replaces ``images``."""
        if self.existing_images is None:
            return self.data
        return {**self.data, FILE_FIELD: self.existing_images}


def _parse_json_list(value: str, field: str) -> List[Any]:
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        raise ValidationError(
            f"{field} must be a JSON array",
            field_errors=[{"field": field, "message": "Invalid JSON array", "type": "json_invalid"}]
        )
    if not isinstance(parsed, list):
        raise ValidationError(
            f"{field} must be a JSON array",
            field_errors=[{"field": field, "message": "Expected a list", "type": "list_type"}]
        )
    return parsed


def _collect_form_fields(items: List[Tuple[str, Any]]) -> Tuple[Dict[str, Any], List[StarletteUploadFile], Optional[List[str]]]:
    scalars: Dict[str, Any] = {}
    lists: Dict[str, List[Tuple[int, Any]]] = {}
    files: List[StarletteUploadFile] = []
    existing_images: Optional[List[str]] = None
    position = 0

    for key, value in items:
        position += 1

        if isinstance(value, StarletteUploadFile):
            # Browsers send an empty part when no file was picked
            if key.startswith(FILE_FIELD) and value.filename:
                files.append(value)
            continue

        if key == EXISTING_IMAGES_FIELD:
            existing_images = [str(url) for url in _parse_json_list(value, key)] if value else []
            continue

        match = _INDEXED_KEY.match(key)
        if match:
            name = match.group("name")
            index = int(match.group("index")) if match.group("index") else position
            lists.setdefault(name, []).append((index, value))
            continue

        if key in LIST_FIELDS:
            stripped = value.strip()
            if stripped.startswith("["):
                for item in _parse_json_list(stripped, key):
                    lists.setdefault(key, []).append((position, item))
                    position += 1
            elif stripped:
                lists.setdefault(key, []).append((position, value))
            else:
                lists.setdefault(key, [])
            continue

        scalars[key] = value

    for name, entries in lists.items():
        scalars[name] = [value for _, value in sorted(entries, key=lambda entry: entry[0])]

    return scalars, files, existing_images


async def parse_apartment_body(request: Request) -> ParsedApartmentBody:
    """
    Read an apartment payload from a JSON or form request.

    Raises:
        BadRequestError: If the body is not a JSON object or a form
        ValidationError: If a JSON-encoded form field is malformed
    """
    content_type = request.headers.get("content-type", "")

    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        data, files, existing_images = _collect_form_fields(list(form.multi_items()))
        return ParsedApartmentBody(data, files, existing_images)

    body = await request.body()
    if not body:
        return ParsedApartmentBody({})

    try:
        payload = json.loads(body)
    except json.JSONDecodeError:
        raise BadRequestError("Request body must be valid JSON")

    if not isinstance(payload, dict):
        raise BadRequestError("Request body must be a JSON object")

    existing_images = payload.pop(EXISTING_IMAGES_FIELD, None)
    if existing_images is not None and not isinstance(existing_images, list):
        raise ValidationError(
            f"{EXISTING_IMAGES_FIELD} must be a JSON array",
            field_errors=[{"field": EXISTING_IMAGES_FIELD, "message": "Expected a list", "type": "list_type"}]
        )

    return ParsedApartmentBody(payload, existing_images=existing_images)

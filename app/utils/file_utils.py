"""
File upload utilities for image validation and storage.
Provides the checks and disk operations behind apartment image uploads.
"""

import io
import uuid
import logging
from pathlib import Path
from typing import Optional, Tuple
from urllib.parse import urlparse
from PIL import Image, UnidentifiedImageError
import aiofiles
from fastapi import UploadFile

from app.config import get_settings
from app.utils.exceptions import (
    FileUploadError,
    UnsupportedFileTypeError,
    FileSizeExceededError,
)

settings = get_settings()
logger = logging.getLogger(__name__)

# Sub-directory of the upload dir that holds apartment images
APARTMENT_IMAGE_DIR = "apartments"


class FileValidator:
    """Utility class for file validation operations."""

    # Supported image formats and their extensions
    SUPPORTED_FORMATS = {
        "image/jpeg": [".jpg", ".jpeg"],
        "image/png": [".png"],
        "image/webp": [".webp"],
        "image/gif": [".gif"],
    }

    # Pillow format name per MIME type
    PIL_FORMATS = {
        "image/jpeg": "jpeg",
        "image/png": "png",
        "image/webp": "webp",
        "image/gif": "gif",
    }

    MAX_WIDTH = 10000
    MAX_HEIGHT = 10000

    @classmethod
    def supported_types(cls):
        return [t for t in cls.SUPPORTED_FORMATS if t in settings.allowed_file_types]

    @classmethod
    def validate_file_extension(cls, filename: str) -> str:
        """
        Validate file extension.

        Returns:
            Lowercase file extension

        Raises:
            UnsupportedFileTypeError: If extension is not supported
        """
        if not filename:
            raise FileUploadError("Filename is required")

        extension = Path(filename).suffix.lower()
        supported_extensions = [
            ext for mime in cls.supported_types() for ext in cls.SUPPORTED_FORMATS[mime]
        ]

        if extension not in supported_extensions:
            raise UnsupportedFileTypeError(extension or "(none)", supported_extensions)

        return extension

    @classmethod
    def validate_mime_type(cls, mime_type: str) -> str:
        """
        Validate MIME type.

        Raises:
            UnsupportedFileTypeError: If MIME type is not supported
        """
        if mime_type not in cls.supported_types():
            raise UnsupportedFileTypeError(mime_type or "(none)", cls.supported_types())
        return mime_type

    @classmethod
    def validate_file_size(cls, file_size: int, max_size: Optional[int] = None) -> int:
        """
        Validate file size.

        Raises:
            FileUploadError: If the file is empty
            FileSizeExceededError: If file size exceeds limit
        """
        if file_size <= 0:
            raise FileUploadError("File is empty")

        max_allowed = max_size or settings.max_file_size
        if file_size > max_allowed:
            raise FileSizeExceededError(file_size, max_allowed)

        return file_size

    @classmethod
    async def validate_upload_file(cls, file: UploadFile) -> Tuple[int, int, str, int]:
        """
        Comprehensive validation of uploaded file.

        Args:
            file: FastAPI UploadFile object

        Returns:
            Tuple of (width, height, mime_type, file_size)
        """
        extension = cls.validate_file_extension(file.filename or "")
        mime_type = cls.validate_mime_type(file.content_type or "")

        if extension not in cls.SUPPORTED_FORMATS[mime_type]:
            raise FileUploadError(
                f"File extension '{extension}' doesn't match MIME type '{mime_type}'"
            )

        await file.seek(0)
        content = await file.read()
        await file.seek(0)

        file_size = cls.validate_file_size(len(content))

        try:
            with Image.open(io.BytesIO(content)) as img:
                img.verify()
                pil_format = (img.format or "").lower()
                width, height = img.size
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise FileUploadError(f"Invalid image file '{file.filename}': {str(e)}")

        if pil_format != cls.PIL_FORMATS[mime_type]:
            raise FileUploadError(
                f"Image format '{pil_format}' doesn't match MIME type '{mime_type}'"
            )

        if width > cls.MAX_WIDTH or height > cls.MAX_HEIGHT:
            raise FileUploadError(
                f"Image dimensions {width}x{height} exceed maximum {cls.MAX_WIDTH}x{cls.MAX_HEIGHT}"
            )

        return width, height, mime_type, file_size


class FileStorage:
    """Utility class for file storage operations."""

    def __init__(self, base_dir: Optional[Path] = None):
        self.base_dir = Path(base_dir or settings.upload_dir)
        self.image_dir = self.base_dir / APARTMENT_IMAGE_DIR
        self.image_dir.mkdir(parents=True, exist_ok=True)

    def generate_unique_filename(self, original_filename: str) -> str:
        """Generate a unique filename while preserving the extension."""
        extension = Path(original_filename).suffix.lower()
        return f"{uuid.uuid4()}{extension}"

    def generate_file_path(self, filename: str) -> Path:
        return self.image_dir / self.generate_unique_filename(filename)

    async def save_file(self, file: UploadFile, file_path: Path) -> int:
        """
        Save uploaded file to disk.

        Returns:
            Number of bytes written

        Raises:
            FileUploadError: If file save fails
        """
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)

            await file.seek(0)
            content = await file.read()

            async with aiofiles.open(file_path, "wb") as f:
                await f.write(content)

            return len(content)

        except OSError as e:
            self.delete_file(file_path)
            raise FileUploadError(f"Failed to save file: {str(e)}")

    def delete_file(self, file_path: Path) -> bool:
        """
        Delete a file from disk.

        Returns:
            True if file was deleted, False otherwise
        """
        try:
            if file_path.exists():
                file_path.unlink()
                return True
            return False
        except OSError as e:
            logger.warning(f"Could not delete file {file_path}: {e}")
            return False

    def path_from_url(self, url: str) -> Optional[Path]:
        """
        Map an image URL served from /uploads back to its file.
        Returns None for URLs that do not point into the image directory.
        """
        path = urlparse(url).path
        marker = f"/uploads/{APARTMENT_IMAGE_DIR}/"
        if marker not in path:
            return None

        filename = path.rsplit(marker, 1)[1]
        if not filename or "/" in filename or filename in (".", ".."):
            return None

        return self.image_dir / filename

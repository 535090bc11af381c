"""
Image service for apartment image uploads.
Validates uploads, stores them on disk and removes files that are no longer referenced.
"""

import logging
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from fastapi import UploadFile

from app.config import get_settings
from app.utils.exceptions import FileUploadError, ImageLimitExceededError, ValidationError
from app.utils.file_utils import FileStorage, FileValidator

settings = get_settings()
logger = logging.getLogger(__name__)


class SavedImages:
    """Public URLs and disk paths of the files saved for one request."""

    def __init__(self):
        self.urls: List[str] = []
        self.paths: List[Path] = []


class ImageService:
    """Service for managing apartment image files."""

    def __init__(self, storage: Optional[FileStorage] = None):
        self.storage = storage or FileStorage()
        self.max_files_per_request = settings.max_files_per_request
        self.max_images = settings.max_images_per_apartment

    async def validate_uploads(self, files: Sequence[UploadFile], existing_count: int = 0) -> None:
        """
        Validate a batch of uploads before anything is written.

        Args:
            files: Uploaded image files
            existing_count: Images the apartment keeps alongside the new ones

        Raises:
            FileUploadError: If the batch is too large or a file is invalid
            ImageLimitExceededError: If the apartment would exceed its image limit
        """
        if len(files) > self.max_files_per_request:
            raise FileUploadError(
                f"Maximum {self.max_files_per_request} files allowed per upload"
            )

        self.check_image_limit(existing_count + len(files))

        for file in files:
            await FileValidator.validate_upload_file(file)

    def check_image_limit(self, image_count: int) -> None:
        """
        Raises:
            ImageLimitExceededError: If an apartment would hold more images than allowed
        """
        if image_count > self.max_images:
            raise ImageLimitExceededError(self.max_images)

    def check_local_images(self, urls: Sequence[str], owned_urls: Sequence[str] = ()) -> None:
        """
        Reject URLs of uploaded files that are not among ``owned_urls``.
        An uploaded file belongs to the apartment it was uploaded with. External URLs pass.

        Raises:
            ValidationError: If a URL points at another apartment's upload
        """
        owned_paths = {self.storage.path_from_url(url) for url in owned_urls}
        owned_paths.discard(None)

        foreign = []
        for url in urls:
            file_path = self.storage.path_from_url(url)
            if file_path is not None and file_path not in owned_paths:
                foreign.append(url)

        if foreign:
            raise ValidationError(
                "Uploaded images can only be kept by the apartment they were uploaded to",
                field_errors=[
                    {
                        "field": "images",
                        "message": "Image was not uploaded to this apartment",
                        "type": "value_error",
                        "input": url,
                    }
                    for url in foreign
                ]
            )

    async def save_uploads(
        self,
        files: Sequence[UploadFile],
        build_url: Callable[[str], str]
    ) -> SavedImages:
        """
        Store validated uploads and build their public URLs.

        Args:
            files: Uploaded image files, already validated
            build_url: Maps a stored filename to its public URL

        Returns:
            SavedImages with the URLs in upload order
        """
        saved = SavedImages()
        try:
            for file in files:
                file_path = self.storage.generate_file_path(file.filename or "")
                await self.storage.save_file(file, file_path)
                saved.paths.append(file_path)
                saved.urls.append(build_url(file_path.name))

            logger.info(f"Saved {len(saved.paths)} apartment image(s)")
            return saved
        except Exception:
            self.discard(saved.paths)
            raise

    def discard(self, paths: Sequence[Path]) -> None:
        """Remove files saved for a request that did not complete."""
        for path in paths:
            self.storage.delete_file(path)

    def delete_images(self, urls: Sequence[str]) -> int:
        """
        Delete the local files behind image URLs.
        External URLs are left alone.

        Returns:
            Number of files deleted
        """
        deleted = 0
        for url in urls:
            file_path = self.storage.path_from_url(url)
            if file_path and self.storage.delete_file(file_path):
                deleted += 1

        if deleted:
            logger.info(f"Deleted {deleted} apartment image file(s)")
        return deleted

"""
Daygrid Backend - Upload Service (File Storage)
=================================================

What:  Validates, stores, serves and cleans up uploaded images (grid photos,
       collages, avatars) and turns stored paths into public URLs.
How:   Validates extension, size and MIME type, then writes the bytes to a
       date-organized directory under a UUID filename.
Who:   Called by GridService and ProfileService; the media route serves files.

Upload checks (cheapest first):
    1. Extension:  .png / .jpg / .jpeg only
    2. Size:       non-empty and at most settings.max_file_size
    3. MIME type:  python-magic inspects the header bytes, catching renamed files
    4. UUID name:  no user input reaches the file system path
"""

import logging
import os
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Tuple

import aiofiles

from daygrid.config import settings
from daygrid.exceptions import FileStorageError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

# ── Allowed File Types ────────────────────────────────────────────────────
ALLOWED_MIME_TYPES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
}
ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg"}

MEDIA_TYPES = {".png": "image/png", ".jpg": "image/jpeg", ".jpeg": "image/jpeg"}


@dataclass(frozen=True)
class StoredFile:
    """Result of a successful upload."""
    absolute_path: str
    relative_path: str
    url: str


class FileService:
    """
    Manages the upload lifecycle.

    Directory Structure:
        storage/
        └── 2025/
            └── 08/
                └── 06/
                    ├── a1b2c3d4-....jpg
                    └── e5f6a7b8-....png
    """

    def __init__(self, storage_root: Optional[str] = None, media_base_url: Optional[str] = None):
        """
        Args:
            storage_root: Override settings.storage_root (used in tests).
            media_base_url: Override settings.media_base_url (used in tests).
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.media_base_url = (media_base_url if media_base_url is not None else settings.media_base_url).rstrip("/")
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    # ── Validation ────────────────────────────────────────────────────────

    def validate_extension(self, filename: str) -> str:
        """
        Returns:
            Normalized extension (lowercase with dot).

        Raises:
            ValidationError if the extension is not allowed.
        """
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="file",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Check the Content-Length header (may be None or wrong) and the real size.

        Raises:
            ValidationError for empty files or files over the limit.
        """
        max_mb = settings.max_file_size / (1024 * 1024)

        if actual_size == 0:
            raise ValidationError(
                message="The uploaded file is empty.",
                field="file",
            )

        if content_length and content_length > settings.max_file_size:
            raise ValidationError(
                message=f"File is too large. Maximum size is {max_mb:.0f}MB.",
                field="file",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

        if actual_size > settings.max_file_size:
            raise ValidationError(
                message=(
                    f"File is too large ({actual_size / (1024 * 1024):.1f}MB). "
                    f"Maximum size is {max_mb:.0f}MB."
                ),
                field="file",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    def validate_mime_type(self, file_content: bytes, filename: str) -> str:
        """
        Detect the real MIME type from the file's header bytes.

        Returns:
            Detected MIME type string (e.g., "image/jpeg")

        Raises:
            ValidationError if the content is not PNG or JPEG.
            FileStorageError if detection itself fails (libmagic missing or broken).
        """
        try:
            import magic
            mime_type = magic.from_buffer(file_content, mime=True)
        except Exception as e:
            logger.error("MIME type detection failed for %s: %s", filename, str(e))
            raise FileStorageError(
                message="Could not verify file type. Please try again.",
                context={"error": str(e)},
            )

        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message=(
                    f"File content type '{mime_type}' is not supported. "
                    f"The file must be a valid image (PNG or JPEG)."
                ),
                field="file",
                context={"detected_mime": mime_type, "allowed": list(ALLOWED_MIME_TYPES.keys())},
            )

        return mime_type

    # ── Storage ───────────────────────────────────────────────────────────

    def _generate_storage_path(self, extension: str) -> Tuple[Path, str]:
        """
        Returns:
            (absolute_path, relative_path) for YYYY/MM/DD/<uuid><ext>.
        """
        now = datetime.now(timezone.utc)
        date_dir = now.strftime("%Y/%m/%d")
        unique_name = f"{uuid.uuid4()}{extension}"

        relative_path = f"{date_dir}/{unique_name}"
        absolute_path = self.storage_root / relative_path
        return absolute_path, relative_path

    def public_url(self, relative_path: str) -> str:
        """Join the media base URL and a stored file's relative path."""
        return f"{self.media_base_url}/{relative_path.lstrip('/')}"

    async def store_file(self, content: bytes, extension: str) -> Tuple[str, str]:
        """
        Write validated content to disk.

        Returns:
            (absolute_path, relative_path).

        Raises:
            FileStorageError if directory creation or the write fails.
        """
        absolute_path, relative_path = self._generate_storage_path(extension)

        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)

            logger.info("File stored: %s (%d bytes)", relative_path, len(content))
            return str(absolute_path), relative_path

        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

    async def cleanup_file(self, file_path: str) -> None:
        """
        Remove a stored file, best-effort.

        Called when a later step of an upload workflow fails. Missing files
        are ignored; other failures are logged and swallowed because the
        caller is already reporting the original error.
        """
        try:
            path = Path(file_path)
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
            else:
                logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", file_path, str(e))

    async def validate_and_store(
        self,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> StoredFile:
        """
        Full upload pipeline: extension → size → MIME → write.

        Returns:
            StoredFile with absolute path, relative path and public URL.
        """
        ext = self.validate_extension(filename)
        self.validate_size(content_length, len(content))
        self.validate_mime_type(content, filename)

        absolute_path, relative_path = await self.store_file(content, ext)
        return StoredFile(
            absolute_path=absolute_path,
            relative_path=relative_path,
            url=self.public_url(relative_path),
        )

    # ── Serving ───────────────────────────────────────────────────────────

    def resolve_media_path(self, relative_path: str) -> Path:
        """
        Map a request path to a file inside storage_root.

        Raises:
            ValidationError if the path escapes storage_root.
            NotFoundError if no such file exists.
        """
        full_path = (self.storage_root / relative_path).resolve()
        if not full_path.is_relative_to(self.storage_root):
            raise ValidationError(message="Invalid file path", field="file_path")
        if not full_path.is_file():
            raise NotFoundError(resource="file", resource_id=relative_path)
        return full_path

    @staticmethod
    def media_type_for(path: Path) -> str:
        return MEDIA_TYPES.get(path.suffix.lower(), "application/octet-stream")


file_service = FileService()

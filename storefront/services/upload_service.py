"""
Storefront Backend — Upload Storage Service
=============================================

What:  Validates, renames, optionally re-encodes, and writes admin uploads
       into the public uploads directory.
How:   Sanitizes the client filename, prefixes a millisecond timestamp,
       renders images through ImageService, writes with aiofiles.
Who:   POST /api/upload.

Storage layout (UPLOAD_DIR, served at UPLOAD_URL_PREFIX):
    public/uploads/
    ├── 1718000000000-photo.jpg          ← main rendition (≤1200×1200)
    ├── thumb-1718000000000-photo.jpg    ← 400×400 thumbnail
    └── 1718000000123-manual.pdf         ← non-image, stored verbatim

All-or-nothing:
    Every path written for one upload is tracked; if any later step fails,
    those files are removed before FileStorageError propagates.
"""

import logging
import os
import re
import time
from pathlib import Path
from typing import List, Optional

import aiofiles

from storefront.config import Settings
from storefront.exceptions import FileStorageError, ValidationError
from storefront.schemas.upload import UploadResponse
from storefront.services.image_service import ImageService

logger = logging.getLogger(__name__)

THUMBNAIL_PREFIX = "thumb-"
IMAGE_EXTENSION = ".jpg"

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9.-]")
_TRAILING_EXTENSION = re.compile(r"\.\w+$")


def sanitize_filename(filename: str) -> str:
    """Keep ASCII letters, digits, dots and hyphens; everything else becomes '_'."""
    return _UNSAFE_CHARS.sub("_", filename)


def with_image_extension(filename: str) -> str:
    """Swap (or add) the extension for the normalized JPEG output."""
    return _TRAILING_EXTENSION.sub("", filename) + IMAGE_EXTENSION


class UploadService:
    """Owns the uploads directory for the life of the app."""

    def __init__(self, settings: Settings, image_service: ImageService):
        self.settings = settings
        self.image_service = image_service
        self.upload_root = Path(settings.upload_dir).resolve()
        self.url_prefix = settings.upload_url_prefix.rstrip("/")

    def ensure_directory(self) -> Path:
        self.upload_root.mkdir(parents=True, exist_ok=True)
        return self.upload_root

    def validate_size(self, size: int) -> None:
        """
        Raises:
            ValidationError for empty files or files over MAX_UPLOAD_SIZE.
        """
        if size == 0:
            raise ValidationError(message="Uploaded file is empty", field="file")
        if size > self.settings.max_upload_size:
            max_mb = self.settings.max_upload_size / (1024 * 1024)
            raise ValidationError(
                message=f"File size exceeds maximum of {max_mb:.0f}MB",
                field="file",
                context={"max_size_bytes": self.settings.max_upload_size, "actual_size": size},
            )

    def build_filename(self, original: Optional[str], now_ms: Optional[int] = None) -> str:
        timestamp = now_ms if now_ms is not None else int(time.time() * 1000)
        return f"{timestamp}-{sanitize_filename(original or 'upload')}"

    def public_url(self, filename: str) -> str:
        return f"{self.url_prefix}/{filename}"

    async def _write(self, filename: str, content: bytes, written: List[Path]) -> None:
        path = self.upload_root / filename
        async with aiofiles.open(path, "wb") as f:
            written.append(path)
            await f.write(content)
        logger.info("Stored upload %s (%d bytes)", filename, len(content))

    async def cleanup_file(self, path: Path) -> None:
        """Best-effort removal of a partially stored upload."""
        try:
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", path, str(e))

    async def store(
        self,
        filename: Optional[str],
        content_type: Optional[str],
        content: bytes,
    ) -> UploadResponse:
        """
        Store one upload and return its public URL(s).

        Images (declared type image/*) yield a main URL and a thumbnail URL,
        both JPEG. Anything else is written byte-for-byte and yields one URL.

        Raises:
            ValidationError: empty or oversized file
            FileStorageError: decode/resize/write failure (files already cleaned up)
        """
        self.validate_size(len(content))
        stored_name = self.build_filename(filename)
        is_image = (content_type or "").startswith("image/")
        written: List[Path] = []

        try:
            self.ensure_directory()
            if is_image:
                renditions = await self.image_service.render(content)
                main_name = with_image_extension(stored_name)
                thumb_name = f"{THUMBNAIL_PREFIX}{main_name}"
                await self._write(main_name, renditions.main, written)
                await self._write(thumb_name, renditions.thumbnail, written)
                return UploadResponse(
                    url=self.public_url(main_name),
                    thumbnail=self.public_url(thumb_name),
                )

            await self._write(stored_name, content, written)
            return UploadResponse(url=self.public_url(stored_name))

        except Exception as e:
            for path in written:
                await self.cleanup_file(path)
            logger.error("Upload of %r failed: %s", filename, str(e), exc_info=True)
            raise FileStorageError(
                context={"filename": filename, "content_type": content_type, "error": str(e)},
            ) from e

"""
TravelStory Backend - Image Asset Service
===========================================

What:  Stores uploaded story images, builds their public URLs, and deletes
       them again given such a URL.
Why:   Keeps every file system operation behind one small interface so that
       StoryService only deals in URLs.
How:   Files are written flat into UPLOADS_DIR under a generated UUID name
       (keeping the upload's extension) and served read-only by the static
       mount at /{UPLOADS_PATH}. A public URL therefore maps back to a file
       by its last path component alone.
Who:   Image routes (upload/delete) and StoryService (delete-story cleanup).

URL ↔ file mapping:
    http://host/uploads/3f1c...9a.jpg?v=2   →   UPLOADS_DIR/3f1c...9a.jpg
    Only the final path component is used; directories and query strings in
    the URL are ignored, so a URL can never point outside UPLOADS_DIR.

Deletion semantics:
    delete_by_url() is idempotent: a missing file is a normal outcome
    (returns False), not an error. discard() is the fire-and-forget variant
    used after a story is deleted; it never raises.

No reference counting is done: deleting a file that a story still points at
is allowed and is the caller's responsibility.
"""

import logging
import os
import re
import uuid
from pathlib import Path, PurePosixPath
from typing import Optional
from urllib.parse import unquote, urlparse

import aiofiles

from travelstory.config import settings
from travelstory.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

# Extensions are kept only when they look like one (".jpg", ".webp", ...)
_EXTENSION_RE = re.compile(r"^\.[a-z0-9]{1,10}$")


class ImageService:
    """
    Manages the uploads directory.

    Directory Structure:
        uploads/
        ├── a1b2c3d4e5f6....jpg
        └── 9f8e7d6c5b4a....png
    """

    def __init__(self, uploads_dir: Optional[str] = None, public_prefix: Optional[str] = None):
        """
        Args:
            uploads_dir:   Override settings.uploads_dir (used in tests).
            public_prefix: Override "{BASE_URL}/{UPLOADS_PATH}" (used in tests).
        """
        self.uploads_dir = Path(uploads_dir or settings.uploads_dir).resolve()
        self.public_prefix = (public_prefix or settings.uploads_url_prefix).rstrip("/")
        self.uploads_dir.mkdir(parents=True, exist_ok=True)
        logger.info("ImageService initialized with uploads_dir=%s", self.uploads_dir)

    # ── Naming ────────────────────────────────────────────────────────────

    def _generate_filename(self, original_filename: Optional[str]) -> str:
        """UUID name plus the original extension, so no user input reaches the path."""
        ext = Path(original_filename or "").suffix.lower()
        if not _EXTENSION_RE.match(ext):
            ext = ""
        return f"{uuid.uuid4().hex}{ext}"

    def build_public_url(self, filename: str) -> str:
        return f"{self.public_prefix}/{filename}"

    @staticmethod
    def filename_from_url(image_url: str) -> str:
        """
        Extract the stored filename from a public URL (or bare path).

        Returns "" when the URL has no usable final component.
        """
        path = unquote(urlparse(image_url).path).replace("\\", "/")
        if path.endswith("/"):
            return ""
        name = PurePosixPath(path).name
        return "" if name in ("", ".", "..") else name

    # ── Upload ────────────────────────────────────────────────────────────

    async def upload(self, content: Optional[bytes], original_filename: Optional[str] = None) -> str:
        """
        Write an uploaded image and return its fully-qualified public URL.

        Raises:
            ValidationError:  no file payload was sent (HTTP 400)
            FileStorageError: the file could not be written (HTTP 500)
        """
        if not content:
            raise ValidationError(message="No image uploaded", field="image")

        filename = self._generate_filename(original_filename)
        path = self.uploads_dir / filename
        try:
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store image at %s: %s", path, e)
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(path), "os_error": str(e)},
            )

        logger.info("Image stored: %s (%d bytes)", filename, len(content))
        return self.build_public_url(filename)

    # ── Delete ────────────────────────────────────────────────────────────

    async def delete_by_url(self, image_url: Optional[str]) -> bool:
        """
        Delete the file a public URL refers to.

        Returns:
            True if a file was removed, False if there was nothing to remove.

        Raises:
            ValidationError: image_url is missing (HTTP 400)
        """
        if not image_url:
            raise ValidationError(message="imageUrl parameter is required", field="imageUrl")

        filename = self.filename_from_url(image_url)
        if not filename:
            return False

        path = self.uploads_dir / filename
        if not path.is_file():
            logger.debug("Image not found for deletion: %s", filename)
            return False

        try:
            os.remove(path)
        except FileNotFoundError:
            # Removed concurrently between the check and the unlink
            return False
        logger.info("Image deleted: %s", filename)
        return True

    async def discard(self, image_url: Optional[str]) -> None:
        """
        Best-effort deletion used after a story is removed.

        Failures (missing file, permission error, bad URL) are logged and
        swallowed: the story deletion has already succeeded.
        """
        if not image_url:
            return
        try:
            deleted = await self.delete_by_url(image_url)
            if not deleted:
                logger.warning("Failed to delete image file for %s: not found", image_url)
        except Exception as e:
            logger.warning("Failed to delete image file for %s: %s", image_url, e)


# ── Singleton Instance ────────────────────────────────────────────────────
image_service = ImageService()

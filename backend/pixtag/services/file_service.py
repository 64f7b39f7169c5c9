"""
PixTag Backend — File Storage Service
======================================

What:  Upload validation, storage of image binaries, and their removal.
Why:   Centralizes all file system operations behind one object so the
       storage root can be swapped in tests.
How:   Validates presence, declared media type and size, writes the bytes
       under a generated name, removes files on request.
Who:   Called by ImageService (upload and delete) and the files route.

Validation order:
    1. File present      → "No file uploaded."
    2. Declared type     → only image/jpeg and image/png
    3. Size              → at most settings.max_file_size (5MB by default)
    4. Non-empty payload

Filename scheme:
    image-<epoch milliseconds>-<8 hex chars><ext>
    The millisecond timestamp keeps names sortable by upload time; the
    random suffix keeps two uploads in the same millisecond apart. No part
    of the client's filename except a whitelisted extension is reused, so
    names cannot carry path separators.
"""

import logging
import time
import uuid
from pathlib import Path
from typing import Optional, Tuple

import aiofiles
import aiofiles.os

from pixtag.config import settings
from pixtag.exceptions import FileStorageError, FileSystemWarning, ValidationError

logger = logging.getLogger(__name__)

# ── Allowed File Types ────────────────────────────────────────────────────
# What: Declared media types we accept, mapped to the extension used when
# the client's filename has no usable extension
ALLOWED_MIME_TYPES = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
}

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg"}


class FileService:
    """
    Manages the lifecycle of uploaded image files.

    Directory Structure:
        uploads/
        ├── image-1700000000000-1a2b3c4d.jpg
        └── image-1700000000123-5e6f7a8b.png

    The storage directory is created on the first write, not at startup.
    """

    def __init__(self, storage_root: Optional[str] = None, max_file_size: Optional[int] = None):
        """
        Args:
            storage_root: Override the storage directory (used in tests).
            max_file_size: Override the size limit in bytes (used in tests).
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.max_file_size = max_file_size or settings.max_file_size

    # ── Validation ────────────────────────────────────────────────────────

    def validate_upload(
        self,
        filename: Optional[str],
        content_type: Optional[str],
        content: Optional[bytes],
    ) -> str:
        """
        Run every upload check in order.

        Returns:
            The extension the stored file will carry (".jpg", ".jpeg" or ".png").

        Raises:
            ValidationError on the first failed check.
        """
        if content is None or (not filename and not content):
            raise ValidationError(message="No file uploaded.", field="image")

        mime_type = self.validate_content_type(content_type)
        self.validate_size(len(content))
        return self.resolve_extension(filename, mime_type)

    def validate_content_type(self, content_type: Optional[str]) -> str:
        """
        Check the media type declared by the client.

        Parameters such as "; charset=..." are ignored and the comparison
        is case-insensitive.

        Returns:
            The normalized media type.
        """
        mime_type = (content_type or "").split(";")[0].strip().lower()
        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message=(
                    f"Unsupported type '{mime_type or 'unknown'}'. "
                    f"Allowed types: image/jpeg, image/png"
                ),
                field="image",
                context={"content_type": mime_type, "allowed": sorted(ALLOWED_MIME_TYPES)},
            )
        return mime_type

    def validate_size(self, actual_size: int) -> None:
        """Reject payloads over the configured limit, and empty ones."""
        max_mb = self.max_file_size / (1024 * 1024)

        if actual_size > self.max_file_size:
            raise ValidationError(
                message=f"File too large: the maximum upload size is {max_mb:.0f}MB.",
                field="image",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

        if actual_size == 0:
            raise ValidationError(message="Uploaded file is empty.", field="image")

    @staticmethod
    def resolve_extension(filename: Optional[str], mime_type: str) -> str:
        """
        Keep the client's extension when it is an allowed one, otherwise
        derive it from the media type.
        """
        ext = Path(filename or "").suffix.lower()
        if ext in ALLOWED_EXTENSIONS:
            return ext
        return ALLOWED_MIME_TYPES[mime_type]

    # ── Storage ───────────────────────────────────────────────────────────

    @staticmethod
    def generate_filename(extension: str) -> str:
        """e.g. image-1700000000000-1a2b3c4d.jpg"""
        return f"image-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}{extension}"

    async def store_file(self, content: bytes, extension: str) -> Tuple[str, str]:
        """
        Write validated file content to the storage directory.

        Returns:
            Tuple of (filename, absolute_path).

        Raises:
            FileStorageError if the directory or the file cannot be written.
        """
        filename = self.generate_filename(extension)
        absolute_path = self.storage_root / filename

        try:
            self.storage_root.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

        logger.info("File stored: %s (%d bytes)", filename, len(content))
        return filename, str(absolute_path)

    async def remove_file(self, file_path: str) -> None:
        """
        Delete a stored file.

        Raises:
            FileSystemWarning when the OS refuses, including when the file is
            already gone. Callers decide whether that matters; the image
            deletion flow logs it and moves on.
        """
        try:
            await aiofiles.os.remove(file_path)
        except OSError as e:
            raise FileSystemWarning(
                message=f"Could not remove stored file: {e.strerror or e}",
                context={"path": file_path, "os_error": str(e)},
            )
        logger.info("Removed file: %s", Path(file_path).name)

    def resolve_public_path(self, filename: str) -> Path:
        """
        Map a public filename to its path under the storage root.

        Raises:
            ValidationError if the name escapes the storage root.
        """
        full_path = (self.storage_root / filename).resolve()
        if full_path.parent != self.storage_root:
            raise ValidationError(message="Invalid file path", field="filename")
        return full_path


# ── Singleton Instance ────────────────────────────────────────────────────
file_service = FileService()

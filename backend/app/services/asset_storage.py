"""
Inkpost Backend: Cover Asset Storage
======================================

What:  Stores and removes the optional cover image of a post.
How:   AssetStorage is the small interface the post service talks to
       (store / delete / resolve). LocalAssetStorage keeps files in a flat
       directory with random hex names that preserve the original extension.
Who:   Called by PostService on create, update and delete; resolve() is used
       by the /uploads route that serves the files.

Reference format:
    "uploads/<32 hex chars>.<ext>", e.g. "uploads/5f0c2a...e1.jpg"
    The reference is what gets stored in posts.cover and returned to clients,
    which build the image URL as "<api origin>/<reference>".

Upload checks:
    1. Extension must be one of ALLOWED_EXTENSIONS (case-insensitive)
    2. File must be non-empty and at most max_size bytes
    3. Content must be an image: the type is read from the leading bytes by
       libmagic, so a renamed HTML or script file is rejected
    4. Name is generated server-side, so no user input reaches the path
"""

import logging
import secrets
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os
import magic

from app.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}
ALLOWED_MIME_TYPES = {"image/png", "image/jpeg", "image/gif", "image/webp"}

# libmagic only needs the header
SNIFF_BYTES = 2048

# Public prefix of every reference; matches the /uploads route
REFERENCE_PREFIX = "uploads"


class AssetStorage(ABC):
    """Storage for cover images, decoupled from the post records."""

    @abstractmethod
    async def store(self, filename: str, content: bytes) -> str:
        """Persist an uploaded file and return its reference."""
        ...

    @abstractmethod
    async def delete(self, reference: str) -> bool:
        """
        Remove a stored file.

        Returns:
            True if a file was removed, False if it did not exist.
        Raises:
            FileStorageError: the file exists but could not be removed
        """
        ...

    @abstractmethod
    def resolve(self, reference: str) -> Optional[Path]:
        """Map a reference (or bare file name) to a path inside the storage root."""
        ...


class LocalAssetStorage(AssetStorage):
    """
    Cover images on the local file system.

    Directory Structure:
        uploads/
        ├── 0b9e4c1f...a2.jpg
        └── 77d1e0aa...5c.png
    """

    def __init__(self, root: str, max_size: int):
        self.root = Path(root).resolve()
        self.max_size = max_size
        self.root.mkdir(parents=True, exist_ok=True)
        logger.info("LocalAssetStorage initialized with root=%s", self.root)

    def validate_extension(self, filename: str) -> str:
        """
        Returns: normalized extension (lowercase with dot).
        Raises:  ValidationError if the extension is not an allowed image type.
        """
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"Cover type '{ext or filename}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="file",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, size: int) -> None:
        if size == 0:
            raise ValidationError(message="Uploaded cover is empty", field="file")
        if size > self.max_size:
            max_mb = self.max_size / (1024 * 1024)
            raise ValidationError(
                message=f"Cover is too large ({size / (1024 * 1024):.1f}MB). Maximum is {max_mb:.0f}MB.",
                field="file",
                context={"max_size": self.max_size, "actual_size": size},
            )

    def validate_content_type(self, content: bytes) -> str:
        """
        Returns: MIME type detected from the file header.
        Raises:  ValidationError if the bytes are not an allowed image,
                 FileStorageError if libmagic itself fails.
        """
        try:
            mime_type = magic.from_buffer(content[:SNIFF_BYTES], mime=True)
        except magic.MagicException as e:
            logger.error("Cover type detection failed: %s", str(e))
            raise FileStorageError(
                message="Could not verify the cover type. Please try again.",
                context={"error": str(e)},
            )

        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message=f"Cover content '{mime_type}' is not a supported image.",
                field="file",
                context={"detected_mime": mime_type, "allowed": sorted(ALLOWED_MIME_TYPES)},
            )
        return mime_type

    async def store(self, filename: str, content: bytes) -> str:
        ext = self.validate_extension(filename)
        self.validate_size(len(content))
        self.validate_content_type(content)

        name = f"{secrets.token_hex(16)}{ext}"
        path = self.root / name
        try:
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store cover at %s: %s", path, str(e))
            raise FileStorageError(
                message="Failed to save the cover image. Please try again.",
                context={"path": str(path), "os_error": str(e)},
            )

        logger.info("Cover stored: %s (%d bytes)", name, len(content))
        return f"{REFERENCE_PREFIX}/{name}"

    def resolve(self, reference: str) -> Optional[Path]:
        """
        Returns None for anything that would escape the storage root
        (e.g. "uploads/../../etc/passwd") or that is not a plain file name.
        """
        if not reference:
            return None
        name = reference
        if name.startswith(f"{REFERENCE_PREFIX}/"):
            name = name[len(REFERENCE_PREFIX) + 1:]
        candidate = (self.root / name).resolve()
        if candidate.parent != self.root:
            return None
        return candidate

    async def delete(self, reference: str) -> bool:
        path = self.resolve(reference)
        if path is None:
            logger.warning("Refusing to delete cover outside storage root: %s", reference)
            return False
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            logger.debug("Cover already gone: %s", path.name)
            return False
        except OSError as e:
            raise FileStorageError(
                message="Failed to remove the cover image",
                context={"path": str(path), "os_error": str(e)},
            )
        logger.info("Cover removed: %s", path.name)
        return True

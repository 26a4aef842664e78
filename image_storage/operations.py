"""Image storage operations."""

import logging
import re
import uuid
from pathlib import Path
from typing import Optional

from transfer.errors import StorageError

logger = logging.getLogger(__name__)

URL_PREFIX = "/uploads"
DEFAULT_EXTENSION = "bin"

_EXTENSION_RE = re.compile(r"^[a-z0-9]{1,10}$")


def clean_extension(filename: Optional[str]) -> str:
    """Extension of an uploaded file name, lowercased, or ``bin`` if unusable."""
    if not filename:
        return DEFAULT_EXTENSION
    suffix = Path(filename).suffix.lstrip(".").lower()
    if not _EXTENSION_RE.match(suffix):
        return DEFAULT_EXTENSION
    return suffix


class ImageStorage:
    """Stores uploaded payloads byte for byte under UUID file names.

    References handed out look like ``/uploads/<uuid>.<ext>`` and resolve back
    to the same bytes through ``get_image_path``. The payload is never decoded.
    """

    def __init__(self, images_dir: str | Path):
        self.images_dir = Path(images_dir)
        self.images_dir.mkdir(parents=True, exist_ok=True)

    def save_image(self, contents: bytes, filename: Optional[str] = None) -> str:
        """Store a payload unchanged. Returns its reference.

        The extension of ``filename`` is kept so the file is served with a
        matching content type.
        """
        image_uuid = str(uuid.uuid4())
        image_path = self.images_dir / f"{image_uuid}.{clean_extension(filename)}"

        try:
            image_path.write_bytes(contents)
        except OSError as e:
            # Clean up partial file if it exists
            if image_path.exists():
                image_path.unlink()
            logger.error(f"Failed to store image {image_uuid}: {e}", exc_info=True)
            raise StorageError(f"Upload failed: {e}") from e

        return self.get_image_ref(image_path.name)

    def get_image_ref(self, filename: str) -> str:
        """Get the reference (URL path) for a stored file name."""
        return f"{URL_PREFIX}/{filename}"

    def get_image_path(self, filename: str) -> Optional[Path]:
        """Get the path to a stored image by file name, or None."""
        stem, _, suffix = filename.partition(".")
        if not _EXTENSION_RE.match(suffix):
            return None
        try:
            uuid.UUID(stem)  # Validate UUID format
        except ValueError:
            return None

        image_path = self.images_dir / filename
        if image_path.exists():
            return image_path
        return None

    def delete_image(self, image_ref: str) -> bool:
        """Delete an image by reference."""
        image_path = self.get_image_path(image_ref.rsplit("/", 1)[-1])
        if image_path:
            image_path.unlink()
            return True
        return False

"""Image upload lifecycle shared by the entity stores."""
import logging
import re
import secrets
import string
import time
from dataclasses import dataclass
from typing import Optional

from facility_admin.core.config import settings
from facility_admin.services.blob_store import BlobStore, StoredBlob

logger = logging.getLogger(__name__)

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass
class ImageFile:
    """An image received from a form."""

    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


class UploadValidationError(ValueError):
    """Raised when a file is rejected before upload."""


def validate_image(image: Optional[ImageFile], max_bytes: Optional[int] = None) -> None:
    """
    Check that a file is present, is an image and is under the size ceiling.

    Raises:
        UploadValidationError: With a message suitable for the form
    """
    max_bytes = max_bytes or settings.MAX_IMAGE_UPLOAD_BYTES
    if image is None or not image.filename or not image.content:
        raise UploadValidationError("Please select an image file")
    if not (image.content_type or "").startswith("image/"):
        raise UploadValidationError("Please select a valid image file")
    if image.size > max_bytes:
        raise UploadValidationError(
            f"Image size should be less than {max_bytes // (1024 * 1024)}MB"
        )


def build_blob_path(project_id: str, entity_type: str, filename: str) -> str:
    """
    Build a collision-free path for an upload.

    Example:
        projects/p1/courts/1718000000000_k3j9x2_court-a.png
    """
    timestamp = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(6))
    safe_name = _UNSAFE_CHARS.sub("_", filename.rsplit("/", 1)[-1]).strip("_") or "image"
    return f"projects/{project_id}/{entity_type}/{timestamp}_{suffix}_{safe_name}"


async def upload_image(
    blobs: BlobStore, project_id: str, entity_type: str, image: ImageFile
) -> StoredBlob:
    """Validate and upload an image under the project's entity namespace."""
    validate_image(image)
    path = build_blob_path(project_id, entity_type, image.filename)
    return await blobs.upload(path, image.content, image.content_type)


async def discard_blob(blobs: BlobStore, path: Optional[str]) -> bool:
    """
    Delete a blob that is no longer referenced.

    Failures are logged and swallowed; the blob is left behind.

    Returns:
        True if the blob was deleted
    """
    if not path:
        return False
    try:
        await blobs.delete(path)
        return True
    except Exception as e:
        logger.warning(f"Failed to delete old blob {path}: {e}")
        return False

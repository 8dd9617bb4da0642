"""Blob store for uploaded files.

Blobs are written under ``BLOB_STORAGE_DIR`` and served by the application
from ``BLOB_PUBLIC_BASE_URL``. There is no versioning: writing to an
existing path overwrites it, so callers pick unique paths.
"""
import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Optional

from facility_admin.core.config import settings

logger = logging.getLogger(__name__)


class BlobNotFoundError(LookupError):
    """Raised when deleting a blob that does not exist."""


@dataclass
class StoredBlob:
    """Result of an upload: public URL plus the path used to delete it."""

    url: str
    path: str


class BlobStore:
    """Filesystem-backed blob storage."""

    def __init__(self, root: Optional[str] = None, public_base_url: Optional[str] = None):
        self.root = Path(root or settings.BLOB_STORAGE_DIR)
        self.public_base_url = (public_base_url or settings.BLOB_PUBLIC_BASE_URL).rstrip("/")

    def _resolve(self, path: str) -> Path:
        blob_path = PurePosixPath(path)
        if blob_path.is_absolute() or ".." in blob_path.parts or not blob_path.parts:
            raise ValueError(f"Invalid blob path: {path}")
        return self.root.joinpath(*blob_path.parts)

    def url_for(self, path: str) -> str:
        return f"{self.public_base_url}/{path}"

    async def upload(self, path: str, content: bytes, content_type: Optional[str] = None) -> StoredBlob:
        """
        Write a blob.

        Args:
            path: Slash-separated blob path
            content: Raw bytes
            content_type: MIME type, for logging only

        Returns:
            StoredBlob with the public URL and path
        """
        target = self._resolve(path)

        def _write():
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)

        await asyncio.to_thread(_write)
        logger.info(f"Uploaded blob {path} ({len(content)} bytes, {content_type or 'unknown type'})")
        return StoredBlob(url=self.url_for(path), path=path)

    async def read(self, path: str) -> bytes:
        target = self._resolve(path)
        try:
            return await asyncio.to_thread(target.read_bytes)
        except FileNotFoundError:
            raise BlobNotFoundError(f"Blob not found: {path}")

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(self._resolve(path).is_file)

    async def delete(self, path: str) -> None:
        """
        Delete a blob.

        Raises:
            BlobNotFoundError: If nothing is stored at the path
        """
        target = self._resolve(path)
        try:
            await asyncio.to_thread(target.unlink)
        except FileNotFoundError:
            raise BlobNotFoundError(f"Blob not found: {path}")
        logger.info(f"Deleted blob {path}")


# Singleton instance
blob_store = BlobStore()

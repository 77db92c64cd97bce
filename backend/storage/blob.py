"""Blob upload service for chat images.

Uploads bytes to Firebase Storage and returns a public download URL.
"""

import asyncio
import logging
from abc import ABC, abstractmethod

from firebase_admin import storage

from config import Settings, get_settings
from db.firebase import init_firebase_app

logger = logging.getLogger(__name__)


class UploadError(Exception):
    """Raised when a blob upload fails."""


class BaseBlobUploader(ABC):
    """Abstract blob upload service."""

    @abstractmethod
    async def upload(self, data: bytes, path: str, content_type: str = "image/jpeg") -> str:
        """Upload bytes to ``path`` and return a public URL.

        Raises:
            UploadError: If the upload fails.
        """


class FirebaseBlobUploader(BaseBlobUploader):
    """Uploads to the configured Firebase Storage bucket."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        init_firebase_app(self.settings)
        self._bucket_name = self.settings.firebase_storage_bucket or None

    def _upload_sync(self, data: bytes, path: str, content_type: str) -> str:
        bucket = storage.bucket(self._bucket_name)
        blob = bucket.blob(path)
        blob.upload_from_string(data, content_type=content_type)
        blob.make_public()
        return blob.public_url

    async def upload(self, data: bytes, path: str, content_type: str = "image/jpeg") -> str:
        """Upload in a worker thread; the storage client is blocking."""
        try:
            url = await asyncio.to_thread(self._upload_sync, data, path, content_type)
        except Exception as e:
            logger.warning("Blob upload to %s failed: %s", path, e)
            raise UploadError(f"Upload failed: {e}") from e

        logger.info("Uploaded %d bytes to %s", len(data), path)
        return url


class UnavailableBlobUploader(BaseBlobUploader):
    """Uploader for deployments without blob storage; every upload fails."""

    async def upload(self, data: bytes, path: str, content_type: str = "image/jpeg") -> str:
        raise UploadError("Blob storage is not configured")

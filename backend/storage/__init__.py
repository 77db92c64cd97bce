"""Blob storage for uploaded chat media."""

from storage.blob import (
    BaseBlobUploader,
    FirebaseBlobUploader,
    UnavailableBlobUploader,
    UploadError,
)

__all__ = [
    "BaseBlobUploader",
    "FirebaseBlobUploader",
    "UnavailableBlobUploader",
    "UploadError",
]

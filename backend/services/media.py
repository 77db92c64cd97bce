"""Media reference normalization.

Classifies a locator string as inline data or a remote URL and resolves a
concrete MIME type for it. Normalization never raises: missing or
unrecognised information degrades to ``image/jpeg``.
"""

import re

from services.types import LocatorKind, MediaKind, MediaRef

DEFAULT_IMAGE_MIME = "image/jpeg"
DOCUMENT_MIME = "application/pdf"

EXTENSION_MIME_TYPES: dict[str, str] = {
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
}

_DATA_URL_MIME = re.compile(r"^data:([^;,]+)[;,]")
_REMOTE_URL = re.compile(r"^https?://", re.IGNORECASE)


def is_remote_url(locator: str) -> bool:
    """Check whether a locator is an http(s) URL."""
    return bool(_REMOTE_URL.match(locator or ""))


def mime_from_extension(locator: str) -> str:
    """Map a locator's file extension to a MIME type.

    Query strings and fragments are ignored. Anything that is not in the
    extension table resolves to ``image/jpeg``.
    """
    path = (locator or "").split("?", 1)[0].split("#", 1)[0]
    last_segment = path.rsplit("/", 1)[-1]
    if "." not in last_segment:
        return DEFAULT_IMAGE_MIME
    extension = last_segment.rsplit(".", 1)[-1].lower()
    return EXTENSION_MIME_TYPES.get(extension, DEFAULT_IMAGE_MIME)


def resolve_mime_type(locator: str) -> str:
    """Resolve the content type of an image locator."""
    locator = locator or ""
    if locator.startswith("data:"):
        match = _DATA_URL_MIME.match(locator)
        return match.group(1) if match else DEFAULT_IMAGE_MIME
    return mime_from_extension(locator)


def normalize_media(locator: str, kind: MediaKind = MediaKind.IMAGE) -> MediaRef:
    """Build a MediaRef from a locator string.

    Args:
        locator: Data URL, http(s) URL or bare base64 payload.
        kind: Attachment category. Documents are always ``application/pdf``.

    Returns:
        MediaRef with a concrete mime type.
    """
    locator = locator or ""
    locator_kind = LocatorKind.REMOTE if is_remote_url(locator) else LocatorKind.INLINE

    if kind is MediaKind.DOCUMENT:
        mime_type = DOCUMENT_MIME
    else:
        mime_type = resolve_mime_type(locator)

    return MediaRef(
        kind=kind,
        locator_kind=locator_kind,
        locator=locator,
        mime_type=mime_type,
    )


def to_data_url(media: MediaRef) -> str:
    """Render an inline reference as a full ``data:`` URL."""
    if media.is_remote or media.locator.startswith("data:"):
        return media.locator
    return f"data:{media.mime_type};base64,{media.locator}"


def inline_payload(media: MediaRef) -> str:
    """Return the bare base64 payload of an inline reference."""
    locator = media.locator
    if locator.startswith("data:") and "," in locator:
        return locator.split(",", 1)[1]
    return locator

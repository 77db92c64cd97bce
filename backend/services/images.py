"""Image preparation for blob upload.

Decodes an inline image, scales it down so its longest edge fits the
configured maximum and re-encodes it as JPEG.
"""

import base64
import binascii
import io
import logging

from PIL import Image, UnidentifiedImageError

from services.media import inline_payload, normalize_media

logger = logging.getLogger(__name__)


class ImageProcessingError(Exception):
    """Raised when an inline image cannot be decoded or re-encoded."""


def decode_inline_image(data: str) -> bytes:
    """Decode a data URL or bare base64 payload to bytes."""
    payload = inline_payload(normalize_media(data))
    try:
        return base64.b64decode(payload, validate=False)
    except (binascii.Error, ValueError) as e:
        raise ImageProcessingError(f"Invalid base64 image data: {e}") from e


def target_size(width: int, height: int, max_dimension: int) -> tuple[int, int]:
    """Scale (width, height) down so the longest edge is max_dimension."""
    if max(width, height) <= max_dimension:
        return width, height
    if width > height:
        return max_dimension, max(1, round(height * max_dimension / width))
    return max(1, round(width * max_dimension / height)), max_dimension


def compress_image(data: str, max_dimension: int = 1200, quality: int = 80) -> bytes:
    """Resize and re-encode an inline image as JPEG.

    Args:
        data: Data URL or bare base64 payload.
        max_dimension: Longest edge in pixels after scaling.
        quality: JPEG quality (1-95).

    Returns:
        JPEG bytes.

    Raises:
        ImageProcessingError: If the payload is not a decodable image or
            exceeds Pillow's pixel limit.
    """
    raw = decode_inline_image(data)
    try:
        with Image.open(io.BytesIO(raw)) as img:
            size = target_size(img.width, img.height, max_dimension)
            converted = img.convert("RGB")
            if size != converted.size:
                converted = converted.resize(size, Image.Resampling.LANCZOS)

            buffer = io.BytesIO()
            converted.save(buffer, format="JPEG", quality=quality)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise ImageProcessingError(f"Failed to re-encode image: {e}") from e

    encoded = buffer.getvalue()
    logger.debug("Compressed image %d -> %d bytes at %s", len(raw), len(encoded), size)
    return encoded

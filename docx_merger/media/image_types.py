"""
Image type detection for media parts.

The content-types manifest is authoritative; when it says nothing about a
part, the bytes are identified with Pillow.
"""

from __future__ import annotations

import io
import logging
import posixpath
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

# Content types Word emits for which Pillow has no MIME entry.
_EXTRA_MIME = {
    "WMF": "image/x-wmf",
    "EMF": "image/x-emf",
}

_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpeg",
    "image/gif": "gif",
    "image/bmp": "bmp",
    "image/tiff": "tiff",
    "image/x-wmf": "wmf",
    "image/x-emf": "emf",
    "image/svg+xml": "svg",
    "image/webp": "webp",
}


def is_image_content_type(content_type: Optional[str]) -> bool:
    return bool(content_type) and content_type.lower().startswith("image/")


def sniff_content_type(data: bytes) -> Optional[str]:
    """
    Identify image bytes with Pillow.

    Returns:
        MIME type, or None if Pillow does not recognise the data as an image
    """
    if not data:
        return None
    try:
        with Image.open(io.BytesIO(data)) as img:
            image_format = img.format
    except (UnidentifiedImageError, OSError) as e:
        logger.debug(f"Pillow could not identify image data: {e}")
        return None
    if not image_format:
        return None
    return Image.MIME.get(image_format) or _EXTRA_MIME.get(image_format)


def extension_for(part_name: str, content_type: str) -> str:
    """File extension for a relocated media part; the source extension wins."""
    extension = posixpath.splitext(part_name)[1].lstrip(".").lower()
    if extension:
        return extension
    return _EXTENSIONS.get(content_type.lower(), "bin")


def resolve_image_type(part_name: str, data: bytes, declared: Optional[str]) -> Tuple[Optional[str], str]:
    """
    Content type and extension of a media part.

    Args:
        part_name: Source part name
        data: Part bytes
        declared: Content type from the manifest (may be None)

    Returns:
        (content type or None when the part is not an image, extension)
    """
    content_type = declared or sniff_content_type(data)
    if not is_image_content_type(content_type):
        return None, extension_for(part_name, content_type or "")
    return content_type, extension_for(part_name, content_type)

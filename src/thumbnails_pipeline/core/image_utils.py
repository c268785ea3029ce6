"""Image helpers: content sniffing and eligibility predicates."""

import io
from typing import Iterable

from PIL import Image, UnidentifiedImageError

DEFAULT_CONTENT_TYPE = "application/octet-stream"
IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp", ".tif", ".tiff")


def detect_content_type(data: bytes) -> str:
    """
    Infer a MIME type from image bytes rather than from a file name.

    Args:
        data: Encoded image bytes

    Returns:
        MIME type such as ``image/jpeg``, or ``application/octet-stream``
        when Pillow cannot identify the data
    """
    if not data:
        return DEFAULT_CONTENT_TYPE
    try:
        with Image.open(io.BytesIO(data)) as image:
            image_format = image.format
    except (UnidentifiedImageError, OSError, ValueError):
        return DEFAULT_CONTENT_TYPE
    return Image.MIME.get(image_format or "", DEFAULT_CONTENT_TYPE)


def always_eligible(key: str) -> bool:
    """Default eligibility predicate: every notified object is processed."""
    return True


class SupportedExtensions:
    """Eligibility predicate accepting keys with one of the given extensions."""

    def __init__(self, extensions: Iterable[str] = IMAGE_EXTENSIONS):
        self.extensions = tuple(
            ext.lower() if ext.startswith(".") else f".{ext.lower()}"
            for ext in extensions
        )

    def __call__(self, key: str) -> bool:
        return not key.endswith("/") and key.lower().endswith(self.extensions)

    def __repr__(self) -> str:
        return f"SupportedExtensions({', '.join(self.extensions)})"

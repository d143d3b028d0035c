"""
Image format detection from the buffer's own header.

Pillow identifies the container when the image is opened (only the header is
read at that point); any content type supplied by the remote server is
ignored. Every format Pillow can identify is reported so that rejections can
name what was actually received, but only JPEG and PNG pass.
"""

from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from typing import Iterable, Optional

from PIL import Image, UnidentifiedImageError

from .errors import FormatError

SUPPORTED_EXTENSIONS = frozenset({"jpg", "jpeg", "png"})

# Pillow format names whose usual extension differs from the lowercased name.
_EXTENSIONS = {"JPEG": "jpg", "TIFF": "tif", "JPEG2000": "jp2"}


@dataclass(frozen=True)
class DetectedFormat:
    extension: str
    mime_type: str


def detect_format(buffer: bytes) -> Optional[DetectedFormat]:
    """Classify `buffer` by its header, or return None if Pillow cannot identify it."""
    if not buffer:
        return None
    try:
        with Image.open(BytesIO(buffer)) as image:
            pil_format = image.format
    except UnidentifiedImageError:
        return None
    if not pil_format:
        return None
    return DetectedFormat(
        extension=_EXTENSIONS.get(pil_format, pil_format.lower()),
        mime_type=Image.MIME.get(pil_format, "application/octet-stream"),
    )


def validate_format(
    buffer: bytes, supported: Iterable[str] = SUPPORTED_EXTENSIONS
) -> DetectedFormat:
    """
    Detect the buffer's format and require it to be one of `supported`.

    Raises:
        FormatError: when nothing is detected or the format is not accepted.
    """
    detected = detect_format(buffer)
    if detected is None:
        raise FormatError("Unsupported image format")
    if detected.extension not in set(supported):
        raise FormatError(
            f"Unsupported image format: {detected.extension}",
            detected=detected.extension,
        )
    return detected

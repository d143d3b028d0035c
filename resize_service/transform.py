"""
Resize and re-encode images with Pillow.

The pipeline is fixed: orient -> flatten to RGB -> resize -> sharpen ->
modulate -> encode JPEG. Every step is always applied; the tunables in
`TransformOptions` default to the production values (quality 90, neutral
modulation).
"""

from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
import logging
import re
from typing import Optional, Tuple

from PIL import Image, ImageEnhance, ImageFilter, ImageOps

from . import config
from .errors import ParseError, TransformError

logger = logging.getLogger(__name__)

_DIMENSION_PART = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class Dimensions:
    width: int
    height: int


@dataclass
class TransformOptions:
    rotation: int = 0
    sharpen_radius: float = 1.0
    sharpen_percent: int = 80
    sharpen_threshold: int = 2
    brightness: float = 1.0
    saturation: float = 1.0
    quality: int = 90
    keep_metadata: bool = True
    background: Tuple[int, int, int] = (0, 0, 0)  # RGB behind transparent pixels

    @classmethod
    def from_settings(cls, settings: Optional[config.Settings] = None) -> "TransformOptions":
        settings = settings or config.get_settings()
        return cls(
            sharpen_radius=settings.sharpen_radius,
            sharpen_percent=settings.sharpen_percent,
            sharpen_threshold=settings.sharpen_threshold,
            brightness=settings.brightness,
            saturation=settings.saturation,
            quality=settings.jpeg_quality,
            keep_metadata=settings.keep_metadata,
            background=config.parse_hex_color(settings.flatten_background) or (0, 0, 0),
        )


def parse_dimensions(size: str) -> Dimensions:
    """
    Parse a ``"<width>x<height>"`` string.

    The separator is a lowercase ``x``; both parts must be plain base-10
    integers greater than zero.
    """
    if not isinstance(size, str):
        raise ParseError(f"Image size must be a string, got {type(size).__name__}", operation="parse_size")
    parts = size.split("x")
    if len(parts) != 2 or not all(_DIMENSION_PART.fullmatch(p) for p in parts):
        raise ParseError(f"Invalid image size {size!r}; expected '<width>x<height>'", operation="parse_size")
    width, height = (int(p, 10) for p in parts)
    if width <= 0 or height <= 0:
        raise ParseError(f"Invalid image size {size!r}; dimensions must be positive", operation="parse_size")
    return Dimensions(width=width, height=height)


def _orient(image: Image.Image, rotation: int) -> Image.Image:
    """Apply EXIF orientation so the image is upright, then any explicit rotation."""
    upright = ImageOps.exif_transpose(image)
    if rotation % 360:
        upright = upright.rotate(-rotation, expand=True)
    return upright


_SIXTEEN_BIT_MODES = ("I", "I;16", "I;16B", "I;16L", "I;16N")


def _flatten(image: Image.Image, background: Tuple[int, int, int]) -> Image.Image:
    """Convert to RGB, compositing any transparency onto `background`."""
    if image.mode in _SIXTEEN_BIT_MODES:
        # 16-bit greyscale would clip at 255; rescale into 8 bits first.
        image = image.convert("I").point(lambda v: v * (1 / 256)).convert("L")
    has_alpha = image.mode in ("RGBA", "LA", "PA", "RGBa", "La") or (
        image.mode == "P" and "transparency" in image.info
    )
    if has_alpha:
        rgba = image.convert("RGBA")
        canvas = Image.new("RGB", rgba.size, background)
        canvas.paste(rgba, mask=rgba.getchannel("A"))
        return canvas
    if image.mode != "RGB":
        return image.convert("RGB")
    return image


def _modulate(image: Image.Image, brightness: float, saturation: float) -> Image.Image:
    # Neutral at 1.0; kept in the chain as the colour tuning hook.
    image = ImageEnhance.Brightness(image).enhance(brightness)
    return ImageEnhance.Color(image).enhance(saturation)


def transform(buffer: bytes, dims: Dimensions, options: Optional[TransformOptions] = None) -> bytes:
    """
    Decode `buffer`, stretch it to exactly ``dims`` and return JPEG bytes.

    Aspect ratio is not preserved. EXIF (minus the orientation tag, which is
    applied to the pixels) and ICC profiles are carried over when
    ``options.keep_metadata`` is set.

    Raises:
        TransformError: on any decode, resize or encode failure.
    """
    options = options or TransformOptions()
    try:
        with Image.open(BytesIO(buffer)) as source:
            source.load()
            # A CMYK profile does not describe the RGB output.
            icc_profile = source.info.get("icc_profile") if source.mode != "CMYK" else None
            image = _orient(source, options.rotation)
            exif = image.getexif()

        image = _flatten(image, options.background)
        image = image.resize((dims.width, dims.height), Image.LANCZOS)
        image = image.filter(
            ImageFilter.UnsharpMask(
                radius=options.sharpen_radius,
                percent=options.sharpen_percent,
                threshold=options.sharpen_threshold,
            )
        )
        image = _modulate(image, options.brightness, options.saturation)

        save_kwargs = {"format": "JPEG", "quality": options.quality}
        if options.keep_metadata:
            if len(exif):
                save_kwargs["exif"] = exif.tobytes()
            if icc_profile:
                save_kwargs["icc_profile"] = icc_profile

        out = BytesIO()
        image.save(out, **save_kwargs)
    except Exception as exc:  # noqa: BLE001
        raise TransformError(f"Image transform failed: {exc}", operation="transform") from exc

    logger.debug("Transformed image to %dx%d (%d bytes)", dims.width, dims.height, out.tell())
    return out.getvalue()

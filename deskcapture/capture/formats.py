"""Output format selection and encoding for saved captures."""

from __future__ import annotations

import io
from pathlib import Path

from .errors import EncodeFailure
from .types import RasterImage

DEFAULT_FORMAT = "PNG"

EXTENSION_FORMATS: dict[str, str] = {
    "png": "PNG",
    "jpg": "JPEG",
    "jpeg": "JPEG",
    "gif": "GIF",
    "bmp": "BMP",
    "tiff": "TIFF",
    "tif": "TIFF",
}

SUPPORTED_FORMATS = frozenset(EXTENSION_FORMATS.values())

# Formats that cannot carry an alpha channel.
_OPAQUE_FORMATS = {"JPEG"}


def format_for_path(path: Path | str) -> str:
    """Map a file extension (case-insensitive) to a Pillow format name."""

    suffix = Path(path).suffix.lower().lstrip(".")
    return EXTENSION_FORMATS.get(suffix, DEFAULT_FORMAT)


def encode_image(image: RasterImage, fmt: str) -> bytes:
    """Encode ``image`` with Pillow's default options for ``fmt``."""

    fmt = fmt.upper()
    if fmt not in SUPPORTED_FORMATS:
        raise EncodeFailure(f"Unsupported output format: {fmt}")
    pil_image = image.to_pil()
    if fmt in _OPAQUE_FORMATS and pil_image.mode != "RGB":
        pil_image = pil_image.convert("RGB")
    buffer = io.BytesIO()
    try:
        pil_image.save(buffer, format=fmt)
    except (OSError, ValueError, KeyError) as exc:
        raise EncodeFailure(f"Cannot encode {image.mode} image as {fmt}: {exc}") from exc
    return buffer.getvalue()

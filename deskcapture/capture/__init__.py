"""Capture subsystem entry points and helpers."""

from .errors import CaptureError, CaptureUnavailable, DecodeFailure, EncodeFailure, WriteFailure
from .formats import format_for_path
from .service import CaptureService
from .types import CaptureMode, CaptureOptions, Color, RasterImage, Rect, WindowDescriptor

__all__ = [
    "CaptureService",
    "CaptureOptions",
    "CaptureMode",
    "RasterImage",
    "Rect",
    "WindowDescriptor",
    "Color",
    "CaptureError",
    "CaptureUnavailable",
    "EncodeFailure",
    "WriteFailure",
    "DecodeFailure",
    "format_for_path",
]

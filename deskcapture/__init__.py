"""Screen, region and window capture for desktop automation."""

from .api import pixel, screenshot, screenshot_to_file, set_default_service, size
from .capture import CaptureService, Color, RasterImage, Rect, WindowDescriptor

__all__ = [
    "CaptureService",
    "Color",
    "RasterImage",
    "Rect",
    "WindowDescriptor",
    "pixel",
    "screenshot",
    "screenshot_to_file",
    "set_default_service",
    "size",
]

__version__ = "0.1.0"

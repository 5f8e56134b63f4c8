"""Value types shared by the capture service and its backends."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

import numpy as np
from PIL import Image

_MODE_BANDS = {"L": 1, "RGB": 3, "RGBA": 4}


@dataclass(frozen=True, slots=True)
class Rect:
    """Rectangle in logical screen coordinates (origin top-left)."""

    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_bounds(cls, left: float, top: float, right: float, bottom: float) -> "Rect":
        return cls(x=left, y=top, width=right - left, height=bottom - top)

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def intersection(self, other: "Rect") -> Optional["Rect"]:
        """Return the overlapping area, or ``None`` when the rects do not overlap."""

        left = max(self.x, other.x)
        top = max(self.y, other.y)
        right = min(self.right, other.right)
        bottom = min(self.bottom, other.bottom)
        if right <= left or bottom <= top:
            return None
        return Rect.from_bounds(left, top, right, bottom)

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.x, self.y, self.width, self.height)


@dataclass(frozen=True, slots=True)
class RasterImage:
    """Owned, immutable bitmap produced by a single capture call.

    ``width``/``height`` are raster pixels; on high-density displays they are
    ``scale`` times the logical size that was requested.
    """

    pixels: bytes
    width: int
    height: int
    mode: str = "RGB"
    scale: float = 1.0

    def __post_init__(self) -> None:
        bands = _MODE_BANDS.get(self.mode)
        if bands is None:
            raise ValueError(f"Unsupported pixel mode: {self.mode}")
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Invalid raster size {self.width}x{self.height}")
        expected = self.width * self.height * bands
        if len(self.pixels) != expected:
            raise ValueError(
                f"Pixel buffer holds {len(self.pixels)} bytes, expected {expected}"
            )

    @classmethod
    def from_pil(cls, image: Image.Image, *, scale: float = 1.0) -> "RasterImage":
        if image.mode not in _MODE_BANDS:
            image = image.convert("RGBA" if "A" in image.getbands() else "RGB")
        return cls(
            pixels=image.tobytes(),
            width=image.width,
            height=image.height,
            mode=image.mode,
            scale=scale,
        )

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    @property
    def bands(self) -> int:
        return _MODE_BANDS[self.mode]

    def to_pil(self) -> Image.Image:
        return Image.frombytes(self.mode, self.size, self.pixels)

    def to_array(self) -> np.ndarray:
        array = np.frombuffer(self.pixels, dtype=np.uint8)
        if self.bands == 1:
            return array.reshape((self.height, self.width)).copy()
        return array.reshape((self.height, self.width, self.bands)).copy()


@dataclass(frozen=True, slots=True)
class WindowDescriptor:
    """Snapshot of one on-screen window at enumeration time."""

    owner_pid: int
    window_id: int
    title: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Color:
    red: int
    green: int
    blue: int
    alpha: int = 255

    def as_hex(self) -> str:
        return f"#{self.red:02x}{self.green:02x}{self.blue:02x}{self.alpha:02x}"

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.red, self.green, self.blue, self.alpha)


class CaptureMode(str, enum.Enum):
    ENTIRE_SCREEN = "entire_screen"
    REGION = "region"
    WINDOW = "window"


@dataclass(frozen=True, slots=True)
class CaptureOptions:
    """Parameters for one call of the capture primitive."""

    mode: CaptureMode
    rect: Optional[Rect] = None
    window_id: Optional[int] = None
    on_screen_only: bool = True

    @classmethod
    def entire_screen(cls) -> "CaptureOptions":
        return cls(mode=CaptureMode.ENTIRE_SCREEN)

    @classmethod
    def region(cls, rect: Rect) -> "CaptureOptions":
        return cls(mode=CaptureMode.REGION, rect=rect)

    @classmethod
    def window(cls, window_id: int) -> "CaptureOptions":
        return cls(mode=CaptureMode.WINDOW, window_id=window_id, on_screen_only=False)

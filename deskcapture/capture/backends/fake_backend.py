"""Deterministic fake capture backend for tests and CI."""

from __future__ import annotations

from typing import Dict, Optional

import numpy as np
from PIL import Image

from ..types import RasterImage, Rect, WindowDescriptor
from .base import CaptureBackend


def _raster_from_array(frame: np.ndarray, scale: float) -> RasterImage:
    image = Image.fromarray(np.ascontiguousarray(frame, dtype=np.uint8))
    return RasterImage.from_pil(image, scale=scale)


class FakeBackend(CaptureBackend):
    """Serve captures from fixed in-memory frames.

    ``frame`` is in raster pixels, i.e. ``scale`` times the logical display
    size. Every ``rasterize`` call is recorded in :attr:`calls`.
    """

    name = "fake"

    def __init__(
        self,
        *,
        width: int = 120,
        height: int = 90,
        scale: int = 1,
        frame: np.ndarray | None = None,
        windows: list[WindowDescriptor] | None = None,
        window_frames: Dict[int, np.ndarray] | None = None,
        has_display: bool = True,
        refuse_capture: bool = False,
    ) -> None:
        self._width = width
        self._height = height
        self._scale = scale
        if frame is None:
            frame = np.zeros((height * scale, width * scale, 3), dtype=np.uint8)
            frame[:, :, 0] = 32
            frame[:, :, 1] = 64
            frame[:, :, 2] = 96
        self._frame = frame
        self._windows = list(windows or [])
        self._window_frames = dict(window_frames or {})
        self._has_display = has_display
        self.refuse_capture = refuse_capture
        self.calls: list[tuple[Optional[Rect], bool, Optional[int]]] = []

    def main_display_frame(self) -> Optional[Rect]:
        if not self._has_display:
            return None
        return Rect(x=0, y=0, width=self._width, height=self._height)

    def list_on_screen_windows(self) -> list[WindowDescriptor]:
        return list(self._windows)

    def rasterize(
        self,
        rect: Optional[Rect],
        *,
        on_screen_only: bool,
        window_id: Optional[int] = None,
        best_resolution: bool = True,
        ignore_framing: bool = False,
    ) -> Optional[RasterImage]:
        self.calls.append((rect, on_screen_only, window_id))
        if self.refuse_capture or not self._has_display:
            return None
        if window_id is not None:
            frame = self._window_frames.get(window_id)
            if frame is None:
                return None
            return _raster_from_array(frame.copy(), float(self._scale))
        if rect is None or rect.is_empty:
            return None
        visible = rect.intersection(self.main_display_frame())  # type: ignore[arg-type]
        if visible is None:
            return None
        scale = self._scale
        top = int(visible.y * scale)
        left = int(visible.x * scale)
        bottom = int(visible.bottom * scale)
        right = int(visible.right * scale)
        if bottom <= top or right <= left:
            return None
        return _raster_from_array(self._frame[top:bottom, left:right].copy(), float(scale))

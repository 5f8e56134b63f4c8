"""MSS-based capture backend used as the cross-platform default."""

from __future__ import annotations

from typing import Any, Optional

from PIL import Image

from ...logging_utils import get_logger
from ..types import RasterImage, Rect, WindowDescriptor
from .base import CaptureBackend


def _monitor_rect(monitor: dict[str, int]) -> Rect:
    return Rect(
        x=monitor["left"],
        y=monitor["top"],
        width=monitor["width"],
        height=monitor["height"],
    )


class MssBackend(CaptureBackend):
    """Capture the screen or a region using mss.

    mss has no notion of windows, so window enumeration is empty and window
    captures always fail. A fresh mss handle is opened per call because the
    handles are not shareable across threads.
    """

    name = "mss"

    def __init__(self) -> None:
        self._log = get_logger("mss")
        import mss  # type: ignore

        self._mss_factory = mss.mss

    def _open(self) -> Any:
        return self._mss_factory()

    def _monitors(self) -> list[dict[str, int]]:
        try:
            with self._open() as sct:
                return [dict(monitor) for monitor in sct.monitors]
        except Exception as exc:  # pragma: no cover - depends on mss
            self._log.warning("MSS monitor query failed: {}", exc)
            return []

    def main_display_frame(self) -> Optional[Rect]:
        # Index 0 is the union of all displays; the rest are single displays.
        displays = self._monitors()[1:]
        if not displays:
            return None
        # The primary display sits at the desktop origin.
        for monitor in displays:
            if monitor["left"] == 0 and monitor["top"] == 0:
                return _monitor_rect(monitor)
        return _monitor_rect(displays[0])

    def desktop_frame(self) -> Optional[Rect]:
        monitors = self._monitors()
        if not monitors:
            return None
        return _monitor_rect(monitors[0])

    def list_on_screen_windows(self) -> list[WindowDescriptor]:
        return []

    def rasterize(
        self,
        rect: Optional[Rect],
        *,
        on_screen_only: bool,
        window_id: Optional[int] = None,
        best_resolution: bool = True,
        ignore_framing: bool = False,
    ) -> Optional[RasterImage]:
        if window_id is not None:
            return self._rasterize_window(
                window_id, best_resolution=best_resolution, ignore_framing=ignore_framing
            )
        if rect is None or rect.is_empty:
            return None
        return self._grab(rect)

    def _rasterize_window(
        self, window_id: int, *, best_resolution: bool, ignore_framing: bool
    ) -> Optional[RasterImage]:
        self._log.debug("Window capture not supported by mss backend: {}", window_id)
        return None

    def _grab(self, rect: Rect) -> Optional[RasterImage]:
        region = {
            "left": int(rect.x),
            "top": int(rect.y),
            "width": int(rect.width),
            "height": int(rect.height),
        }
        if region["width"] <= 0 or region["height"] <= 0:
            return None
        try:
            with self._open() as sct:
                shot = sct.grab(region)
                width, height = shot.size
                image = Image.frombytes("RGB", (width, height), bytes(shot.bgra), "raw", "BGRX")
        except Exception as exc:  # pragma: no cover - depends on mss
            self._log.warning("MSS capture failed for {}: {}", region, exc)
            return None
        if image.width <= 0 or image.height <= 0:
            return None
        return RasterImage.from_pil(image, scale=image.width / region["width"])

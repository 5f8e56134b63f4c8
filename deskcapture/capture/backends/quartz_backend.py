"""macOS capture backend built on CoreGraphics via pyobjc."""

from __future__ import annotations

import importlib
import sys
from typing import Any, Optional

from PIL import Image

from ...logging_utils import get_logger
from ..types import RasterImage, Rect, WindowDescriptor
from .base import CaptureBackend


def _rect_from_cg(bounds: Any) -> Rect:
    return Rect(
        x=float(bounds.origin.x),
        y=float(bounds.origin.y),
        width=float(bounds.size.width),
        height=float(bounds.size.height),
    )


class QuartzBackend(CaptureBackend):
    """Rasterize with ``CGWindowListCreateImage`` and enumerate windows.

    All rects are in CoreGraphics global coordinates: origin at the top-left
    of the primary display, y growing downwards, matching :class:`Rect`.
    Returned images are in raster pixels, so Retina displays yield twice the
    logical size.
    """

    name = "quartz"

    def __init__(self) -> None:
        if sys.platform != "darwin":
            raise RuntimeError(
                "QuartzBackend is only available on macOS. Current platform: %s" % sys.platform
            )
        self._log = get_logger("quartz")
        try:
            self._quartz: Any = importlib.import_module("Quartz")
            self._appkit: Any = importlib.import_module("AppKit")
        except ModuleNotFoundError as exc:
            raise RuntimeError(
                "Optional dependency 'pyobjc-framework-Quartz' is required for macOS capture. "
                "Install it via `pip install deskcapture[macos]`."
            ) from exc

    def main_display_frame(self) -> Optional[Rect]:
        try:
            ns_screen = self._appkit.NSScreen
            screen = ns_screen.mainScreen()
            if screen is None:
                return None
            frame = screen.frame()
            # Cocoa frames grow upwards from the bottom of the primary screen.
            primary_height = float(ns_screen.screens()[0].frame().size.height)
        except Exception as exc:
            self._log.warning("NSScreen query failed: {}", exc)
            return None
        width = float(frame.size.width)
        height = float(frame.size.height)
        return Rect(
            x=float(frame.origin.x),
            y=primary_height - (float(frame.origin.y) + height),
            width=width,
            height=height,
        )

    def desktop_frame(self) -> Optional[Rect]:
        quartz = self._quartz
        try:
            err, display_ids, count = quartz.CGGetActiveDisplayList(32, None, None)
            if err != 0 or not count:
                return _rect_from_cg(quartz.CGDisplayBounds(quartz.CGMainDisplayID()))
            union: Optional[Rect] = None
            for display_id in display_ids[:count]:
                rect = _rect_from_cg(quartz.CGDisplayBounds(display_id))
                if union is None:
                    union = rect
                else:
                    union = Rect.from_bounds(
                        min(union.x, rect.x),
                        min(union.y, rect.y),
                        max(union.right, rect.right),
                        max(union.bottom, rect.bottom),
                    )
            return union
        except Exception as exc:
            self._log.warning("CoreGraphics display query failed: {}", exc)
            return None

    def list_on_screen_windows(self) -> list[WindowDescriptor]:
        quartz = self._quartz
        try:
            info = quartz.CGWindowListCopyWindowInfo(
                quartz.kCGWindowListOptionOnScreenOnly, quartz.kCGNullWindowID
            )
            if info is None:
                self._log.warning("CGWindowListCopyWindowInfo returned no window list")
                return []
            windows: list[WindowDescriptor] = []
            for entry in info:
                title = entry.get(quartz.kCGWindowName)
                windows.append(
                    WindowDescriptor(
                        owner_pid=int(entry.get(quartz.kCGWindowOwnerPID, 0)),
                        window_id=int(entry.get(quartz.kCGWindowNumber, 0)),
                        title=str(title) if title is not None else None,
                    )
                )
            return windows
        except Exception as exc:
            self._log.warning("Window enumeration failed: {}", exc)
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
        quartz = self._quartz
        if rect is not None and rect.is_empty:
            return None
        try:
            if rect is None:
                cg_rect = quartz.CGRectNull
            else:
                cg_rect = quartz.CGRectMake(rect.x, rect.y, rect.width, rect.height)

            if on_screen_only:
                list_option = quartz.kCGWindowListOptionOnScreenOnly
            else:
                list_option = quartz.kCGWindowListOptionIncludingWindow
            image_option = quartz.kCGWindowImageDefault
            if best_resolution:
                image_option |= quartz.kCGWindowImageBestResolution
            if ignore_framing:
                image_option |= quartz.kCGWindowImageBoundsIgnoreFraming
            target = quartz.kCGNullWindowID if window_id is None else int(window_id)

            cg_image = quartz.CGWindowListCreateImage(cg_rect, list_option, target, image_option)
            if cg_image is None:
                # Also what macOS returns when screen recording permission is missing.
                self._log.debug("CGWindowListCreateImage returned nothing for {}", rect or target)
                return None
            return self._to_raster(cg_image, rect)
        except Exception as exc:
            self._log.warning("Quartz capture failed for {}: {}", rect or window_id, exc)
            return None

    def _to_raster(self, cg_image: Any, rect: Optional[Rect]) -> Optional[RasterImage]:
        quartz = self._quartz
        width = int(quartz.CGImageGetWidth(cg_image))
        height = int(quartz.CGImageGetHeight(cg_image))
        if width <= 0 or height <= 0:
            return None
        bytes_per_row = int(quartz.CGImageGetBytesPerRow(cg_image))
        data = quartz.CGDataProviderCopyData(quartz.CGImageGetDataProvider(cg_image))
        image = Image.frombuffer(
            "RGBA", (width, height), bytes(data), "raw", "BGRA", bytes_per_row, 1
        )
        scale = width / rect.width if rect is not None and rect.width > 0 else 1.0
        return RasterImage.from_pil(image, scale=scale)

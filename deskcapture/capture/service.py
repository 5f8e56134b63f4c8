"""Screen, region, window and pixel capture on top of one backend primitive."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from ..config import CaptureConfig
from ..fs_utils import atomic_write_bytes
from ..logging_utils import get_logger
from .backends import CaptureBackend, create_backend
from .errors import CaptureError, CaptureUnavailable, DecodeFailure, WriteFailure
from .formats import encode_image, format_for_path
from .types import CaptureMode, CaptureOptions, Color, RasterImage, Rect, WindowDescriptor

# Title untitled windows are compared and reported under.
UNKNOWN_TITLE = "Unknown"


def decode_pixel(image: RasterImage, x: int = 0, y: int = 0) -> Color:
    """Read one pixel of ``image`` exactly as stored."""

    try:
        value = image.to_pil().getpixel((x, y))
    except (ValueError, IndexError) as exc:
        raise DecodeFailure(f"Cannot read pixel ({x}, {y}) of {image.size}: {exc}") from exc
    if isinstance(value, int):
        return Color(red=value, green=value, blue=value)
    if not isinstance(value, tuple) or len(value) < 3:
        raise DecodeFailure(f"Unexpected pixel value {value!r} for mode {image.mode}")
    alpha = value[3] if len(value) > 3 else 255
    return Color(red=value[0], green=value[1], blue=value[2], alpha=alpha)


class CaptureService:
    """Synchronous capture operations.

    Every public method reports failure as a value (``None``, ``False`` or an
    empty list) and never raises for an expected capture failure. The service
    keeps no state between calls and adds no locking; callers that need
    ordering across threads must serialize externally.
    """

    def __init__(
        self,
        backend: CaptureBackend | None = None,
        config: CaptureConfig | None = None,
    ) -> None:
        self._config = config or CaptureConfig()
        self._backend = backend or create_backend(self._config.backend)
        self._log = get_logger("capture")

    @property
    def backend(self) -> CaptureBackend:
        return self._backend

    def close(self) -> None:
        self._backend.close()

    def __enter__(self) -> "CaptureService":
        return self

    def __exit__(self, *_exc_info) -> None:
        self.close()

    # Capture primitive -----------------------------------------------------------------

    def capture_frame(self, options: CaptureOptions) -> Optional[RasterImage]:
        """Rasterize the screen, a region or one window according to ``options``."""

        try:
            return self._rasterize(options)
        except CaptureUnavailable as exc:
            self._log.debug("Capture unavailable: {}", exc)
            return None
        except Exception as exc:
            self._log.warning("Backend {} failed to capture {}: {}", self._backend.name, options, exc)
            return None

    def _rasterize(self, options: CaptureOptions) -> RasterImage:
        if options.mode is CaptureMode.WINDOW:
            if options.window_id is None:
                raise CaptureUnavailable("Window capture requested without a window id")
            image = self._backend.rasterize(
                None,
                on_screen_only=options.on_screen_only,
                window_id=options.window_id,
                best_resolution=True,
                ignore_framing=True,
            )
            if image is None:
                raise CaptureUnavailable(f"Backend returned nothing for window {options.window_id}")
            return image

        if options.mode is CaptureMode.ENTIRE_SCREEN:
            rect = self._backend.main_display_frame()
            if rect is None:
                raise CaptureUnavailable("No main display available")
        else:
            requested = options.rect
            if requested is None or requested.is_empty:
                raise CaptureUnavailable(f"Empty capture region {requested}")
            bounds = self._backend.desktop_frame()
            if bounds is None:
                raise CaptureUnavailable("No display available")
            rect = requested.intersection(bounds)
            if rect is None:
                raise CaptureUnavailable(f"Region {requested} lies outside the desktop {bounds}")

        image = self._backend.rasterize(
            rect,
            on_screen_only=options.on_screen_only,
            best_resolution=True,
        )
        if image is None:
            raise CaptureUnavailable(f"Backend returned nothing for {rect}")
        return image

    # Screen and region ------------------------------------------------------------------

    def capture_screen(self) -> Optional[RasterImage]:
        return self.capture_frame(CaptureOptions.entire_screen())

    def capture_region(self, rect: Rect) -> Optional[RasterImage]:
        """Capture ``rect``, clipped to the visible desktop.

        A region that only partly overlaps the desktop yields the visible
        part; one with no overlap yields ``None``.
        """

        return self.capture_frame(CaptureOptions.region(rect))

    # Windows --------------------------------------------------------------------------

    def enumerate_windows(self, pid: int, title: str) -> list[WindowDescriptor]:
        """Return on-screen windows owned by ``pid`` whose title equals ``title``."""

        try:
            windows = self._backend.list_on_screen_windows()
        except Exception as exc:
            self._log.warning("Backend {} failed to list windows: {}", self._backend.name, exc)
            return []
        matches: list[WindowDescriptor] = []
        for window in windows:
            window_title = window.title if window.title is not None else UNKNOWN_TITLE
            if window.owner_pid == pid and window_title == title:
                matches.append(
                    WindowDescriptor(
                        owner_pid=window.owner_pid,
                        window_id=window.window_id,
                        title=window_title,
                    )
                )
        return matches

    def capture_window(self, window_id: int) -> Optional[RasterImage]:
        return self.capture_frame(CaptureOptions.window(window_id))

    def capture_windows_by_owner(self, pid: int, title: str) -> list[RasterImage]:
        images: list[RasterImage] = []
        for window in self.enumerate_windows(pid, title):
            image = self.capture_window(window.window_id)
            if image is None:
                self._log.debug("Dropping failed capture of window {}", window.window_id)
                continue
            images.append(image)
        return images

    # Pixels -----------------------------------------------------------------------------

    def pixel_color(self, x: int, y: int) -> Optional[Color]:
        image = self.capture_region(Rect(x=x, y=y, width=1, height=1))
        if image is None:
            return None
        try:
            return decode_pixel(image)
        except DecodeFailure as exc:
            self._log.warning("Pixel sample at ({}, {}) failed: {}", x, y, exc)
            return None

    # Files ------------------------------------------------------------------------------

    def save_to_file(self, image: RasterImage, path: Path | str) -> bool:
        """Encode ``image`` by the extension of ``path`` and write it atomically."""

        target = Path(path)
        fmt = format_for_path(target)
        try:
            payload = encode_image(image, fmt)
            try:
                atomic_write_bytes(target, payload)
            except OSError as exc:
                raise WriteFailure(f"Cannot write {target}: {exc}") from exc
        except CaptureError as exc:
            self._log.warning("Saving capture to {} failed: {}", target, exc)
            return False
        self._log.debug("Saved {}x{} {} capture to {}", image.width, image.height, fmt, target)
        return True

    def screenshot_to_file(self, path: Path | str, region: Rect | None = None) -> bool:
        image = self.capture_region(region) if region is not None else self.capture_screen()
        if image is None:
            self._log.warning("Capture failed; not writing {}", path)
            return False
        return self.save_to_file(image, path)

    # Geometry ---------------------------------------------------------------------------

    def main_screen_size(self) -> tuple[float, float]:
        try:
            frame = self._backend.main_display_frame()
        except Exception as exc:
            self._log.warning("Backend {} failed to report the main display: {}", self._backend.name, exc)
            return (0, 0)
        if frame is None:
            return (0, 0)
        return (frame.width, frame.height)

"""Module-level capture helpers backed by a shared default service."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Optional, Union

from .capture.service import CaptureService
from .capture.types import Color, RasterImage, Rect

_default_service: Optional[CaptureService] = None
_default_lock = threading.Lock()


def get_default_service() -> CaptureService:
    global _default_service
    with _default_lock:
        if _default_service is None:
            _default_service = CaptureService()
        return _default_service


def set_default_service(service: Optional[CaptureService]) -> None:
    """Replace the shared service; ``None`` recreates it lazily on next use."""

    global _default_service
    with _default_lock:
        _default_service = service


def screenshot(
    region: Optional[Rect] = None,
    *,
    window_id: Optional[int] = None,
    pid: Optional[int] = None,
    window_name: Optional[str] = None,
) -> Union[RasterImage, list[RasterImage], None]:
    """Capture the screen, a region, one window, or a process's windows.

    ``pid`` with ``window_name`` returns a list; every other form returns a
    single image or ``None``.
    """

    service = get_default_service()
    if pid is not None or window_name is not None:
        if pid is None or window_name is None:
            raise TypeError("pid and window_name must be given together")
        return service.capture_windows_by_owner(pid, window_name)
    if window_id is not None:
        return service.capture_window(window_id)
    if region is not None:
        return service.capture_region(region)
    return service.capture_screen()


def screenshot_to_file(image_filename: Path | str, region: Optional[Rect] = None) -> bool:
    return get_default_service().screenshot_to_file(image_filename, region)


def pixel(x: int, y: int) -> Optional[Color]:
    return get_default_service().pixel_color(x, y)


def size() -> tuple[float, float]:
    return get_default_service().main_screen_size()

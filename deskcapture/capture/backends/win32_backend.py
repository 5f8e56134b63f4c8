"""Windows backend: mss for screen regions, user32/gdi32 for windows."""

from __future__ import annotations

import ctypes
import sys
from typing import Any, Optional

from PIL import Image

from ..types import RasterImage, Rect, WindowDescriptor
from .mss_backend import MssBackend

# Render DirectComposition content too, so occluded and GPU-drawn windows work.
PW_RENDERFULLCONTENT = 0x00000002
DWMWA_EXTENDED_FRAME_BOUNDS = 9
DIB_RGB_COLORS = 0
BI_RGB = 0


class RECT(ctypes.Structure):
    _fields_ = [
        ("left", ctypes.c_long),
        ("top", ctypes.c_long),
        ("right", ctypes.c_long),
        ("bottom", ctypes.c_long),
    ]


class BITMAPINFOHEADER(ctypes.Structure):
    _fields_ = [
        ("biSize", ctypes.c_uint32),
        ("biWidth", ctypes.c_long),
        ("biHeight", ctypes.c_long),
        ("biPlanes", ctypes.c_uint16),
        ("biBitCount", ctypes.c_uint16),
        ("biCompression", ctypes.c_uint32),
        ("biSizeImage", ctypes.c_uint32),
        ("biXPelsPerMeter", ctypes.c_long),
        ("biYPelsPerMeter", ctypes.c_long),
        ("biClrUsed", ctypes.c_uint32),
        ("biClrImportant", ctypes.c_uint32),
    ]


class Win32Backend(MssBackend):  # pragma: no cover - Windows only
    """Enumerate top-level windows and render them with ``PrintWindow``."""

    name = "win32"

    def __init__(self) -> None:
        if sys.platform != "win32":
            raise RuntimeError(
                "Win32Backend is only available on Windows. Current platform: %s"
                % sys.platform
            )
        super().__init__()
        from ctypes import wintypes

        self._user32: Any = ctypes.windll.user32  # type: ignore[attr-defined]
        self._gdi32: Any = ctypes.windll.gdi32  # type: ignore[attr-defined]
        self._dwmapi: Any = getattr(ctypes.windll, "dwmapi", None)  # type: ignore[attr-defined]
        self._enum_proc = ctypes.WINFUNCTYPE(wintypes.BOOL, wintypes.HWND, wintypes.LPARAM)

        self._user32.IsWindow.argtypes = (wintypes.HWND,)
        self._user32.GetWindowRect.argtypes = (wintypes.HWND, ctypes.POINTER(RECT))
        self._user32.GetWindowDC.restype = wintypes.HDC
        self._user32.GetWindowDC.argtypes = (wintypes.HWND,)
        self._user32.ReleaseDC.argtypes = (wintypes.HWND, wintypes.HDC)
        self._user32.PrintWindow.argtypes = (wintypes.HWND, wintypes.HDC, wintypes.UINT)
        self._gdi32.CreateCompatibleDC.restype = wintypes.HDC
        self._gdi32.CreateCompatibleDC.argtypes = (wintypes.HDC,)
        self._gdi32.CreateCompatibleBitmap.restype = wintypes.HBITMAP
        self._gdi32.CreateCompatibleBitmap.argtypes = (wintypes.HDC, ctypes.c_int, ctypes.c_int)
        self._gdi32.SelectObject.restype = wintypes.HGDIOBJ
        self._gdi32.SelectObject.argtypes = (wintypes.HDC, wintypes.HGDIOBJ)
        self._gdi32.DeleteObject.argtypes = (wintypes.HGDIOBJ,)
        self._gdi32.DeleteDC.argtypes = (wintypes.HDC,)

    def list_on_screen_windows(self) -> list[WindowDescriptor]:
        windows: list[WindowDescriptor] = []
        user32 = self._user32

        def _callback(hwnd, _lparam):
            if not user32.IsWindowVisible(hwnd):
                return True
            length = user32.GetWindowTextLengthW(hwnd)
            title: Optional[str] = None
            if length > 0:
                buffer = ctypes.create_unicode_buffer(length + 1)
                user32.GetWindowTextW(hwnd, buffer, length + 1)
                title = buffer.value
            pid = ctypes.c_ulong()
            user32.GetWindowThreadProcessId(hwnd, ctypes.byref(pid))
            windows.append(WindowDescriptor(owner_pid=int(pid.value), window_id=int(hwnd), title=title))
            return True

        # EnumWindows walks the z-order from the top, matching front-to-back order.
        if not user32.EnumWindows(self._enum_proc(_callback), 0):
            self._log.warning("EnumWindows failed")
        return windows

    def _window_rect(self, hwnd: int) -> Optional[RECT]:
        rect = RECT()
        if self._user32.GetWindowRect(hwnd, ctypes.byref(rect)):
            return rect
        return None

    def _frame_bounds(self, hwnd: int) -> Optional[RECT]:
        if self._dwmapi is None:
            return None
        rect = RECT()
        status = self._dwmapi.DwmGetWindowAttribute(
            hwnd, DWMWA_EXTENDED_FRAME_BOUNDS, ctypes.byref(rect), ctypes.sizeof(rect)
        )
        return rect if status == 0 else None

    def _rasterize_window(
        self, window_id: int, *, best_resolution: bool, ignore_framing: bool
    ) -> Optional[RasterImage]:
        hwnd = int(window_id)
        if not self._user32.IsWindow(hwnd):
            self._log.debug("Window {} no longer exists", hwnd)
            return None
        rect = self._window_rect(hwnd)
        if rect is None:
            return None
        width = rect.right - rect.left
        height = rect.bottom - rect.top
        if width <= 0 or height <= 0:
            return None

        image = self._print_window(hwnd, width, height)
        if image is None:
            return None
        if ignore_framing:
            # Trim the invisible resize borders PrintWindow includes on Windows 10+.
            bounds = self._frame_bounds(hwnd)
            if bounds is not None:
                box = (
                    max(0, bounds.left - rect.left),
                    max(0, bounds.top - rect.top),
                    min(width, bounds.right - rect.left),
                    min(height, bounds.bottom - rect.top),
                )
                if box[2] > box[0] and box[3] > box[1]:
                    image = image.crop(box)
        return RasterImage.from_pil(image)

    def _print_window(self, hwnd: int, width: int, height: int) -> Optional[Image.Image]:
        user32 = self._user32
        gdi32 = self._gdi32
        window_dc = user32.GetWindowDC(hwnd)
        if not window_dc:
            return None
        memory_dc = gdi32.CreateCompatibleDC(window_dc)
        bitmap = gdi32.CreateCompatibleBitmap(window_dc, width, height)
        previous = gdi32.SelectObject(memory_dc, bitmap)
        try:
            if not user32.PrintWindow(hwnd, memory_dc, PW_RENDERFULLCONTENT):
                self._log.debug("PrintWindow refused window {}", hwnd)
                return None
            header = BITMAPINFOHEADER()
            header.biSize = ctypes.sizeof(BITMAPINFOHEADER)
            header.biWidth = width
            header.biHeight = -height  # top-down rows
            header.biPlanes = 1
            header.biBitCount = 32
            header.biCompression = BI_RGB
            buffer = ctypes.create_string_buffer(width * height * 4)
            rows = gdi32.GetDIBits(
                memory_dc, bitmap, 0, height, buffer, ctypes.byref(header), DIB_RGB_COLORS
            )
            if rows != height:
                self._log.debug("GetDIBits returned {} of {} rows", rows, height)
                return None
            return Image.frombuffer("RGB", (width, height), buffer.raw, "raw", "BGRX", 0, 1)
        finally:
            gdi32.SelectObject(memory_dc, previous)
            gdi32.DeleteObject(bitmap)
            gdi32.DeleteDC(memory_dc)
            user32.ReleaseDC(hwnd, window_dc)

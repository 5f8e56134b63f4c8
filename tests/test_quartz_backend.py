from __future__ import annotations

import sys
import types
from types import SimpleNamespace

import pytest

from deskcapture.capture.backends.quartz_backend import QuartzBackend
from deskcapture.capture.service import CaptureService
from deskcapture.capture.types import Color, Rect, WindowDescriptor

ON_SCREEN_ONLY = 1
INCLUDING_WINDOW = 8
IMAGE_DEFAULT = 0
BOUNDS_IGNORE_FRAMING = 1
BEST_RESOLUTION = 8
NULL_WINDOW_ID = 0


def _cg_rect(x: float, y: float, width: float, height: float) -> SimpleNamespace:
    return SimpleNamespace(
        origin=SimpleNamespace(x=x, y=y),
        size=SimpleNamespace(width=width, height=height),
    )


class DummyImage:
    def __init__(self, width: int, height: int, bgra: tuple[int, int, int, int]) -> None:
        self.width = width
        self.height = height
        self.data = bytes(bgra) * (width * height)


class DummyQuartz(types.ModuleType):
    def __init__(self) -> None:
        super().__init__("Quartz")
        self.CGRectNull = object()
        self.kCGWindowListOptionOnScreenOnly = ON_SCREEN_ONLY
        self.kCGWindowListOptionIncludingWindow = INCLUDING_WINDOW
        self.kCGWindowImageDefault = IMAGE_DEFAULT
        self.kCGWindowImageBoundsIgnoreFraming = BOUNDS_IGNORE_FRAMING
        self.kCGWindowImageBestResolution = BEST_RESOLUTION
        self.kCGNullWindowID = NULL_WINDOW_ID
        self.kCGWindowName = "kCGWindowName"
        self.kCGWindowOwnerPID = "kCGWindowOwnerPID"
        self.kCGWindowNumber = "kCGWindowNumber"
        self.created: list[tuple] = []
        self.window_info: list[dict] | None = []
        self.displays: list[SimpleNamespace] = [_cg_rect(0, 0, 30, 20)]
        self.image_scale = 1
        self.fail_with: Exception | None = None

    def CGRectMake(self, x, y, width, height):
        return ("rect", x, y, width, height)

    def CGWindowListCreateImage(self, rect, list_option, window_id, image_option):
        if self.fail_with is not None:
            raise self.fail_with
        self.created.append((rect, list_option, window_id, image_option))
        if rect is self.CGRectNull:
            return DummyImage(6, 4, (30, 20, 10, 255))
        _, _, _, width, height = rect
        scale = self.image_scale
        return DummyImage(int(width * scale), int(height * scale), (30, 20, 10, 255))

    def CGImageGetWidth(self, image):
        return image.width

    def CGImageGetHeight(self, image):
        return image.height

    def CGImageGetBytesPerRow(self, image):
        return image.width * 4

    def CGImageGetDataProvider(self, image):
        return image

    def CGDataProviderCopyData(self, provider):
        return provider.data

    def CGWindowListCopyWindowInfo(self, option, window_id):
        assert option == ON_SCREEN_ONLY
        assert window_id == NULL_WINDOW_ID
        if self.fail_with is not None:
            raise self.fail_with
        return self.window_info

    def CGGetActiveDisplayList(self, max_displays, _ids, _count):
        if not self.displays:
            return (1, None, 0)
        return (0, list(range(len(self.displays))), len(self.displays))

    def CGDisplayBounds(self, display_id):
        return self.displays[display_id]

    def CGMainDisplayID(self):
        return 0


class DummyScreen:
    def __init__(self, frame: SimpleNamespace) -> None:
        self._frame = frame

    def frame(self) -> SimpleNamespace:
        return self._frame


class DummyNSScreen:
    main: DummyScreen | None = None
    screens_list: list[DummyScreen] = []

    @classmethod
    def mainScreen(cls):
        return cls.main

    @classmethod
    def screens(cls):
        return cls.screens_list


@pytest.fixture
def quartz(monkeypatch: pytest.MonkeyPatch) -> DummyQuartz:
    module = DummyQuartz()
    appkit = types.ModuleType("AppKit")
    appkit.NSScreen = DummyNSScreen
    primary = DummyScreen(_cg_rect(0, 0, 30, 20))
    DummyNSScreen.main = primary
    DummyNSScreen.screens_list = [primary]
    monkeypatch.setattr(sys, "platform", "darwin")
    monkeypatch.setitem(sys.modules, "Quartz", module)
    monkeypatch.setitem(sys.modules, "AppKit", appkit)
    return module


@pytest.fixture
def backend(quartz: DummyQuartz) -> QuartzBackend:
    return QuartzBackend()


def test_region_capture_uses_on_screen_only(backend: QuartzBackend, quartz: DummyQuartz) -> None:
    image = backend.rasterize(Rect(2, 3, 4, 5), on_screen_only=True)

    assert image is not None
    assert image.mode == "RGBA"
    assert image.size == (4, 5)
    assert image.to_pil().getpixel((0, 0)) == (10, 20, 30, 255)
    assert quartz.created == [
        (("rect", 2, 3, 4, 5), ON_SCREEN_ONLY, NULL_WINDOW_ID, IMAGE_DEFAULT | BEST_RESOLUTION)
    ]


def test_window_capture_uses_null_rect_and_including_window(backend: QuartzBackend, quartz: DummyQuartz) -> None:
    image = backend.rasterize(
        None, on_screen_only=False, window_id=77, best_resolution=True, ignore_framing=True
    )

    assert image is not None
    assert image.size == (6, 4)
    rect, list_option, window_id, image_option = quartz.created[-1]
    assert rect is quartz.CGRectNull
    assert list_option == INCLUDING_WINDOW
    assert window_id == 77
    assert image_option == BOUNDS_IGNORE_FRAMING | BEST_RESOLUTION


def test_service_passes_mode_flags(quartz: DummyQuartz) -> None:
    service = CaptureService(backend=QuartzBackend())

    assert service.capture_screen() is not None
    assert service.capture_window(5) is not None
    assert service.pixel_color(1, 1) == Color(10, 20, 30, 255)

    screen, window, pixel = quartz.created
    assert screen[:3] == (("rect", 0.0, 0.0, 30.0, 20.0), ON_SCREEN_ONLY, NULL_WINDOW_ID)
    assert window[1:] == (INCLUDING_WINDOW, 5, BOUNDS_IGNORE_FRAMING | BEST_RESOLUTION)
    assert pixel[:2] == (("rect", 1, 1, 1, 1), ON_SCREEN_ONLY)


def test_retina_capture_reports_scale(backend: QuartzBackend, quartz: DummyQuartz) -> None:
    quartz.image_scale = 2

    image = backend.rasterize(Rect(0, 0, 10, 5), on_screen_only=True)

    assert image is not None
    assert image.size == (20, 10)
    assert image.scale == 2


def test_empty_rect_is_not_captured(backend: QuartzBackend, quartz: DummyQuartz) -> None:
    assert backend.rasterize(Rect(0, 0, 0, 5), on_screen_only=True) is None
    assert quartz.created == []


def test_capture_refused_returns_none(backend: QuartzBackend, quartz: DummyQuartz) -> None:
    quartz.CGWindowListCreateImage = lambda *_args: None

    assert backend.rasterize(Rect(0, 0, 4, 4), on_screen_only=True) is None


def test_platform_errors_are_absorbed(backend: QuartzBackend, quartz: DummyQuartz) -> None:
    quartz.fail_with = RuntimeError("objc exception")

    assert backend.rasterize(Rect(0, 0, 4, 4), on_screen_only=True) is None
    assert backend.list_on_screen_windows() == []


def test_window_info_mapping(backend: QuartzBackend, quartz: DummyQuartz) -> None:
    quartz.window_info = [
        {"kCGWindowOwnerPID": 42, "kCGWindowNumber": 7, "kCGWindowName": "Terminal"},
        {"kCGWindowOwnerPID": 42, "kCGWindowNumber": 8},
    ]

    assert backend.list_on_screen_windows() == [
        WindowDescriptor(owner_pid=42, window_id=7, title="Terminal"),
        WindowDescriptor(owner_pid=42, window_id=8, title=None),
    ]
    service = CaptureService(backend=backend)
    assert [w.window_id for w in service.enumerate_windows(42, "Unknown")] == [8]


def test_missing_window_list_is_empty(backend: QuartzBackend, quartz: DummyQuartz) -> None:
    quartz.window_info = None
    assert backend.list_on_screen_windows() == []


def test_main_display_frame_uses_top_left_origin(backend: QuartzBackend) -> None:
    primary = DummyScreen(_cg_rect(0, 0, 1440, 900))
    # A secondary screen above the primary: Cocoa y=900 is CoreGraphics y=-1080.
    secondary = DummyScreen(_cg_rect(0, 900, 1920, 1080))
    DummyNSScreen.screens_list = [primary, secondary]
    DummyNSScreen.main = secondary

    assert backend.main_display_frame() == Rect(0, -1080, 1920, 1080)


def test_main_display_frame_without_screen(backend: QuartzBackend) -> None:
    DummyNSScreen.main = None
    assert backend.main_display_frame() is None
    assert CaptureService(backend=backend).main_screen_size() == (0, 0)


def test_desktop_frame_unions_display_bounds(backend: QuartzBackend, quartz: DummyQuartz) -> None:
    quartz.displays = [_cg_rect(0, 0, 1440, 900), _cg_rect(1440, -200, 1920, 1080)]

    assert backend.desktop_frame() == Rect(0, -200, 3360, 1100)


def test_desktop_frame_falls_back_to_main_display_bounds(backend: QuartzBackend, quartz: DummyQuartz) -> None:
    main = _cg_rect(0, 0, 1440, 900)
    quartz.displays = []
    quartz.CGDisplayBounds = lambda display_id: main

    assert backend.desktop_frame() == Rect(0, 0, 1440, 900)

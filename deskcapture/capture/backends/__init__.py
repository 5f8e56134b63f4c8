"""Capture backend utilities."""

from __future__ import annotations

import sys

from .base import CaptureBackend
from .fake_backend import FakeBackend
from .mss_backend import MssBackend

BACKEND_NAMES = ("auto", "mss", "win32", "quartz", "fake")


def create_backend(name: str = "auto") -> CaptureBackend:
    """Instantiate a capture backend by name.

    ``auto`` picks the native backend for the running platform.
    """

    name = name.lower()
    if name == "auto":
        if sys.platform == "darwin":
            name = "quartz"
        elif sys.platform == "win32":
            name = "win32"
        else:
            name = "mss"
    if name == "mss":
        return MssBackend()
    if name == "win32":
        from .win32_backend import Win32Backend

        return Win32Backend()
    if name == "quartz":
        from .quartz_backend import QuartzBackend

        return QuartzBackend()
    if name == "fake":
        return FakeBackend()
    raise ValueError(f"Unknown capture backend: {name!r} (expected one of {BACKEND_NAMES})")


__all__ = ["BACKEND_NAMES", "CaptureBackend", "FakeBackend", "MssBackend", "create_backend"]

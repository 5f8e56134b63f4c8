"""Interface implemented by platform-specific capture backends."""

from __future__ import annotations

import abc
from typing import Optional

from ..types import RasterImage, Rect, WindowDescriptor


class CaptureBackend(abc.ABC):
    """Narrow boundary to the host window server and compositor.

    Implementations absorb platform failures and report them as ``None`` (or
    an empty list); they never raise for an expected capture failure.
    """

    name = "base"

    @abc.abstractmethod
    def rasterize(
        self,
        rect: Optional[Rect],
        *,
        on_screen_only: bool,
        window_id: Optional[int] = None,
        best_resolution: bool = True,
        ignore_framing: bool = False,
    ) -> Optional[RasterImage]:
        """Rasterize ``rect`` of the screen, or the window ``window_id``.

        ``rect`` is ``None`` for window captures; the output is then sized to
        the window's own bounds.
        """

    @abc.abstractmethod
    def list_on_screen_windows(self) -> list[WindowDescriptor]:
        """Return on-screen windows in front-to-back order."""

    @abc.abstractmethod
    def main_display_frame(self) -> Optional[Rect]:
        """Return the main display frame in logical coordinates."""

    def desktop_frame(self) -> Optional[Rect]:
        """Return the bounds regions are clipped to before capture."""

        return self.main_display_frame()

    def close(self) -> None:
        """Release backend resources."""

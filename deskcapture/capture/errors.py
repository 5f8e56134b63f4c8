"""Failure taxonomy for the capture subsystem.

These exceptions never escape the public :class:`CaptureService` operations;
they are raised by internal helpers and converted to ``None``/``False`` at the
service boundary.
"""

from __future__ import annotations


class CaptureError(Exception):
    """Base class for capture subsystem failures."""


class CaptureUnavailable(CaptureError):
    """No display or window found, permission denied, or compositor refusal."""


class EncodeFailure(CaptureError):
    """The bitmap cannot be represented in the requested image format."""


class WriteFailure(CaptureError):
    """The filesystem rejected the write."""


class DecodeFailure(CaptureError):
    """A captured bitmap cannot be read back as addressable pixels."""

"""Filesystem helpers for atomic writes."""

from __future__ import annotations

import os
import uuid
from pathlib import Path


def fsync_dir(path: Path) -> None:
    if os.name == "nt":
        return
    fd = os.open(str(path), os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


def atomic_write_bytes(destination: Path, payload: bytes) -> None:
    """Write ``payload`` to ``destination`` through a temporary sibling file.

    The parent directory must already exist. On any failure the temporary file
    is removed and an existing ``destination`` is left untouched.
    """

    temp_path = destination.with_name(f".tmp-{destination.name}-{uuid.uuid4().hex}")
    try:
        with temp_path.open("wb") as handle:
            handle.write(payload)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(temp_path, destination)
        fsync_dir(destination.parent)
    finally:
        temp_path.unlink(missing_ok=True)

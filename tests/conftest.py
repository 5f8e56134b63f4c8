from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from deskcapture import api  # noqa: E402
from deskcapture.capture.backends.fake_backend import FakeBackend  # noqa: E402
from deskcapture.capture.service import CaptureService  # noqa: E402


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend(width=120, height=90)


@pytest.fixture
def service(fake_backend: FakeBackend) -> CaptureService:
    return CaptureService(backend=fake_backend)


@pytest.fixture(autouse=True)
def _reset_default_service():
    yield
    api.set_default_service(None)

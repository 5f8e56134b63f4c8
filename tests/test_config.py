from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from deskcapture.config import BACKEND_ENV_VAR, AppConfig, CaptureConfig, load_config


def test_load_config_defaults_without_path(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(BACKEND_ENV_VAR, raising=False)
    config = load_config()
    assert config == AppConfig()
    assert config.capture.backend == "auto"


def test_load_config_from_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(BACKEND_ENV_VAR, raising=False)
    path = tmp_path / "deskcapture.yml"
    path.write_text(
        "capture:\n  backend: mss\nlogging:\n  level: DEBUG\n",
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.capture.backend == "mss"
    assert config.logging.level == "DEBUG"


def test_load_config_empty_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(BACKEND_ENV_VAR, raising=False)
    path = tmp_path / "empty.yml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == AppConfig()


def test_env_overrides_backend(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "deskcapture.yml"
    path.write_text("capture:\n  backend: mss\n", encoding="utf-8")
    monkeypatch.setenv(BACKEND_ENV_VAR, "Fake")

    assert load_config(path).capture.backend == "fake"


def test_invalid_backend_rejected() -> None:
    with pytest.raises(ValidationError):
        CaptureConfig(backend="directx")

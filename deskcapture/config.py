"""Configuration loading and validation using Pydantic models."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field

BACKEND_ENV_VAR = "DESKCAPTURE_BACKEND"


class CaptureConfig(BaseModel):
    backend: Literal["auto", "mss", "win32", "quartz", "fake"] = Field(
        "auto",
        description="Platform capture backend; auto selects the native one.",
    )


class LoggingConfig(BaseModel):
    level: str = Field("INFO")
    log_dir: Optional[Path] = Field(
        None,
        description="Directory for the rotating log file.",
    )
    to_file: bool = Field(
        False,
        description="Write a log file to the platform default directory when log_dir is unset.",
    )


class AppConfig(BaseModel):
    capture: CaptureConfig = CaptureConfig()
    logging: LoggingConfig = LoggingConfig()


def _apply_env_overrides(data: dict) -> dict:
    backend = os.environ.get(BACKEND_ENV_VAR)
    if backend:
        capture = dict(data.get("capture") or {})
        capture["backend"] = backend.strip().lower()
        data["capture"] = capture
    return data


def load_config(path: Path | str | None = None) -> AppConfig:
    """Load YAML configuration from disk, falling back to defaults."""

    data: dict = {}
    if path is not None:
        config_path = Path(path)
        with config_path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    return AppConfig.model_validate(_apply_env_overrides(data))

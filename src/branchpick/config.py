"""XDG config loading (read-only)."""

from __future__ import annotations

import logging as py_logging
import os
import sys
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

if sys.version_info >= (3, 11):
    import tomllib
else:  # pragma: no cover
    import tomli as tomllib

from branchpick.logging import LOG_LEVELS
from branchpick.models import MAX_BRANCHES

logger = py_logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("~/.config/branchpick/config.toml")
CONFIG_PATH_ENV = "BRANCHPICK_CONFIG"
DEFAULT_GIT_EXECUTABLE = "git"
DEFAULT_LOG_LEVEL = "INFO"


class PickerConfig(BaseModel):
    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    max_branches: int = Field(default=MAX_BRANCHES, ge=1, le=MAX_BRANCHES)
    git_executable: str = Field(default=DEFAULT_GIT_EXECUTABLE, min_length=1)
    mouse_capture: bool = True
    strict_exit: bool = False
    log_level: str = DEFAULT_LOG_LEVEL

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized == "WARNING":
            normalized = "WARN"
        if normalized not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {value}")
        return normalized


def get_config_path(path: str | Path | None = None) -> Path:
    if path is not None:
        return Path(path).expanduser()
    env_path = os.getenv(CONFIG_PATH_ENV, "").strip()
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_PATH.expanduser()


def _sanitize(raw: dict[str, object]) -> PickerConfig:
    cfg = PickerConfig()

    max_branches = raw.get("max_branches", cfg.max_branches)
    if isinstance(max_branches, int) and not isinstance(max_branches, bool) and 1 <= max_branches <= MAX_BRANCHES:
        cfg.max_branches = max_branches

    git_executable = raw.get("git_executable", cfg.git_executable)
    if isinstance(git_executable, str) and git_executable.strip():
        cfg.git_executable = git_executable.strip()

    mouse_capture = raw.get("mouse_capture", cfg.mouse_capture)
    if isinstance(mouse_capture, bool):
        cfg.mouse_capture = mouse_capture

    strict_exit = raw.get("strict_exit", cfg.strict_exit)
    if isinstance(strict_exit, bool):
        cfg.strict_exit = strict_exit

    log_level = raw.get("log_level", cfg.log_level)
    if isinstance(log_level, str) and log_level.strip().upper() in LOG_LEVELS:
        cfg.log_level = log_level

    return cfg


def load_config(path: str | Path | None = None) -> PickerConfig:
    resolved = get_config_path(path)
    if not resolved.exists():
        return PickerConfig()
    try:
        with resolved.open("rb") as handle:
            raw = tomllib.load(handle)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Ignoring unreadable config path=%s error=%s", resolved, exc)
        return PickerConfig()
    if not isinstance(raw, dict):
        return PickerConfig()
    return _sanitize(raw)

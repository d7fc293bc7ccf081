from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Mapping

from app_config_parser import parse_app_config
from app_config_schema import (
    DEFAULT_CONFIG_FILE,
    AppConfig,
    AppConfigurationError,
    AudioSettings,
    RoutineSettings,
    RuntimeSettings,
    UIServerSettings,
)

__all__ = [
    "DEFAULT_CONFIG_FILE",
    "AppConfig",
    "AppConfigurationError",
    "AudioSettings",
    "RoutineSettings",
    "RuntimeSettings",
    "UIServerSettings",
    "load_app_config",
    "resolve_config_path",
]

CONFIG_ENV_VAR = "APP_CONFIG_FILE"


def resolve_config_path(config_path: str | None = None) -> Path:
    raw = config_path or os.getenv(CONFIG_ENV_VAR) or DEFAULT_CONFIG_FILE
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (Path.cwd() / path).resolve()
    return path


def load_app_config(config_path: str | None = None) -> AppConfig:
    """Load `config.toml`, falling back to defaults when no file was requested.

    An explicit path (argument or `APP_CONFIG_FILE`) must exist; the implicit
    `config.toml` in the working directory is optional.
    """
    explicit = bool(config_path or os.getenv(CONFIG_ENV_VAR))
    path = resolve_config_path(config_path)
    if not path.exists():
        if explicit:
            raise AppConfigurationError(f"Config file not found: {path}")
        return AppConfig()
    if not path.is_file():
        raise AppConfigurationError(f"Config path is not a file: {path}")

    try:
        with open(path, "rb") as fh:
            raw = tomllib.load(fh)
    except (OSError, tomllib.TOMLDecodeError) as error:
        raise AppConfigurationError(f"Failed to parse config TOML: {error}") from error

    if not isinstance(raw, Mapping):
        raise AppConfigurationError("Root config TOML object must be a table.")

    return parse_app_config(raw, base_dir=path.parent, source_file=str(path))

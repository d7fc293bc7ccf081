"""Typed parser for config.toml sections into immutable app settings."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

from app_config_schema import (
    AppConfig,
    AppConfigurationError,
    AudioSettings,
    RoutineSettings,
    RuntimeSettings,
    UIServerSettings,
)

_ALLOWED_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def parse_app_config(
    raw: Mapping[str, Any],
    *,
    base_dir: Path,
    source_file: str,
) -> AppConfig:
    """Parse raw TOML mappings into strongly typed application settings."""
    routine = _parse_routine_settings(_section(raw, "routine"), base_dir=base_dir)
    audio = _parse_audio_settings(_section(raw, "audio"))
    ui_server = _parse_ui_server_settings(_section(raw, "ui_server"), base_dir=base_dir)
    runtime = _parse_runtime_settings(_section(raw, "runtime"))

    return AppConfig(
        routine=routine,
        audio=audio,
        ui_server=ui_server,
        runtime=runtime,
        source_file=source_file,
    )


def _parse_routine_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> RoutineSettings:
    routine_file = _as_str(section.get("file", ""), "routine.file")
    return RoutineSettings(
        file=_resolve_path(base_dir, routine_file),
        stretch_transition_seconds=_as_positive_int(
            section.get("stretch_transition_seconds", 10),
            "routine.stretch_transition_seconds",
        ),
        side_transition_seconds=_as_positive_int(
            section.get("side_transition_seconds", 5),
            "routine.side_transition_seconds",
        ),
        auto_start=_as_bool(section.get("auto_start", False), "routine.auto_start"),
        exit_on_complete=_as_bool(
            section.get("exit_on_complete", False),
            "routine.exit_on_complete",
        ),
    )


def _parse_audio_settings(section: Mapping[str, Any]) -> AudioSettings:
    return AudioSettings(
        enabled=_as_bool(section.get("enabled", True), "audio.enabled"),
        output_device=(
            _as_int(section.get("output_device"), "audio.output_device")
            if "output_device" in section
            else None
        ),
        sample_rate_hz=_as_positive_int(
            section.get("sample_rate_hz", 44100),
            "audio.sample_rate_hz",
        ),
        volume=_as_float(section.get("volume", 0.3), "audio.volume"),
        cue_duration_ms=_as_positive_int(
            section.get("cue_duration_ms", 200),
            "audio.cue_duration_ms",
        ),
        stretch_start_hz=_as_float(
            section.get("stretch_start_hz", 1000.0),
            "audio.stretch_start_hz",
        ),
        hold_start_hz=_as_float(section.get("hold_start_hz", 800.0), "audio.hold_start_hz"),
        side_change_hz=_as_float(
            section.get("side_change_hz", 600.0),
            "audio.side_change_hz",
        ),
        complete_hz=_as_float(section.get("complete_hz", 1000.0), "audio.complete_hz"),
        complete_repeat=_as_positive_int(
            section.get("complete_repeat", 3),
            "audio.complete_repeat",
        ),
        complete_spacing_ms=_as_int(
            section.get("complete_spacing_ms", 200),
            "audio.complete_spacing_ms",
        ),
    )


def _parse_ui_server_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> UIServerSettings:
    index_file = _as_str(section.get("index_file", ""), "ui_server.index_file")
    return UIServerSettings(
        enabled=_as_bool(section.get("enabled", True), "ui_server.enabled"),
        host=_as_str(section.get("host", "127.0.0.1"), "ui_server.host"),
        port=_as_int(section.get("port", 8765), "ui_server.port"),
        index_file=_resolve_path(base_dir, index_file) if index_file else "",
    )


def _parse_runtime_settings(section: Mapping[str, Any]) -> RuntimeSettings:
    interval = _as_float(
        section.get("progress_interval_seconds", 0.1),
        "runtime.progress_interval_seconds",
    )
    if interval <= 0:
        raise AppConfigurationError(
            "runtime.progress_interval_seconds must be greater than zero."
        )
    return RuntimeSettings(
        progress_interval_seconds=interval,
        log_level=_as_log_level(section.get("log_level", "INFO"), "runtime.log_level"),
    )


def resolve_log_level(name: str) -> int:
    return logging.getLevelName(name.upper())


def _section(root: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    raw = root.get(name, {})
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise AppConfigurationError(f"[{name}] must be a table.")
    return raw


def _as_str(value: Any, field: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    raise AppConfigurationError(f"{field} must be a string.")


def _as_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    raise AppConfigurationError(f"{field} must be a boolean.")


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be an integer.") from error
    raise AppConfigurationError(f"{field} must be an integer.")


def _as_positive_int(value: Any, field: str) -> int:
    number = _as_int(value, field)
    if number <= 0:
        raise AppConfigurationError(f"{field} must be greater than zero.")
    return number


def _as_float(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be a float.")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be a float.") from error
    raise AppConfigurationError(f"{field} must be a float.")


def _as_log_level(value: Any, field: str) -> str:
    name = _as_str(value, field).upper()
    if name not in _ALLOWED_LOG_LEVELS:
        allowed = ", ".join(sorted(_ALLOWED_LOG_LEVELS))
        raise AppConfigurationError(f"{field} must be one of: {allowed}.")
    return name


def _resolve_path(base_dir: Path, raw: str) -> str:
    if not raw:
        return ""
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return str(path)

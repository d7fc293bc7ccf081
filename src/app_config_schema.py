"""Dataclass schema objects used by runtime configuration loading."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

DEFAULT_CONFIG_FILE = "config.toml"


class AppConfigurationError(Exception):
    """Raised when application configuration fails."""


@dataclass(frozen=True)
class RoutineSettings:
    """Routine source and transition timings from `[routine]`."""
    file: str = ""
    stretch_transition_seconds: int = 10
    side_transition_seconds: int = 5
    auto_start: bool = False
    exit_on_complete: bool = False


@dataclass(frozen=True)
class AudioSettings:
    """Cue tone policy and playback device from `[audio]`."""
    enabled: bool = True
    output_device: Optional[int] = None
    sample_rate_hz: int = 44100
    volume: float = 0.3
    cue_duration_ms: int = 200
    stretch_start_hz: float = 1000.0
    hold_start_hz: float = 800.0
    side_change_hz: float = 600.0
    complete_hz: float = 1000.0
    complete_repeat: int = 3
    complete_spacing_ms: int = 200


@dataclass(frozen=True)
class UIServerSettings:
    """Built-in UI server settings from `[ui_server]`."""
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8765
    index_file: str = ""


@dataclass(frozen=True)
class RuntimeSettings:
    """Engine loop tuning from `[runtime]`."""
    progress_interval_seconds: float = 0.1
    log_level: str = "INFO"


@dataclass(frozen=True)
class AppConfig:
    """Complete typed runtime configuration loaded from `config.toml`."""
    routine: RoutineSettings = field(default_factory=RoutineSettings)
    audio: AudioSettings = field(default_factory=AudioSettings)
    ui_server: UIServerSettings = field(default_factory=UIServerSettings)
    runtime: RuntimeSettings = field(default_factory=RuntimeSettings)
    source_file: str = ""

"""Configuration model for cue tones and output device selection."""

from dataclasses import dataclass
from typing import Optional


class AudioConfigurationError(Exception):
    """Raised when audio cue configuration is invalid."""


@dataclass(frozen=True)
class CueTone:
    frequency_hz: float
    duration_ms: int


@dataclass(frozen=True)
class AudioConfig:
    """Resolved cue policy: tone per routine event plus playback settings."""
    enabled: bool = True
    output_device_index: Optional[int] = None
    sample_rate_hz: int = 44100
    volume: float = 0.3
    stretch_start: CueTone = CueTone(1000.0, 200)
    hold_start: CueTone = CueTone(800.0, 200)
    side_change: CueTone = CueTone(600.0, 200)
    complete: CueTone = CueTone(1000.0, 200)
    complete_repeat: int = 3
    complete_spacing_seconds: float = 0.2

    def __post_init__(self) -> None:
        if self.sample_rate_hz <= 0:
            raise AudioConfigurationError("audio.sample_rate_hz must be greater than zero")
        if not 0.0 < self.volume <= 1.0:
            raise AudioConfigurationError(
                f"audio.volume must be in (0, 1], got: {self.volume}"
            )
        for name in ("stretch_start", "hold_start", "side_change", "complete"):
            tone: CueTone = getattr(self, name)
            if tone.frequency_hz <= 0 or tone.duration_ms <= 0:
                raise AudioConfigurationError(f"audio.{name} tone must be positive")
        if self.complete_repeat <= 0:
            raise AudioConfigurationError("audio.complete_repeat must be greater than zero")
        if self.complete_spacing_seconds < 0:
            raise AudioConfigurationError("audio.complete_spacing_ms cannot be negative")

    @classmethod
    def from_settings(cls, settings) -> "AudioConfig":
        duration_ms = settings.cue_duration_ms
        return cls(
            enabled=bool(settings.enabled),
            output_device_index=settings.output_device,
            sample_rate_hz=settings.sample_rate_hz,
            volume=settings.volume,
            stretch_start=CueTone(settings.stretch_start_hz, duration_ms),
            hold_start=CueTone(settings.hold_start_hz, duration_ms),
            side_change=CueTone(settings.side_change_hz, duration_ms),
            complete=CueTone(settings.complete_hz, duration_ms),
            complete_repeat=settings.complete_repeat,
            complete_spacing_seconds=settings.complete_spacing_ms / 1000.0,
        )

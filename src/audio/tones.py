"""Numpy synthesis of short decaying sine tones used as routine cues."""

from __future__ import annotations

import numpy as np

from .errors import AudioError

DECAY_FLOOR = 0.01


def synthesize_tone(
    frequency_hz: float,
    duration_ms: int,
    *,
    sample_rate_hz: int = 44100,
    volume: float = 0.3,
) -> np.ndarray:
    """Return a mono float32 sine tone with an exponential fade to near silence."""
    if frequency_hz <= 0:
        raise AudioError(f"Tone frequency must be positive, got: {frequency_hz}")
    if duration_ms <= 0:
        raise AudioError(f"Tone duration must be positive, got: {duration_ms}")
    if sample_rate_hz <= 0:
        raise AudioError(f"Sample rate must be positive, got: {sample_rate_hz}")
    if not 0.0 < volume <= 1.0:
        raise AudioError(f"Volume must be in (0, 1], got: {volume}")

    frames = max(1, int(round(sample_rate_hz * duration_ms / 1000.0)))
    t = np.arange(frames, dtype=np.float64) / sample_rate_hz
    floor = min(DECAY_FLOOR, volume)
    envelope = np.geomspace(volume, floor, num=frames)
    wave = np.sin(2.0 * np.pi * frequency_hz * t) * envelope
    return wave.astype(np.float32)

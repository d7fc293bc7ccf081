"""Sounddevice-backed playback for synthesized cue tones."""

import logging
from typing import Optional

import numpy as np
import sounddevice as sd

from .errors import AudioError


class SoundDeviceAudioOutput:
    """Plays mono PCM arrays through a selected sounddevice output."""
    def __init__(
        self,
        output_device_index: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._output_device_index = output_device_index
        self._logger = logger or logging.getLogger(__name__)

    def play(self, wav: np.ndarray, sample_rate_hz: int, blocking: bool = False) -> None:
        if wav.ndim != 1:
            raise AudioError("Expected mono PCM array for playback")
        if len(wav) == 0:
            raise AudioError("Cannot play empty audio buffer")

        try:
            # Non-blocking play returns immediately; a new cue replaces any
            # tone still sounding.
            sd.play(
                wav,
                samplerate=sample_rate_hz,
                device=self._output_device_index,
                blocking=blocking,
            )
        except Exception as error:
            raise AudioError(f"Audio playback failed: {error}") from error
        self._logger.debug("Played %d frames at %d Hz", len(wav), sample_rate_hz)

    def stop(self) -> None:
        try:
            sd.stop()
        except Exception as error:
            raise AudioError(f"Audio stop failed: {error}") from error

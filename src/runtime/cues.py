"""Audio cue policy: which tone plays for which routine event."""

from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol

import numpy as np

from audio import AudioConfig, AudioError, CueTone, synthesize_tone
from routine import RoutineSnapshot, StretchDefinition
from routine.constants import PHASE_HOLD, PHASE_TRANSITION

CUE_STRETCH_START = "stretch_start"
CUE_HOLD_START = "hold_start"
CUE_SIDE_CHANGE = "side_change"
CUE_COMPLETE = "complete"

DeferFn = Callable[[float, Callable[[], None]], None]


class AudioOutputLike(Protocol):
    def play(self, wav: np.ndarray, sample_rate_hz: int, blocking: bool = False) -> None:
        ...

    def stop(self) -> None:
        ...


class CuePlayer:
    """Plays fire-and-forget tones for routine hook events.

    The completion pattern plays its first tone immediately and hands the
    remaining ones to `defer`, so the owner of the scheduler can cancel them.
    """

    def __init__(
        self,
        config: AudioConfig,
        output: Optional[AudioOutputLike],
        *,
        defer: DeferFn,
        logger: Optional[logging.Logger] = None,
    ):
        self._config = config
        self._output = output if config.enabled else None
        self._defer = defer
        self._logger = logger or logging.getLogger("cues")
        self._tones: dict[str, np.ndarray] = {}
        if self._output is not None:
            tones: dict[str, CueTone] = {
                CUE_STRETCH_START: config.stretch_start,
                CUE_HOLD_START: config.hold_start,
                CUE_SIDE_CHANGE: config.side_change,
                CUE_COMPLETE: config.complete,
            }
            self._tones = {
                name: synthesize_tone(
                    tone.frequency_hz,
                    tone.duration_ms,
                    sample_rate_hz=config.sample_rate_hz,
                    volume=config.volume,
                )
                for name, tone in tones.items()
            }

    @property
    def enabled(self) -> bool:
        return self._output is not None

    def tone_for(self, cue: str) -> Optional[np.ndarray]:
        return self._tones.get(cue)

    def on_phase_enter(
        self,
        phase: str,
        stretch: Optional[StretchDefinition],
        snapshot: RoutineSnapshot,
    ) -> None:
        del stretch, snapshot
        if phase == PHASE_TRANSITION:
            self.play(CUE_STRETCH_START)
        elif phase == PHASE_HOLD:
            self.play(CUE_HOLD_START)

    def on_side_change(self, snapshot: RoutineSnapshot) -> None:
        del snapshot
        self.play(CUE_SIDE_CHANGE)

    def on_routine_complete(self, snapshot: RoutineSnapshot) -> None:
        del snapshot
        if self._output is None:
            return
        self.play(CUE_COMPLETE)
        spacing = self._config.complete_spacing_seconds
        for repeat in range(1, self._config.complete_repeat):
            self._defer(repeat * spacing, self._play_complete)

    def play(self, cue: str) -> None:
        if self._output is None:
            return
        wav = self._tones.get(cue)
        if wav is None:
            self._logger.warning("Unknown cue: %s", cue)
            return
        try:
            self._output.play(wav, self._config.sample_rate_hz, blocking=False)
        except AudioError as error:
            self._logger.error("Cue playback failed (%s): %s", cue, error)

    def silence(self) -> None:
        """Cut off a tone that is still sounding."""
        if self._output is None:
            return
        try:
            self._output.stop()
        except AudioError as error:
            self._logger.error("Stopping cue playback failed: %s", error)

    def _play_complete(self) -> None:
        self.play(CUE_COMPLETE)

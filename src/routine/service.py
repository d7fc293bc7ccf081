"""Thread-safe in-memory stretch routine state machine."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Literal, Optional

from .constants import (
    ACTIVE_PHASES,
    PHASE_HOLD,
    PHASE_IDLE,
    PHASE_SIDE_TRANSITION,
    PHASE_TRANSITION,
)
from .definitions import RoutineTimings, StretchDefinition, validate_unique_ids
from .errors import EmptyRoutineError

RoutinePhase = Literal["idle", "transition", "side-transition", "hold"]


@dataclass(frozen=True)
class RoutineSnapshot:
    """Immutable routine snapshot exposed to runtime and UI publishers."""
    phase: RoutinePhase
    stretch: Optional[StretchDefinition]
    stretch_index: int
    stretch_count: int
    side: Optional[str]
    side_index: int
    repetition: int
    repetitions: int
    time_remaining: int
    total_time: int
    total_time_remaining: int
    elapsed_fraction: float
    paused: bool
    completed: bool

    @property
    def is_active(self) -> bool:
        return self.phase in ACTIVE_PHASES


@dataclass(frozen=True)
class RoutineTick:
    """Tick payload returned after the runner advanced by one second."""
    snapshot: RoutineSnapshot
    completed: bool = False


@dataclass(frozen=True)
class RoutineHooks:
    """Optional callbacks fired at phase transitions, outside the runner lock."""
    on_phase_enter: Optional[
        Callable[[str, Optional[StretchDefinition], RoutineSnapshot], None]
    ] = None
    on_side_change: Optional[Callable[[RoutineSnapshot], None]] = None
    on_stretch_complete: Optional[
        Callable[[StretchDefinition, RoutineSnapshot], None]
    ] = None
    on_routine_complete: Optional[Callable[[RoutineSnapshot], None]] = None


_PendingHook = tuple[Callable[..., None], tuple[Any, ...]]


class RoutineRunner:
    """Walks a fixed routine through transition, side-transition and hold phases.

    The runner is driven by `advance_one_second()`; it never schedules time on
    its own. Wall-clock bookkeeping (`phase_started_at`, `paused_at`) is only
    used for progress interpolation and never changes the phase.
    """

    def __init__(
        self,
        stretches: Iterable[StretchDefinition],
        *,
        timings: Optional[RoutineTimings] = None,
        hooks: Optional[RoutineHooks] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._routine: tuple[StretchDefinition, ...] = tuple(stretches)
        validate_unique_ids(self._routine)
        self._timings = timings or RoutineTimings()
        self._hooks = hooks or RoutineHooks()
        self._logger = logger or logging.getLogger("routine")
        self._lock = threading.Lock()
        self._pending_hooks: list[_PendingHook] = []

        self._phase: RoutinePhase = PHASE_IDLE
        self._current_index = 0
        self._side_index = 0
        self._repetition = 0
        self._time_remaining = 0
        self._total_time = 0
        self._phase_started_at = 0.0
        self._paused_at: Optional[float] = None
        self._paused = False
        self._completed = False

    @property
    def routine(self) -> tuple[StretchDefinition, ...]:
        return self._routine

    @property
    def timings(self) -> RoutineTimings:
        return self._timings

    @property
    def phase_started_at(self) -> float:
        with self._lock:
            return self._phase_started_at

    def current_stretch(self) -> Optional[StretchDefinition]:
        with self._lock:
            return self._current_stretch_locked()

    def snapshot(self) -> RoutineSnapshot:
        with self._lock:
            return self._snapshot_locked(time.monotonic())

    def total_time_remaining(self) -> int:
        with self._lock:
            return self._total_time_remaining_locked()

    def elapsed_fraction(self, now: Optional[float] = None) -> float:
        """Fraction of the current phase elapsed, for progress display only."""
        with self._lock:
            return self._elapsed_fraction_locked(time.monotonic() if now is None else now)

    def start(self) -> RoutineSnapshot:
        if not self._routine:
            raise EmptyRoutineError("No stretches in routine")

        with self._lock:
            now = time.monotonic()
            self._current_index = 0
            self._side_index = 0
            self._repetition = 0
            self._paused = False
            self._paused_at = None
            self._completed = False
            first = self._routine[0]
            self._enter_phase_locked(PHASE_TRANSITION, self._timings.transition_for(first), now)
            self._logger.info(
                "Routine started: stretches=%d total=%ss",
                len(self._routine),
                self._total_time_remaining_locked(),
            )
            self._queue_hook_locked(
                self._hooks.on_phase_enter,
                PHASE_TRANSITION,
                first,
                self._snapshot_locked(now),
            )
            snapshot = self._snapshot_locked(now)
            pending = self._drain_hooks_locked()

        self._dispatch(pending)
        return snapshot

    def stop(self) -> bool:
        """Reset to idle. Returns True when a routine was actually running."""
        with self._lock:
            was_active = self._phase != PHASE_IDLE
            self._reset_locked()
            if was_active:
                self._logger.info("Routine stopped")
            return was_active

    def pause(self) -> bool:
        with self._lock:
            if self._phase == PHASE_IDLE or self._paused:
                return False
            self._paused_at = time.monotonic()
            self._paused = True
            self._logger.info(
                "Routine paused: phase=%s remaining=%ss",
                self._phase,
                self._time_remaining,
            )
            return True

    def resume(self) -> bool:
        with self._lock:
            if not self._paused:
                return False
            now = time.monotonic()
            paused_at = self._paused_at if self._paused_at is not None else now
            self._phase_started_at += max(0.0, now - paused_at)
            self._paused_at = None
            self._paused = False
            self._logger.info("Routine resumed: phase=%s", self._phase)
            return True

    def advance_one_second(self) -> Optional[RoutineTick]:
        """Count down one second; expire into the next phase at most once."""
        with self._lock:
            if self._phase == PHASE_IDLE or self._paused:
                return None

            now = time.monotonic()
            self._time_remaining -= 1
            completed = False
            if self._time_remaining <= 0:
                completed = self._advance_phase_locked(now)
            tick = RoutineTick(snapshot=self._snapshot_locked(now), completed=completed)
            pending = self._drain_hooks_locked()

        self._dispatch(pending)
        return tick

    def _advance_phase_locked(self, now: float) -> bool:
        stretch = self._current_stretch_locked()
        if stretch is None:
            self._reset_locked()
            return False

        if self._phase in (PHASE_TRANSITION, PHASE_SIDE_TRANSITION):
            if self._phase == PHASE_TRANSITION:
                self._side_index = 0
                self._repetition = 0
            self._enter_phase_locked(PHASE_HOLD, stretch.duration_seconds, now)
            self._logger.debug(
                "Hold: stretch=%s side=%s repetition=%d/%d",
                stretch.id,
                self._side_label_locked(stretch),
                self._repetition + 1,
                stretch.repetitions,
            )
            self._queue_hook_locked(
                self._hooks.on_phase_enter,
                PHASE_HOLD,
                stretch,
                self._snapshot_locked(now),
            )
            return False

        side_names = stretch.resolved_side_names
        if side_names and self._side_index < len(side_names) - 1:
            self._side_index += 1
            return self._enter_side_transition_locked(stretch, now)

        if self._repetition < stretch.repetitions - 1:
            self._repetition += 1
            self._side_index = 0
            return self._enter_side_transition_locked(stretch, now)

        return self._next_stretch_locked(stretch, now)

    def _enter_side_transition_locked(self, stretch: StretchDefinition, now: float) -> bool:
        self._enter_phase_locked(
            PHASE_SIDE_TRANSITION,
            self._timings.side_transition_seconds,
            now,
        )
        snapshot = self._snapshot_locked(now)
        self._queue_hook_locked(self._hooks.on_side_change, snapshot)
        self._queue_hook_locked(
            self._hooks.on_phase_enter,
            PHASE_SIDE_TRANSITION,
            stretch,
            snapshot,
        )
        return False

    def _next_stretch_locked(self, finished: StretchDefinition, now: float) -> bool:
        self._queue_hook_locked(
            self._hooks.on_stretch_complete,
            finished,
            self._snapshot_locked(now),
        )
        self._current_index += 1
        self._side_index = 0
        self._repetition = 0

        stretch = self._current_stretch_locked()
        if stretch is not None:
            self._enter_phase_locked(
                PHASE_TRANSITION,
                self._timings.transition_for(stretch),
                now,
            )
            self._logger.info(
                "Next stretch: %s (%d/%d)",
                stretch.name,
                self._current_index + 1,
                len(self._routine),
            )
            self._queue_hook_locked(
                self._hooks.on_phase_enter,
                PHASE_TRANSITION,
                stretch,
                self._snapshot_locked(now),
            )
            return False

        self._phase = PHASE_IDLE
        self._time_remaining = 0
        self._total_time = 0
        self._paused = False
        self._paused_at = None
        self._completed = True
        self._logger.info("Routine completed: stretches=%d", len(self._routine))
        self._queue_hook_locked(self._hooks.on_routine_complete, self._snapshot_locked(now))
        return True

    def _enter_phase_locked(self, phase: RoutinePhase, seconds: int, now: float) -> None:
        self._phase = phase
        self._total_time = seconds
        self._time_remaining = seconds
        self._phase_started_at = now

    def _reset_locked(self) -> None:
        self._phase = PHASE_IDLE
        self._current_index = 0
        self._side_index = 0
        self._repetition = 0
        self._time_remaining = 0
        self._total_time = 0
        self._paused = False
        self._paused_at = None
        self._completed = False

    def _current_stretch_locked(self) -> Optional[StretchDefinition]:
        if 0 <= self._current_index < len(self._routine):
            return self._routine[self._current_index]
        return None

    def _side_label_locked(self, stretch: StretchDefinition) -> Optional[str]:
        if self._phase not in (PHASE_HOLD, PHASE_SIDE_TRANSITION):
            return None
        side_names = stretch.resolved_side_names
        if not side_names:
            return None
        return side_names[self._side_index]

    def _snapshot_locked(self, now: float) -> RoutineSnapshot:
        stretch = self._current_stretch_locked()
        return RoutineSnapshot(
            phase=self._phase,
            stretch=stretch,
            stretch_index=self._current_index,
            stretch_count=len(self._routine),
            side=self._side_label_locked(stretch) if stretch is not None else None,
            side_index=self._side_index,
            repetition=self._repetition,
            repetitions=stretch.repetitions if stretch is not None else 0,
            time_remaining=self._time_remaining,
            total_time=self._total_time,
            total_time_remaining=self._total_time_remaining_locked(),
            elapsed_fraction=self._elapsed_fraction_locked(now),
            paused=self._paused,
            completed=self._completed,
        )

    def _elapsed_fraction_locked(self, now: float) -> float:
        if self._phase == PHASE_IDLE or self._total_time <= 0:
            return 0.0
        reference = self._paused_at if self._paused and self._paused_at is not None else now
        elapsed = reference - self._phase_started_at
        return max(0.0, min(1.0, elapsed / self._total_time))

    def _total_time_remaining_locked(self) -> int:
        if self._phase == PHASE_IDLE:
            return 0

        total = self._time_remaining
        side_transition = self._timings.side_transition_seconds
        stretch = self._current_stretch_locked()
        if stretch is not None:
            holds = stretch.hold_count
            position = self._side_index + self._repetition * stretch.side_count
            if self._phase == PHASE_TRANSITION:
                remaining_holds = holds
                remaining_side_transitions = holds - 1
            elif self._phase == PHASE_SIDE_TRANSITION:
                # The hold this side-transition leads into has not started yet.
                remaining_holds = holds - position
                remaining_side_transitions = remaining_holds - 1
            else:
                remaining_holds = holds - position - 1
                remaining_side_transitions = remaining_holds
            total += remaining_holds * stretch.duration_seconds
            total += max(0, remaining_side_transitions) * side_transition

        for later in self._routine[self._current_index + 1 :]:
            total += self._timings.transition_for(later)
            total += later.hold_count * later.duration_seconds
            total += (later.hold_count - 1) * side_transition
        return total

    def _queue_hook_locked(self, callback: Optional[Callable[..., None]], *args: Any) -> None:
        if callback is not None:
            self._pending_hooks.append((callback, args))

    def _drain_hooks_locked(self) -> list[_PendingHook]:
        pending = self._pending_hooks
        self._pending_hooks = []
        return pending

    def _dispatch(self, pending: list[_PendingHook]) -> None:
        for callback, args in pending:
            try:
                callback(*args)
            except Exception as error:
                self._logger.error(
                    "Routine hook %s failed: %s",
                    getattr(callback, "__name__", callback),
                    error,
                    exc_info=True,
                )

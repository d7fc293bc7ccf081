"""Runtime orchestration loop for control commands, ticks, and cue timers."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from queue import Empty, Queue
from typing import Iterable, Optional

from audio import AudioConfig
from contracts.ui_protocol import (
    COMMAND_PAUSE,
    COMMAND_RESUME,
    COMMAND_SHUTDOWN,
    COMMAND_START,
    COMMAND_STOP,
    COMMAND_TOGGLE_PAUSE,
    STATE_IDLE,
    STATE_PAUSED,
    STATE_RUNNING,
)
from routine import (
    EmptyRoutineError,
    RoutineHooks,
    RoutineRunner,
    RoutineSnapshot,
    RoutineTimings,
    StretchDefinition,
    build_view,
)
from routine.constants import (
    EVENT_PAUSED,
    EVENT_PHASE_ENTER,
    EVENT_RESUMED,
    EVENT_SIDE_CHANGE,
    EVENT_STARTED,
    EVENT_STOPPED,
    EVENT_STRETCH_COMPLETE,
    PHASE_SIDE_TRANSITION,
)

from .cues import AudioOutputLike, CuePlayer
from .scheduler import DEFAULT_PROGRESS_INTERVAL_SECONDS, TickScheduler
from .ticks import TickDependencies, TickProcessor
from .ui import RuntimeUIPublisher, UIServerLike


@dataclass(frozen=True)
class EngineOptions:
    """Loop behavior switches derived from `[routine]` and `[runtime]`."""
    auto_start: bool = False
    exit_on_complete: bool = False
    progress_interval_seconds: float = DEFAULT_PROGRESS_INTERVAL_SECONDS
    idle_poll_seconds: float = 0.5


class RuntimeEngine:
    """Single owner of the routine runner.

    Commands from the UI server thread and signal handlers arrive through a
    queue; ticks, progress redraws, and deferred cues run on the loop thread,
    so every runner mutation happens in one place.
    """

    def __init__(
        self,
        stretches: Iterable[StretchDefinition],
        *,
        timings: Optional[RoutineTimings] = None,
        ui_server: Optional[UIServerLike] = None,
        audio_output: Optional[AudioOutputLike] = None,
        audio_config: Optional[AudioConfig] = None,
        options: Optional[EngineOptions] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._options = options or EngineOptions()
        self._logger = logger or logging.getLogger("runtime")
        self._commands: Queue[str] = Queue()
        self._completed = False

        self._scheduler = TickScheduler(
            progress_interval_seconds=self._options.progress_interval_seconds,
        )
        self._ui = RuntimeUIPublisher(ui_server)
        self._cues = CuePlayer(
            audio_config or AudioConfig(enabled=False),
            audio_output,
            defer=self._defer,
            logger=logging.getLogger("cues"),
        )
        self._runner = RoutineRunner(
            stretches,
            timings=timings,
            hooks=RoutineHooks(
                on_phase_enter=self._on_phase_enter,
                on_side_change=self._on_side_change,
                on_stretch_complete=self._on_stretch_complete,
                on_routine_complete=self._cues.on_routine_complete,
            ),
            logger=logging.getLogger("routine"),
        )
        self._tick_processor = TickProcessor(
            TickDependencies(
                logger=self._logger,
                ui=self._ui,
                routine=self._runner.routine,
                on_routine_complete=self._on_routine_finished,
            )
        )

    @property
    def runner(self) -> RoutineRunner:
        return self._runner

    @property
    def scheduler(self) -> TickScheduler:
        return self._scheduler

    def submit(self, command: str) -> None:
        """Queue a command; safe to call from any thread."""
        self._commands.put(command)

    def run(self) -> int:
        self._publish_idle()
        if self._options.auto_start:
            self.submit(COMMAND_START)

        try:
            while True:
                if not self.step():
                    return 0
                if self._should_exit():
                    self._logger.info("Routine complete, exiting.")
                    return 0

                timeout = self._scheduler.seconds_until_next(time.monotonic())
                if timeout is None:
                    timeout = self._options.idle_poll_seconds
                try:
                    command = self._commands.get(timeout=timeout)
                except Empty:
                    continue
                if not self._handle_command(command):
                    return 0
        except KeyboardInterrupt:
            self._logger.info("Shutdown requested by keyboard interrupt.")
            return 0
        finally:
            self._shutdown()

    def step(self, now: Optional[float] = None) -> bool:
        """Drain queued commands, then run every job due at `now`.

        Returns False once a shutdown command was processed.
        """
        while True:
            try:
                command = self._commands.get_nowait()
            except Empty:
                break
            if not self._handle_command(command):
                return False

        due = self._scheduler.collect_due(time.monotonic() if now is None else now)
        for _ in range(due.ticks):
            tick = self._runner.advance_one_second()
            if tick is not None:
                self._tick_processor.handle_routine_tick(tick)
        if due.progress:
            snapshot = self._runner.snapshot()
            if snapshot.is_active and not snapshot.paused:
                self._ui.publish_progress(self._runner.elapsed_fraction())
        for callback in due.deferred:
            callback()
        return True

    def _handle_command(self, command: str) -> bool:
        if command == COMMAND_SHUTDOWN:
            self._logger.info("Shutdown command received")
            return False

        if command == COMMAND_START:
            self._start()
        elif command == COMMAND_PAUSE:
            self._pause()
        elif command == COMMAND_RESUME:
            self._resume()
        elif command == COMMAND_TOGGLE_PAUSE:
            if self._runner.snapshot().paused:
                self._resume()
            else:
                self._pause()
        elif command == COMMAND_STOP:
            self._stop()
        else:
            self._logger.warning("Ignoring unknown command: %s", command)
        return True

    def _start(self) -> None:
        self._scheduler.cancel_all()
        self._completed = False
        try:
            snapshot = self._runner.start()
        except EmptyRoutineError as error:
            self._ui.publish_error(f"Cannot start routine: {error}")
            return
        self._scheduler.arm(time.monotonic())
        self._ui.publish_state(STATE_RUNNING, message="Routine started")
        self._publish_update(snapshot, EVENT_STARTED)

    def _pause(self) -> None:
        if self._runner.pause():
            self._ui.publish_state(STATE_PAUSED, message="Paused")
            self._publish_update(self._runner.snapshot(), EVENT_PAUSED)

    def _resume(self) -> None:
        if self._runner.resume():
            self._ui.publish_state(STATE_RUNNING, message="Resumed")
            self._publish_update(self._runner.snapshot(), EVENT_RESUMED)

    def _stop(self) -> None:
        self._runner.stop()
        self._scheduler.cancel_all()
        self._cues.silence()
        self._completed = False
        self._publish_idle(event=EVENT_STOPPED)

    def _defer(self, delay_seconds: float, callback) -> None:
        self._scheduler.defer(delay_seconds, callback, now=time.monotonic())

    def _on_phase_enter(self, phase, stretch, snapshot: RoutineSnapshot) -> None:
        self._cues.on_phase_enter(phase, stretch, snapshot)
        event = EVENT_SIDE_CHANGE if phase == PHASE_SIDE_TRANSITION else EVENT_PHASE_ENTER
        self._publish_update(snapshot, event)

    def _on_side_change(self, snapshot: RoutineSnapshot) -> None:
        self._cues.on_side_change(snapshot)
        self._logger.debug(
            "Side change: side=%s repetition=%d/%d",
            snapshot.side,
            snapshot.repetition + 1,
            snapshot.repetitions,
        )

    def _on_stretch_complete(self, stretch: StretchDefinition, snapshot: RoutineSnapshot) -> None:
        self._logger.info("Finished stretch: %s", stretch.name)
        self._publish_update(snapshot, EVENT_STRETCH_COMPLETE)

    def _on_routine_finished(self) -> None:
        # Completion cues stay scheduled; only the periodic sources stop.
        self._scheduler.disarm()
        self._completed = True

    def _should_exit(self) -> bool:
        return (
            self._options.exit_on_complete
            and self._completed
            and self._scheduler.pending_deferred == 0
        )

    def _publish_update(self, snapshot: RoutineSnapshot, event: str) -> None:
        self._ui.publish_routine_update(
            snapshot,
            build_view(snapshot, self._runner.routine),
            event=event,
        )

    def _publish_idle(self, event: str = EVENT_STOPPED) -> None:
        self._ui.publish_state(STATE_IDLE, message="Ready")
        self._publish_update(self._runner.snapshot(), event)

    def _shutdown(self) -> None:
        self._runner.stop()
        self._scheduler.cancel_all()
        self._cues.silence()
        self._logger.info("Runtime engine stopped")

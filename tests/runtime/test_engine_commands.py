import unittest
from unittest.mock import patch

from audio import AudioConfig, CueTone
from contracts.ui_protocol import (
    COMMAND_PAUSE,
    COMMAND_SHUTDOWN,
    COMMAND_START,
    COMMAND_STOP,
    COMMAND_TOGGLE_PAUSE,
)
from routine import RoutineTimings, StretchDefinition
from runtime import EngineOptions, RuntimeEngine

# Completion tones are shorter than every other cue so they can be told apart.
_AUDIO = AudioConfig(
    sample_rate_hz=8000,
    stretch_start=CueTone(1000.0, 100),
    hold_start=CueTone(800.0, 100),
    side_change=CueTone(600.0, 100),
    complete=CueTone(1000.0, 50),
)
_COMPLETE_FRAMES = 400


class _Clock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class _UIServerStub:
    def __init__(self):
        self.events: list[tuple[str, dict[str, object]]] = []
        self.states: list[tuple[str, str | None]] = []

    def publish(self, event_type: str, **payload):
        self.events.append((event_type, payload))

    def publish_state(self, state: str, *, message=None, **payload):
        self.states.append((state, message))

    def routine_events(self) -> list[str]:
        return [payload["event"] for kind, payload in self.events if kind == "routine"]


class _OutputStub:
    def __init__(self):
        self.lengths: list[int] = []
        self.stops = 0

    def play(self, wav, sample_rate_hz: int, blocking: bool = False) -> None:
        self.lengths.append(len(wav))

    def stop(self) -> None:
        self.stops += 1

    def completion_tones(self) -> int:
        return sum(1 for length in self.lengths if length == _COMPLETE_FRAMES)


class RuntimeEngineTests(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = _Clock()
        # The runner and the engine share the `time` module.
        patcher = patch("runtime.loop.time.monotonic", new=self.clock)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.ui = _UIServerStub()
        self.output = _OutputStub()

    def _engine(self, stretches=None, **options) -> RuntimeEngine:
        if stretches is None:
            stretches = [StretchDefinition(id="plank", name="Plank", duration_seconds=2)]
        return RuntimeEngine(
            stretches,
            timings=RoutineTimings(stretch_transition_seconds=1, side_transition_seconds=1),
            ui_server=self.ui,
            audio_output=self.output,
            audio_config=_AUDIO,
            options=EngineOptions(**options),
        )

    def _step_at(self, engine: RuntimeEngine, now: float) -> bool:
        self.clock.now = now
        return engine.step()

    def test_start_arms_ticks_and_plays_stretch_cue(self) -> None:
        engine = self._engine()
        engine.submit(COMMAND_START)
        self._step_at(engine, 0.0)

        self.assertTrue(engine.scheduler.armed)
        self.assertEqual("transition", engine.runner.snapshot().phase)
        self.assertIn(("running", "Routine started"), self.ui.states)
        self.assertEqual(["phase_enter", "started"], self.ui.routine_events())
        self.assertEqual([800], self.output.lengths)

    def test_ticks_drive_the_runner_once_per_second(self) -> None:
        engine = self._engine()
        engine.submit(COMMAND_START)
        self._step_at(engine, 0.0)

        self._step_at(engine, 0.5)
        self.assertEqual(1, engine.runner.snapshot().time_remaining)
        self._step_at(engine, 1.0)
        snapshot = engine.runner.snapshot()
        self.assertEqual("hold", snapshot.phase)
        self.assertEqual(2, snapshot.time_remaining)

    def test_progress_is_published_while_running(self) -> None:
        engine = self._engine()
        engine.submit(COMMAND_START)
        self._step_at(engine, 0.0)

        self._step_at(engine, 0.5)

        progress = [payload for kind, payload in self.ui.events if kind == "progress"]
        self.assertEqual([{"progress_percent": 50.0}], progress)

    def test_pause_freezes_countdown_and_progress(self) -> None:
        engine = self._engine()
        engine.submit(COMMAND_START)
        self._step_at(engine, 0.0)
        engine.submit(COMMAND_PAUSE)
        self._step_at(engine, 0.2)
        events_before = len(self.ui.events)

        self._step_at(engine, 5.0)

        snapshot = engine.runner.snapshot()
        self.assertTrue(snapshot.paused)
        self.assertEqual(1, snapshot.time_remaining)
        self.assertEqual(events_before, len(self.ui.events))
        self.assertIn(("paused", "Paused"), self.ui.states)

    def test_toggle_pause_flips_between_paused_and_running(self) -> None:
        engine = self._engine()
        engine.submit(COMMAND_START)
        self._step_at(engine, 0.0)

        engine.submit(COMMAND_TOGGLE_PAUSE)
        self._step_at(engine, 0.1)
        self.assertTrue(engine.runner.snapshot().paused)

        engine.submit(COMMAND_TOGGLE_PAUSE)
        self._step_at(engine, 0.2)
        self.assertFalse(engine.runner.snapshot().paused)
        self.assertEqual("running", self.ui.states[-1][0])

    def test_completion_plays_three_completion_tones(self) -> None:
        engine = self._engine()
        engine.submit(COMMAND_START)
        self._step_at(engine, 0.0)
        for now in (1.0, 2.0, 3.0):
            self._step_at(engine, now)

        self.assertTrue(engine.runner.snapshot().completed)
        self.assertFalse(engine.scheduler.armed)
        self.assertEqual(1, self.output.completion_tones())
        self.assertEqual(2, engine.scheduler.pending_deferred)
        self.assertIn(("completed", "Routine Complete!"), self.ui.states)

        self._step_at(engine, 3.1)
        self.assertEqual(1, self.output.completion_tones())
        self._step_at(engine, 3.5)
        self.assertEqual(3, self.output.completion_tones())
        self.assertEqual(0, engine.scheduler.pending_deferred)

    def test_stop_cancels_pending_completion_tones(self) -> None:
        engine = self._engine()
        engine.submit(COMMAND_START)
        self._step_at(engine, 0.0)
        for now in (1.0, 2.0, 3.0):
            self._step_at(engine, now)

        engine.submit(COMMAND_STOP)
        self._step_at(engine, 3.05)
        self._step_at(engine, 10.0)

        self.assertEqual(1, self.output.completion_tones())
        self.assertEqual(0, engine.scheduler.pending_deferred)
        self.assertEqual(1, self.output.stops)
        self.assertEqual("idle", self.ui.states[-1][0])

    def test_stop_mid_routine_returns_to_idle(self) -> None:
        engine = self._engine()
        engine.submit(COMMAND_START)
        self._step_at(engine, 0.0)
        engine.submit(COMMAND_STOP)
        self._step_at(engine, 0.5)

        snapshot = engine.runner.snapshot()
        self.assertEqual("idle", snapshot.phase)
        self.assertFalse(snapshot.completed)
        self.assertFalse(engine.scheduler.armed)
        self.assertEqual("stopped", self.ui.routine_events()[-1])

    def test_side_change_is_published_as_its_own_event(self) -> None:
        engine = self._engine(
            [
                StretchDefinition(
                    id="lunge",
                    name="Lunge",
                    duration_seconds=1,
                    sides="left-right",
                )
            ]
        )
        engine.submit(COMMAND_START)
        self._step_at(engine, 0.0)
        self._step_at(engine, 1.0)
        self._step_at(engine, 2.0)

        self.assertIn("side_change", self.ui.routine_events())
        self.assertEqual("Right", engine.runner.snapshot().side)

    def test_starting_empty_routine_publishes_error(self) -> None:
        engine = self._engine([])
        engine.submit(COMMAND_START)
        self._step_at(engine, 0.0)

        self.assertFalse(engine.scheduler.armed)
        self.assertEqual("error", self.ui.states[-1][0])
        errors = [payload for kind, payload in self.ui.events if kind == "error"]
        self.assertEqual(1, len(errors))
        self.assertIn("No stretches", errors[0]["message"])

    def test_unknown_command_is_ignored(self) -> None:
        engine = self._engine()
        engine.submit("rewind")

        with self.assertLogs("runtime", level="WARNING"):
            self.assertTrue(self._step_at(engine, 0.0))

    def test_shutdown_command_ends_step_and_run(self) -> None:
        engine = self._engine()
        engine.submit(COMMAND_SHUTDOWN)
        self.assertFalse(self._step_at(engine, 0.0))

        engine = self._engine()
        engine.submit(COMMAND_SHUTDOWN)
        self.assertEqual(0, self.output.stops)
        self.assertEqual(0, engine.run())
        self.assertEqual(("idle", "Ready"), self.ui.states[0])
        self.assertEqual(1, self.output.stops)


if __name__ == "__main__":
    unittest.main()

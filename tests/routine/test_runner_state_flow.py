import logging
import unittest
from unittest.mock import patch

from routine import (
    EmptyRoutineError,
    InvalidDefinitionError,
    RoutineHooks,
    RoutineRunner,
    RoutineTimings,
    StretchDefinition,
)


class _Clock:
    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class _HookRecorder:
    def __init__(self):
        self.trace: list[tuple] = []

    def hooks(self) -> RoutineHooks:
        return RoutineHooks(
            on_phase_enter=lambda phase, stretch, snap: self.trace.append(
                ("enter", phase, stretch.id if stretch else None, snap.side)
            ),
            on_side_change=lambda snap: self.trace.append(("side", snap.side, snap.repetition)),
            on_stretch_complete=lambda stretch, snap: self.trace.append(("done", stretch.id)),
            on_routine_complete=lambda snap: self.trace.append(("complete",)),
        )

    def phases(self, phase: str) -> list[tuple]:
        return [item for item in self.trace if item[0] == "enter" and item[1] == phase]


def _run_to_completion(runner: RoutineRunner, limit: int = 10_000) -> int:
    for count in range(1, limit + 1):
        tick = runner.advance_one_second()
        if tick is not None and tick.completed:
            return count
    raise AssertionError("routine did not complete")


class RoutineRunnerStateFlowTests(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = _Clock()
        patcher = patch("routine.service.time.monotonic", new=self.clock)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_single_stretch_scenario_walks_transition_hold_and_completes(self) -> None:
        runner = RoutineRunner([StretchDefinition(id="fold", name="Fold", duration_seconds=60)])
        runner.start()

        tick = runner.advance_one_second()
        self.assertIsNotNone(tick)
        self.assertEqual("transition", tick.snapshot.phase)
        self.assertEqual(9, tick.snapshot.time_remaining)

        for _ in range(9):
            tick = runner.advance_one_second()
        self.assertEqual("hold", tick.snapshot.phase)
        self.assertEqual(60, tick.snapshot.time_remaining)
        self.assertEqual(60, tick.snapshot.total_time)

        for _ in range(59):
            tick = runner.advance_one_second()
            self.assertFalse(tick.completed)
        tick = runner.advance_one_second()

        self.assertTrue(tick.completed)
        self.assertEqual("idle", tick.snapshot.phase)
        self.assertTrue(tick.snapshot.completed)
        self.assertIsNone(tick.snapshot.stretch)
        self.assertEqual(1, tick.snapshot.stretch_index)
        self.assertIsNone(runner.advance_one_second())

    def test_sideless_single_repetition_has_one_hold_and_no_side_transition(self) -> None:
        recorder = _HookRecorder()
        runner = RoutineRunner(
            [StretchDefinition(id="sphinx", name="Sphinx", duration_seconds=5)],
            hooks=recorder.hooks(),
        )
        runner.start()
        _run_to_completion(runner)

        self.assertEqual(1, len(recorder.phases("hold")))
        self.assertEqual([], recorder.phases("side-transition"))
        self.assertEqual([("done", "sphinx"), ("complete",)], recorder.trace[-2:])

    def test_custom_sides_with_repetitions_alternate_holds(self) -> None:
        recorder = _HookRecorder()
        runner = RoutineRunner(
            [
                StretchDefinition(
                    id="cat-cow",
                    name="Cat/Cow",
                    duration_seconds=30,
                    sides="custom",
                    side_names=("Cat", "Cow"),
                    repetitions=2,
                )
            ],
            hooks=recorder.hooks(),
        )
        runner.start()
        _run_to_completion(runner)

        holds = recorder.phases("hold")
        self.assertEqual(["Cat", "Cow", "Cat", "Cow"], [item[3] for item in holds])
        self.assertEqual(3, len(recorder.phases("side-transition")))
        side_changes = [item for item in recorder.trace if item[0] == "side"]
        self.assertEqual([("side", "Cow", 0), ("side", "Cat", 1), ("side", "Cow", 1)], side_changes)

    def test_hold_and_side_transition_counts_follow_sides_times_repetitions(self) -> None:
        recorder = _HookRecorder()
        runner = RoutineRunner(
            [
                StretchDefinition(
                    id="lunge",
                    name="Lunge",
                    duration_seconds=2,
                    sides="left-right",
                    repetitions=3,
                ),
                StretchDefinition(
                    id="reach",
                    name="Reach",
                    duration_seconds=2,
                    sides="front-back",
                ),
            ],
            hooks=recorder.hooks(),
        )
        runner.start()
        _run_to_completion(runner)

        lunge_holds = [item for item in recorder.phases("hold") if item[2] == "lunge"]
        reach_holds = [item for item in recorder.phases("hold") if item[2] == "reach"]
        self.assertEqual(6, len(lunge_holds))
        self.assertEqual(["Front", "Back"], [item[3] for item in reach_holds])
        side_transitions = recorder.phases("side-transition")
        self.assertEqual(5, len([item for item in side_transitions if item[2] == "lunge"]))
        self.assertEqual(1, len([item for item in side_transitions if item[2] == "reach"]))
        self.assertEqual(2, len(recorder.phases("transition")))

    def test_side_transition_uses_global_side_duration(self) -> None:
        runner = RoutineRunner(
            [StretchDefinition(id="twist", name="Twist", duration_seconds=3, sides="left-right")],
            timings=RoutineTimings(stretch_transition_seconds=2, side_transition_seconds=4),
        )
        runner.start()
        for _ in range(2 + 3):
            tick = runner.advance_one_second()

        self.assertEqual("side-transition", tick.snapshot.phase)
        self.assertEqual(4, tick.snapshot.time_remaining)
        self.assertEqual("Right", tick.snapshot.side)

    def test_per_stretch_transition_overrides_default(self) -> None:
        runner = RoutineRunner(
            [
                StretchDefinition(id="a", name="A", duration_seconds=1),
                StretchDefinition(id="b", name="B", duration_seconds=1, transition_seconds=3),
            ]
        )
        snapshot = runner.start()
        self.assertEqual(10, snapshot.time_remaining)

        for _ in range(11):
            tick = runner.advance_one_second()
        self.assertEqual("transition", tick.snapshot.phase)
        self.assertEqual("b", tick.snapshot.stretch.id)
        self.assertEqual(3, tick.snapshot.time_remaining)

    def test_stop_then_start_resets_progress(self) -> None:
        runner = RoutineRunner(
            [
                StretchDefinition(
                    id="cat-cow",
                    name="Cat/Cow",
                    duration_seconds=1,
                    sides="custom",
                    side_names=("Cat", "Cow"),
                    repetitions=2,
                ),
                StretchDefinition(id="rest", name="Rest", duration_seconds=1),
            ],
            timings=RoutineTimings(stretch_transition_seconds=1, side_transition_seconds=1),
        )
        runner.start()
        for _ in range(6):
            runner.advance_one_second()
        mid = runner.snapshot()
        self.assertEqual(1, mid.repetition)

        self.assertTrue(runner.stop())
        stopped = runner.snapshot()
        self.assertEqual("idle", stopped.phase)
        self.assertIsNone(runner.advance_one_second())

        snapshot = runner.start()
        self.assertEqual("transition", snapshot.phase)
        self.assertEqual(0, snapshot.stretch_index)
        self.assertEqual(0, snapshot.repetition)
        self.assertEqual(0, snapshot.side_index)
        self.assertFalse(snapshot.completed)

    def test_stop_is_safe_when_idle(self) -> None:
        runner = RoutineRunner([StretchDefinition(id="a", name="A", duration_seconds=1)])
        self.assertFalse(runner.stop())
        self.assertEqual("idle", runner.snapshot().phase)

    def test_start_on_empty_routine_raises(self) -> None:
        runner = RoutineRunner([])
        with self.assertRaises(EmptyRoutineError):
            runner.start()
        self.assertEqual("idle", runner.snapshot().phase)

    def test_duplicate_ids_are_rejected(self) -> None:
        with self.assertRaises(InvalidDefinitionError):
            RoutineRunner(
                [
                    StretchDefinition(id="a", name="A", duration_seconds=1),
                    StretchDefinition(id="a", name="Again", duration_seconds=1),
                ]
            )

    def test_tick_is_noop_while_paused(self) -> None:
        runner = RoutineRunner([StretchDefinition(id="a", name="A", duration_seconds=5)])
        runner.start()
        runner.advance_one_second()

        self.assertTrue(runner.pause())
        self.assertIsNone(runner.advance_one_second())
        self.assertEqual(9, runner.snapshot().time_remaining)
        self.assertTrue(runner.snapshot().paused)

        self.assertTrue(runner.resume())
        tick = runner.advance_one_second()
        self.assertEqual(8, tick.snapshot.time_remaining)

    def test_pause_and_resume_are_idempotent(self) -> None:
        runner = RoutineRunner([StretchDefinition(id="a", name="A", duration_seconds=5)])
        self.assertFalse(runner.pause())
        self.assertFalse(runner.resume())

        runner.start()
        self.assertFalse(runner.resume())
        self.assertTrue(runner.pause())
        self.assertFalse(runner.pause())
        self.assertTrue(runner.resume())
        self.assertFalse(runner.resume())

    def test_resume_shifts_phase_start_by_pause_duration(self) -> None:
        runner = RoutineRunner([StretchDefinition(id="a", name="A", duration_seconds=5)])
        runner.start()
        self.clock.now = 103.0
        runner.advance_one_second()
        started_at = runner.phase_started_at
        remaining = runner.snapshot().time_remaining

        self.clock.now = 104.0
        runner.pause()
        self.clock.now = 104.0 + 37.5
        runner.resume()

        self.assertEqual(started_at + 37.5, runner.phase_started_at)
        self.assertEqual(remaining, runner.snapshot().time_remaining)

    def test_elapsed_fraction_freezes_while_paused(self) -> None:
        runner = RoutineRunner([StretchDefinition(id="a", name="A", duration_seconds=5)])
        runner.start()

        self.assertAlmostEqual(0.25, runner.elapsed_fraction(now=102.5))
        self.clock.now = 103.0
        runner.pause()
        self.clock.now = 110.0
        self.assertAlmostEqual(0.3, runner.elapsed_fraction())
        self.assertAlmostEqual(0.3, runner.snapshot().elapsed_fraction)

        runner.resume()
        self.clock.now = 111.0
        self.assertAlmostEqual(0.4, runner.elapsed_fraction())
        self.assertEqual(1.0, runner.elapsed_fraction(now=500.0))

    def test_elapsed_fraction_is_zero_when_idle(self) -> None:
        runner = RoutineRunner([StretchDefinition(id="a", name="A", duration_seconds=5)])
        self.assertEqual(0.0, runner.elapsed_fraction())

    def test_side_label_only_during_hold_and_side_transition(self) -> None:
        runner = RoutineRunner(
            [StretchDefinition(id="t", name="T", duration_seconds=1, sides="left-right")],
            timings=RoutineTimings(stretch_transition_seconds=1, side_transition_seconds=1),
        )
        snapshot = runner.start()
        self.assertIsNone(snapshot.side)

        hold = runner.advance_one_second().snapshot
        self.assertEqual(("hold", "Left"), (hold.phase, hold.side))
        switch = runner.advance_one_second().snapshot
        self.assertEqual(("side-transition", "Right"), (switch.phase, switch.side))

    def test_hook_failure_is_logged_and_runner_continues(self) -> None:
        def explode(*_args) -> None:
            raise RuntimeError("speaker on fire")

        runner = RoutineRunner(
            [StretchDefinition(id="a", name="A", duration_seconds=1)],
            timings=RoutineTimings(stretch_transition_seconds=1),
            hooks=RoutineHooks(on_phase_enter=explode),
            logger=logging.getLogger("test.routine"),
        )
        with self.assertLogs("test.routine", level="ERROR"):
            runner.start()
        with self.assertLogs("test.routine", level="ERROR"):
            tick = runner.advance_one_second()
        self.assertEqual("hold", tick.snapshot.phase)

    def test_hooks_may_read_runner_state(self) -> None:
        seen: list[int] = []
        runner: RoutineRunner

        def on_phase_enter(phase, stretch, snapshot) -> None:
            seen.append(runner.total_time_remaining())

        runner = RoutineRunner(
            [StretchDefinition(id="a", name="A", duration_seconds=2)],
            hooks=RoutineHooks(on_phase_enter=on_phase_enter),
        )
        runner.start()
        self.assertEqual([12], seen)


if __name__ == "__main__":
    unittest.main()

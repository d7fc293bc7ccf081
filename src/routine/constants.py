"""Phase, side, and event constants used by routine runtime logic."""

from __future__ import annotations

DEFAULT_STRETCH_TRANSITION_SECONDS = 10
DEFAULT_SIDE_TRANSITION_SECONDS = 5

PHASE_IDLE = "idle"
PHASE_TRANSITION = "transition"
PHASE_SIDE_TRANSITION = "side-transition"
PHASE_HOLD = "hold"

ACTIVE_PHASES: frozenset[str] = frozenset(
    {PHASE_TRANSITION, PHASE_SIDE_TRANSITION, PHASE_HOLD}
)
PREPARING_PHASES: frozenset[str] = frozenset({PHASE_TRANSITION, PHASE_SIDE_TRANSITION})

SIDES_NONE = "none"
SIDES_LEFT_RIGHT = "left-right"
SIDES_FRONT_BACK = "front-back"
SIDES_CUSTOM = "custom"

BUILTIN_SIDE_NAMES: dict[str, tuple[str, ...]] = {
    SIDES_NONE: (),
    SIDES_LEFT_RIGHT: ("Left", "Right"),
    SIDES_FRONT_BACK: ("Front", "Back"),
}
SIDE_KINDS: frozenset[str] = frozenset({*BUILTIN_SIDE_NAMES, SIDES_CUSTOM})

EVENT_STARTED = "started"
EVENT_STOPPED = "stopped"
EVENT_PAUSED = "paused"
EVENT_RESUMED = "resumed"
EVENT_TICK = "tick"
EVENT_PHASE_ENTER = "phase_enter"
EVENT_SIDE_CHANGE = "side_change"
EVENT_STRETCH_COMPLETE = "stretch_complete"
EVENT_ROUTINE_COMPLETE = "routine_complete"

from .constants import (
    DEFAULT_SIDE_TRANSITION_SECONDS,
    DEFAULT_STRETCH_TRANSITION_SECONDS,
)
from .defaults import DEFAULT_ROUTINE
from .definitions import RoutineTimings, StretchDefinition, stretch_from_mapping
from .errors import (
    EmptyRoutineError,
    InvalidDefinitionError,
    RoutineError,
    RoutineLoadError,
)
from .loader import load_routine_file, parse_routine
from .service import (
    RoutineHooks,
    RoutinePhase,
    RoutineRunner,
    RoutineSnapshot,
    RoutineTick,
)
from .view import RoutineView, build_view, format_clock

__all__ = [
    "DEFAULT_ROUTINE",
    "DEFAULT_SIDE_TRANSITION_SECONDS",
    "DEFAULT_STRETCH_TRANSITION_SECONDS",
    "EmptyRoutineError",
    "InvalidDefinitionError",
    "RoutineError",
    "RoutineHooks",
    "RoutineLoadError",
    "RoutinePhase",
    "RoutineRunner",
    "RoutineSnapshot",
    "RoutineTick",
    "RoutineTimings",
    "RoutineView",
    "StretchDefinition",
    "build_view",
    "format_clock",
    "load_routine_file",
    "parse_routine",
    "stretch_from_mapping",
]

"""Error types raised by routine definitions and the routine runner."""


class RoutineError(Exception):
    """Base error for stretch routine failures."""


class InvalidDefinitionError(RoutineError):
    """Raised when a stretch definition or routine timing is invalid."""


class RoutineLoadError(InvalidDefinitionError):
    """Raised when a routine file cannot be read or parsed."""


class EmptyRoutineError(RoutineError):
    """Raised when starting a routine that has no stretches."""

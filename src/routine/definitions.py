"""Immutable stretch definitions and their load-time validation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .constants import (
    BUILTIN_SIDE_NAMES,
    DEFAULT_SIDE_TRANSITION_SECONDS,
    DEFAULT_STRETCH_TRANSITION_SECONDS,
    SIDE_KINDS,
    SIDES_CUSTOM,
    SIDES_NONE,
)
from .errors import InvalidDefinitionError


@dataclass(frozen=True)
class StretchDefinition:
    """One stretch of a routine: hold duration, sides, and repetitions."""
    id: str
    name: str
    duration_seconds: int
    description: str = ""
    target_areas: tuple[str, ...] = ()
    sides: str = SIDES_NONE
    side_names: tuple[str, ...] = ()
    repetitions: int = 1
    transition_seconds: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.id.strip():
            raise InvalidDefinitionError("Stretch id cannot be empty")
        if not self.name.strip():
            raise InvalidDefinitionError(f"Stretch '{self.id}' needs a name")
        _require_positive(self.duration_seconds, f"{self.id}.duration_seconds")
        _require_positive(self.repetitions, f"{self.id}.repetitions")
        if self.transition_seconds is not None:
            _require_positive(self.transition_seconds, f"{self.id}.transition_seconds")

        if self.sides not in SIDE_KINDS:
            allowed = ", ".join(sorted(SIDE_KINDS))
            raise InvalidDefinitionError(
                f"{self.id}.sides must be one of: {allowed}, got: {self.sides!r}"
            )
        if self.sides == SIDES_CUSTOM:
            if not self.side_names:
                raise InvalidDefinitionError(
                    f"{self.id}.side_names is required when sides is 'custom'"
                )
            if any(not name.strip() for name in self.side_names):
                raise InvalidDefinitionError(f"{self.id}.side_names cannot contain blanks")
        elif self.side_names:
            raise InvalidDefinitionError(
                f"{self.id}.side_names is only allowed when sides is 'custom'"
            )

    @property
    def resolved_side_names(self) -> tuple[str, ...]:
        if self.sides == SIDES_CUSTOM:
            return self.side_names
        return BUILTIN_SIDE_NAMES[self.sides]

    @property
    def side_count(self) -> int:
        return max(1, len(self.resolved_side_names))

    @property
    def hold_count(self) -> int:
        """Number of hold phases this stretch runs (sides x repetitions)."""
        return self.side_count * self.repetitions


@dataclass(frozen=True)
class RoutineTimings:
    """Global transition durations applied between stretches and sides."""
    stretch_transition_seconds: int = DEFAULT_STRETCH_TRANSITION_SECONDS
    side_transition_seconds: int = DEFAULT_SIDE_TRANSITION_SECONDS

    def __post_init__(self) -> None:
        _require_positive(self.stretch_transition_seconds, "stretch_transition_seconds")
        _require_positive(self.side_transition_seconds, "side_transition_seconds")

    def transition_for(self, stretch: StretchDefinition) -> int:
        if stretch.transition_seconds is not None:
            return stretch.transition_seconds
        return self.stretch_transition_seconds


def stretch_from_mapping(raw: Mapping[str, Any]) -> StretchDefinition:
    """Build a validated stretch from a TOML table or plain mapping."""
    stretch_id = _as_str(raw.get("id"), "id")
    label = stretch_id or "stretch"
    transition = raw.get("transition_seconds")
    return StretchDefinition(
        id=stretch_id,
        name=_as_str(raw.get("name"), f"{label}.name"),
        description=_as_str(raw.get("description", ""), f"{label}.description"),
        target_areas=_as_str_tuple(raw.get("target_areas", ()), f"{label}.target_areas"),
        duration_seconds=_as_int(raw.get("duration_seconds"), f"{label}.duration_seconds"),
        sides=_as_str(raw.get("sides", SIDES_NONE), f"{label}.sides").lower(),
        side_names=_as_str_tuple(raw.get("side_names", ()), f"{label}.side_names"),
        repetitions=_as_int(raw.get("repetitions", 1), f"{label}.repetitions"),
        transition_seconds=(
            _as_int(transition, f"{label}.transition_seconds")
            if transition is not None
            else None
        ),
    )


def validate_unique_ids(stretches: tuple[StretchDefinition, ...]) -> None:
    seen: set[str] = set()
    for stretch in stretches:
        if stretch.id in seen:
            raise InvalidDefinitionError(f"Duplicate stretch id: {stretch.id}")
        seen.add(stretch.id)


def _require_positive(value: Any, field: str) -> None:
    # bool is an int subclass; reject it explicitly.
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidDefinitionError(f"{field} must be an integer, got: {value!r}")
    if value <= 0:
        raise InvalidDefinitionError(f"{field} must be greater than zero, got: {value}")


def _as_str(value: Any, field: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    raise InvalidDefinitionError(f"{field} must be a string.")


def _as_int(value: Any, field: str) -> int:
    if value is None:
        raise InvalidDefinitionError(f"{field} is required.")
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidDefinitionError(f"{field} must be an integer.")
    return value


def _as_str_tuple(value: Any, field: str) -> tuple[str, ...]:
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise InvalidDefinitionError(f"{field} must be a list of strings.")
    items = []
    for item in value:
        if not isinstance(item, str):
            raise InvalidDefinitionError(f"{field} must be a list of strings.")
        items.append(item.strip())
    return tuple(items)

"""TOML routine file loading into validated stretch definitions."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Mapping

from .definitions import StretchDefinition, stretch_from_mapping, validate_unique_ids
from .errors import InvalidDefinitionError, RoutineLoadError


def load_routine_file(path: str | Path) -> tuple[StretchDefinition, ...]:
    """Load `[[stretches]]` tables from a TOML routine file.

    Raises:
        RoutineLoadError: if the file is missing or not valid TOML.
        InvalidDefinitionError: if any stretch fails validation.
    """
    routine_path = Path(path).expanduser()
    if not routine_path.exists():
        raise RoutineLoadError(f"Routine file not found: {routine_path}")
    if not routine_path.is_file():
        raise RoutineLoadError(f"Routine path is not a file: {routine_path}")

    try:
        with open(routine_path, "rb") as fh:
            raw = tomllib.load(fh)
    except (OSError, tomllib.TOMLDecodeError) as error:
        raise RoutineLoadError(f"Failed to parse routine TOML: {error}") from error

    return parse_routine(raw)


def parse_routine(raw: Mapping[str, Any]) -> tuple[StretchDefinition, ...]:
    entries = raw.get("stretches", [])
    if not isinstance(entries, list):
        raise RoutineLoadError("'stretches' must be an array of tables.")

    stretches = []
    for position, entry in enumerate(entries):
        if not isinstance(entry, Mapping):
            raise RoutineLoadError(f"stretches[{position}] must be a table.")
        try:
            stretches.append(stretch_from_mapping(entry))
        except InvalidDefinitionError as error:
            raise InvalidDefinitionError(f"stretches[{position}]: {error}") from error

    routine = tuple(stretches)
    validate_unique_ids(routine)
    return routine

"""Tick handler that publishes routine countdown and completion updates."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Sequence

from contracts.ui_protocol import STATE_COMPLETED
from routine import RoutineTick, StretchDefinition, build_view
from routine.constants import EVENT_ROUTINE_COMPLETE, EVENT_TICK
from routine.view import COMPLETE_TITLE

from .ui import RuntimeUIPublisher


@dataclass(frozen=True)
class TickDependencies:
    """Dependencies required for processing routine tick results."""
    logger: logging.Logger
    ui: RuntimeUIPublisher
    routine: Sequence[StretchDefinition]
    on_routine_complete: Callable[[], None]


class TickProcessor:
    """Handles tick side effects such as UI updates and completion state."""
    def __init__(self, dependencies: TickDependencies):
        self._dependencies = dependencies

    def handle_routine_tick(self, tick: RoutineTick) -> None:
        deps = self._dependencies
        view = build_view(tick.snapshot, deps.routine)
        if tick.completed:
            deps.ui.publish_routine_update(
                tick.snapshot,
                view,
                event=EVENT_ROUTINE_COMPLETE,
            )
            deps.ui.publish_state(STATE_COMPLETED, message=COMPLETE_TITLE)
            deps.logger.info("Routine finished, stopping tick sources")
            deps.on_routine_complete()
            return

        deps.ui.publish_routine_update(tick.snapshot, view, event=EVENT_TICK)

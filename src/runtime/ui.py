from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

from contracts.ui_protocol import EVENT_ERROR, EVENT_PROGRESS, EVENT_ROUTINE, STATE_ERROR
from routine import RoutineSnapshot, RoutineView
from routine.constants import EVENT_TICK


class UIServerLike(Protocol):
    def publish(self, event_type: str, **payload: Any) -> None:
        ...

    def publish_state(
        self,
        state: str,
        *,
        message: Optional[str] = None,
        **payload: Any,
    ) -> None:
        ...


class RuntimeUIPublisher:
    """Publishes routine updates to the UI server and mirrors them to the log."""

    def __init__(
        self,
        ui_server: Optional[UIServerLike],
        logger: Optional[logging.Logger] = None,
    ):
        self._ui_server = ui_server
        self._logger = logger or logging.getLogger("stretch_timer")

    def publish(self, event_type: str, **payload: Any) -> None:
        if self._ui_server:
            self._ui_server.publish(event_type, **payload)

    def publish_state(
        self,
        state: str,
        *,
        message: Optional[str] = None,
        **payload: Any,
    ) -> None:
        if self._ui_server:
            self._ui_server.publish_state(state, message=message, **payload)

    def publish_routine_update(
        self,
        snapshot: RoutineSnapshot,
        view: RoutineView,
        *,
        event: str,
    ) -> None:
        if event != EVENT_TICK:
            self._logger.info(
                "%s%s%s",
                view.title,
                f" | {view.phase_text}" if view.phase_text else "",
                f" | {view.remaining_text}" if view.remaining_text else "",
            )
        payload: dict[str, Any] = {
            "event": event,
            "phase": snapshot.phase,
            "stretch_id": snapshot.stretch.id if snapshot.stretch else None,
            "stretch_index": snapshot.stretch_index,
            "stretch_count": snapshot.stretch_count,
            "side": snapshot.side,
            "repetition": snapshot.repetition,
            "repetitions": snapshot.repetitions,
            "time_remaining": snapshot.time_remaining,
            "total_time": snapshot.total_time,
            "total_time_remaining": snapshot.total_time_remaining,
            "paused": snapshot.paused,
            "completed": snapshot.completed,
            "view": view.as_payload(),
        }
        self.publish(EVENT_ROUTINE, **payload)

    def publish_progress(self, elapsed_fraction: float) -> None:
        self.publish(
            EVENT_PROGRESS,
            progress_percent=round(max(0.0, min(1.0, elapsed_fraction)) * 100.0, 1),
        )

    def publish_error(self, message: str) -> None:
        self._logger.error("%s", message)
        self.publish_state(STATE_ERROR, message=message)
        self.publish(EVENT_ERROR, message=message)

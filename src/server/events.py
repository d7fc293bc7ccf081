"""Utilities for serializing UI events, parsing commands, and sticky state."""

from __future__ import annotations

import json
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from contracts.ui_protocol import (
    CLIENT_COMMANDS,
    MESSAGE_COMMAND,
    STICKY_EVENT_ORDER,
    STICKY_EVENT_TYPES,
)


class CommandParseError(ValueError):
    """Raised when a client message is not a valid control command."""


def make_event(
    event_type: str,
    *,
    now_fn: Callable[[], datetime] | None = None,
    **payload: Any,
) -> str:
    """Serialize an event payload with type and timestamp for websocket delivery."""
    now = now_fn() if now_fn is not None else datetime.now(timezone.utc)
    return json.dumps(
        {
            "type": event_type,
            "timestamp": now.isoformat(),
            **payload,
        }
    )


def parse_command(raw: str | bytes) -> str:
    """Return the command action from a `{"type": "command", ...}` message."""
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as error:
            raise CommandParseError("Command must be UTF-8 JSON") from error

    try:
        message = json.loads(raw)
    except json.JSONDecodeError as error:
        raise CommandParseError(f"Invalid JSON: {error.msg}") from error

    if not isinstance(message, dict) or message.get("type") != MESSAGE_COMMAND:
        raise CommandParseError("Expected an object with type 'command'")

    action: Optional[Any] = message.get("action")
    if not isinstance(action, str):
        raise CommandParseError("Command action must be a string")
    action = action.strip().lower()
    if action not in CLIENT_COMMANDS:
        allowed = ", ".join(sorted(CLIENT_COMMANDS))
        raise CommandParseError(f"Unsupported command '{action}', expected one of: {allowed}")
    return action


class StickyEventStore:
    """Thread-safe cache of sticky events replayed to new websocket clients."""
    def __init__(self):
        self._events: dict[str, str] = {}
        self._lock = threading.Lock()

    def remember(self, event_type: str, message: str) -> None:
        if event_type not in STICKY_EVENT_TYPES:
            return
        with self._lock:
            self._events[event_type] = message

    def forget(self, event_type: str) -> None:
        with self._lock:
            self._events.pop(event_type, None)

    def snapshot(self) -> list[str]:
        with self._lock:
            return [self._events[key] for key in STICKY_EVENT_ORDER if key in self._events]

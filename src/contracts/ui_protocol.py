"""Web UI websocket event, state, and command constants."""

from __future__ import annotations

# Websocket event types
EVENT_HELLO = "hello"
EVENT_STATE_UPDATE = "state_update"
EVENT_ROUTINE = "routine"
EVENT_PROGRESS = "progress"
EVENT_ERROR = "error"

# UI runtime states
STATE_IDLE = "idle"
STATE_RUNNING = "running"
STATE_PAUSED = "paused"
STATE_COMPLETED = "completed"
STATE_ERROR = "error"

# Client -> server messages
MESSAGE_COMMAND = "command"

COMMAND_START = "start"
COMMAND_PAUSE = "pause"
COMMAND_RESUME = "resume"
COMMAND_TOGGLE_PAUSE = "toggle_pause"
COMMAND_STOP = "stop"
COMMAND_SHUTDOWN = "shutdown"

# Shutdown is reserved for the local process (signals); clients cannot send it.
CLIENT_COMMANDS: frozenset[str] = frozenset(
    {
        COMMAND_START,
        COMMAND_PAUSE,
        COMMAND_RESUME,
        COMMAND_TOGGLE_PAUSE,
        COMMAND_STOP,
    }
)

STICKY_EVENT_TYPES: frozenset[str] = frozenset(
    {
        EVENT_STATE_UPDATE,
        EVENT_ROUTINE,
        EVENT_ERROR,
    }
)

STICKY_EVENT_ORDER: tuple[str, ...] = (
    EVENT_ROUTINE,
    EVENT_ERROR,
    EVENT_STATE_UPDATE,
)

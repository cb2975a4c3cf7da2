"""Websocket event types exchanged with overlay and tray clients."""

from __future__ import annotations

# Server -> client event types
EVENT_HELLO = "hello"
EVENT_STATE = "state"
EVENT_PROGRESS = "progress"
EVENT_IDLE_RESET = "idle_reset"
EVENT_IDLE_ERROR = "idle_error"
EVENT_COMMAND_RESULT = "command_result"
EVENT_ERROR = "error"

# Scheduler event kind -> websocket event type
SCHEDULER_EVENT_TYPES: dict[str, str] = {
    "state_change": EVENT_STATE,
    "progress": EVENT_PROGRESS,
    "idle_reset": EVENT_IDLE_RESET,
    "idle_error": EVENT_IDLE_ERROR,
}

STICKY_EVENT_TYPES: frozenset[str] = frozenset(
    {
        EVENT_STATE,
        EVENT_PROGRESS,
    }
)

STICKY_EVENT_ORDER: tuple[str, ...] = (
    EVENT_STATE,
    EVENT_PROGRESS,
)

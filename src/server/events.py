"""Utilities for serializing UI events and preserving sticky state."""

from __future__ import annotations

import json
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional

from contracts.ui_protocol import (
    EVENT_PROGRESS,
    EVENT_STATE,
    STICKY_EVENT_ORDER,
    STICKY_EVENT_TYPES,
)


class CommandMessageError(ValueError):
    """Raised when a client message is not a valid command request."""


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


def parse_command_message(raw: str | bytes) -> tuple[str, dict[str, Any]]:
    """Decode ``{"command": "...", ...}`` into a command name and its arguments."""
    try:
        decoded = json.loads(raw)
    except (TypeError, ValueError) as error:
        raise CommandMessageError(f"Invalid JSON: {error}") from error

    if not isinstance(decoded, Mapping):
        raise CommandMessageError("Command message must be a JSON object")

    command = decoded.get("command")
    if not isinstance(command, str) or not command.strip():
        raise CommandMessageError("Command message requires a 'command' string")

    arguments = {key: value for key, value in decoded.items() if key != "command"}
    return command.strip(), arguments


class StickyEventStore:
    """Thread-safe cache of sticky events replayed to new websocket clients."""
    def __init__(self):
        self._events: dict[str, str] = {}
        self._lock = threading.Lock()

    def remember(self, event_type: str, message: str) -> None:
        if event_type not in STICKY_EVENT_TYPES:
            return
        with self._lock:
            if event_type == EVENT_STATE:
                # Progress from the previous state no longer applies.
                self._events.pop(EVENT_PROGRESS, None)
            self._events[event_type] = message

    def latest(self, event_type: str) -> Optional[str]:
        with self._lock:
            return self._events.get(event_type)

    def snapshot(self) -> list[str]:
        with self._lock:
            return [self._events[key] for key in STICKY_EVENT_ORDER if key in self._events]

from __future__ import annotations

from typing import Any, Optional, Protocol

from contracts.ui_protocol import SCHEDULER_EVENT_TYPES
from timekeeper import SchedulerEvent

from .commands import CommandResult
from .messages import event_status_message, snapshot_status_message


class UIServerLike(Protocol):
    def publish(self, event_type: str, **payload: Any) -> None:
        ...


def scheduler_event_payload(event: SchedulerEvent) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "state": event.state,
        "remaining_seconds": round(event.remaining_seconds, 3),
        "progress": round(event.progress, 4),
        "strict_mode": event.strict_mode,
        "status": event_status_message(event),
        "occurred_at": event.occurred_at.isoformat(),
    }
    if event.message:
        payload["message"] = event.message
    return payload


def command_result_payload(result: CommandResult) -> dict[str, Any]:
    snapshot = result.snapshot
    return {
        "command": result.command,
        "accepted": result.accepted,
        "reason": result.reason,
        "state": snapshot.state,
        "remaining_seconds": round(snapshot.remaining_seconds, 3),
        "next_short_seconds": round(snapshot.next_short_seconds, 3),
        "next_long_seconds": round(snapshot.next_long_seconds, 3),
        "strict_mode": snapshot.strict_mode,
        "status": snapshot_status_message(snapshot),
    }


class RuntimeUIPublisher:
    def __init__(self, ui_server: Optional[UIServerLike]):
        self._ui_server = ui_server

    def publish(self, event_type: str, **payload: Any) -> None:
        if self._ui_server:
            self._ui_server.publish(event_type, **payload)

    def publish_scheduler_event(self, event: SchedulerEvent) -> None:
        event_type = SCHEDULER_EVENT_TYPES.get(event.kind)
        if event_type is None:
            return
        self.publish(event_type, **scheduler_event_payload(event))

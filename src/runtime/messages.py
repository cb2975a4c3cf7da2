"""Status text builders for tray tooltips and overlay captions."""

from __future__ import annotations

from timekeeper import SchedulerEvent, SchedulerSnapshot
from timekeeper.constants import (
    BREAK_STATES,
    STATE_LONG_BREAK,
    STATE_PAUSED,
    STATE_SHORT_BREAK,
    STATE_WORK,
)

_BREAK_LABELS = {
    STATE_SHORT_BREAK: "short break",
    STATE_LONG_BREAK: "long break",
}


def format_remaining(seconds: float) -> str:
    """Format a duration in seconds as `MM:SS`."""
    minutes, remainder = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{remainder:02d}"


def status_message(state: str, remaining_seconds: float, *, strict_mode: bool = False) -> str:
    if state == STATE_PAUSED:
        return "paused"
    if state in BREAK_STATES:
        text = f"{_BREAK_LABELS[state]}: {format_remaining(remaining_seconds)} left"
        if strict_mode:
            text += " (strict)"
        return text
    if state == STATE_WORK:
        return f"next break in {format_remaining(remaining_seconds)}"
    return state


def event_status_message(event: SchedulerEvent) -> str:
    return status_message(
        event.state,
        event.remaining_seconds,
        strict_mode=event.strict_mode,
    )


def snapshot_status_message(snapshot: SchedulerSnapshot) -> str:
    if not snapshot.running:
        return "not started"
    if snapshot.in_break:
        remaining = snapshot.remaining_seconds
    else:
        remaining = snapshot.next_break_seconds
    return status_message(snapshot.state, remaining, strict_mode=snapshot.strict_mode)

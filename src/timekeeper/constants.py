"""State, event, and default constants used by the break scheduler."""

from __future__ import annotations

STATE_WORK = "work"
STATE_SHORT_BREAK = "short_break"
STATE_LONG_BREAK = "long_break"
STATE_PAUSED = "paused"

BREAK_STATES: frozenset[str] = frozenset({STATE_SHORT_BREAK, STATE_LONG_BREAK})

EVENT_STATE_CHANGE = "state_change"
EVENT_PROGRESS = "progress"
EVENT_IDLE_RESET = "idle_reset"
EVENT_IDLE_ERROR = "idle_error"

DEFAULT_TICK_INTERVAL_SECONDS = 1.0
DEFAULT_SHORT_INTERVAL_SECONDS = 15 * 60.0
DEFAULT_SHORT_DURATION_SECONDS = 15.0
DEFAULT_LONG_INTERVAL_SECONDS = 50 * 60.0
DEFAULT_LONG_DURATION_SECONDS = 5 * 60.0
DEFAULT_IDLE_RESET_AFTER_SECONDS = 5 * 60.0
DEFAULT_IDLE_CHECK_INTERVAL_SECONDS = 5.0

DEFAULT_SUBSCRIPTION_BUFFER = 1

"""Canonical command names accepted from tray, overlay, and websocket clients."""

from __future__ import annotations

COMMAND_START = "start"
COMMAND_STOP = "stop"
COMMAND_PAUSE = "pause"
COMMAND_RESUME = "resume"
COMMAND_TOGGLE_PAUSE = "toggle_pause"
COMMAND_PAUSE_FOR = "pause_for"
COMMAND_SKIP_BREAK = "skip_break"
COMMAND_FORCE_SHORT_BREAK = "force_short_break"
COMMAND_FORCE_LONG_BREAK = "force_long_break"
COMMAND_RESET_IDLE = "reset_idle"

COMMAND_NAMES: frozenset[str] = frozenset(
    {
        COMMAND_START,
        COMMAND_STOP,
        COMMAND_PAUSE,
        COMMAND_RESUME,
        COMMAND_TOGGLE_PAUSE,
        COMMAND_PAUSE_FOR,
        COMMAND_SKIP_BREAK,
        COMMAND_FORCE_SHORT_BREAK,
        COMMAND_FORCE_LONG_BREAK,
        COMMAND_RESET_IDLE,
    }
)

REASON_ACCEPTED = "accepted"
REASON_NOT_RUNNING = "not_running"
REASON_STOPPED = "stopped"
REASON_ALREADY_RUNNING = "already_running"
REASON_ALREADY_PAUSED = "already_paused"
REASON_NOT_PAUSED = "not_paused"
REASON_NOT_IN_BREAK = "not_in_break"
REASON_NOT_WORKING = "not_working"
REASON_STRICT_MODE = "strict_mode"
REASON_INVALID_ARGUMENT = "invalid_argument"
REASON_UNSUPPORTED_COMMAND = "unsupported_command"

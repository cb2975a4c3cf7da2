"""Dispatcher that applies named user commands to the break scheduler."""

from __future__ import annotations

import functools
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Protocol

from contracts.command_contract import (
    COMMAND_FORCE_LONG_BREAK,
    COMMAND_FORCE_SHORT_BREAK,
    COMMAND_NAMES,
    COMMAND_PAUSE,
    COMMAND_PAUSE_FOR,
    COMMAND_RESET_IDLE,
    COMMAND_RESUME,
    COMMAND_SKIP_BREAK,
    COMMAND_START,
    COMMAND_STOP,
    COMMAND_TOGGLE_PAUSE,
    REASON_ACCEPTED,
    REASON_ALREADY_PAUSED,
    REASON_ALREADY_RUNNING,
    REASON_INVALID_ARGUMENT,
    REASON_NOT_IN_BREAK,
    REASON_NOT_PAUSED,
    REASON_NOT_RUNNING,
    REASON_NOT_WORKING,
    REASON_STOPPED,
    REASON_STRICT_MODE,
    REASON_UNSUPPORTED_COMMAND,
)
from timekeeper import BreakScheduler, SchedulerSnapshot
from timekeeper.constants import STATE_LONG_BREAK, STATE_SHORT_BREAK, STATE_WORK


class TimerLike(Protocol):
    daemon: bool

    def start(self) -> None:
        ...

    def cancel(self) -> None:
        ...


TimerFactory = Callable[[float, Callable[[], None]], TimerLike]


@dataclass(frozen=True)
class CommandResult:
    """Result envelope returned after applying a scheduler command."""
    command: str
    accepted: bool
    reason: str
    snapshot: SchedulerSnapshot


class CommandDispatcher:
    """Routes command names to scheduler operations and reports acceptance.

    The scheduler itself ignores out-of-order commands silently; this layer
    checks the same preconditions first so callers learn why nothing happened.
    """

    def __init__(
        self,
        scheduler: BreakScheduler,
        *,
        logger: Optional[logging.Logger] = None,
        timer_factory: TimerFactory = threading.Timer,
    ):
        self._scheduler = scheduler
        self._logger = logger or logging.getLogger("runtime.commands")
        self._timer_factory = timer_factory
        self._timer_lock = threading.Lock()
        self._resume_timer: Optional[TimerLike] = None
        self._resume_generation = 0
        self._handlers: dict[str, Callable[[Mapping[str, Any]], CommandResult]] = {
            COMMAND_START: self._start,
            COMMAND_STOP: self._stop,
            COMMAND_PAUSE: self._pause,
            COMMAND_RESUME: self._resume,
            COMMAND_TOGGLE_PAUSE: self._toggle_pause,
            COMMAND_PAUSE_FOR: self._pause_for,
            COMMAND_SKIP_BREAK: self._skip_break,
            COMMAND_FORCE_SHORT_BREAK: self._force_short_break,
            COMMAND_FORCE_LONG_BREAK: self._force_long_break,
            COMMAND_RESET_IDLE: self._reset_idle,
        }

    @property
    def supported_commands(self) -> frozenset[str]:
        return frozenset(self._handlers)

    def dispatch(
        self,
        command: str,
        arguments: Optional[Mapping[str, Any]] = None,
    ) -> CommandResult:
        arguments = arguments or {}
        handler = self._handlers.get(command) if command in COMMAND_NAMES else None
        if handler is None:
            self._logger.warning("Unsupported command: %s", command)
            return self._result(command, False, REASON_UNSUPPORTED_COMMAND)

        result = handler(arguments)
        self._logger.info(
            "Command %s: accepted=%s reason=%s state=%s",
            command,
            result.accepted,
            result.reason,
            result.snapshot.state,
        )
        return result

    def cancel_pending(self) -> None:
        with self._timer_lock:
            # A callback already in flight sees a stale generation and does nothing.
            self._resume_generation += 1
            timer = self._resume_timer
            self._resume_timer = None
        if timer is not None:
            timer.cancel()

    def _start(self, _arguments: Mapping[str, Any]) -> CommandResult:
        if self._scheduler.is_running:
            return self._result(COMMAND_START, False, REASON_ALREADY_RUNNING)
        self._scheduler.start()
        if not self._scheduler.is_running:
            return self._result(COMMAND_START, False, REASON_STOPPED)
        return self._result(COMMAND_START, True, REASON_ACCEPTED)

    def _stop(self, _arguments: Mapping[str, Any]) -> CommandResult:
        if not self._scheduler.is_running:
            return self._result(COMMAND_STOP, False, REASON_NOT_RUNNING)
        self.cancel_pending()
        self._scheduler.stop()
        return self._result(COMMAND_STOP, True, REASON_ACCEPTED)

    def _pause(self, _arguments: Mapping[str, Any]) -> CommandResult:
        snapshot = self._scheduler.snapshot()
        if not snapshot.running:
            return self._result(COMMAND_PAUSE, False, REASON_NOT_RUNNING, snapshot)
        if snapshot.is_paused:
            return self._result(COMMAND_PAUSE, False, REASON_ALREADY_PAUSED, snapshot)
        self._scheduler.pause()
        return self._result(COMMAND_PAUSE, True, REASON_ACCEPTED)

    def _resume(self, _arguments: Mapping[str, Any]) -> CommandResult:
        snapshot = self._scheduler.snapshot()
        if not snapshot.is_paused:
            return self._result(COMMAND_RESUME, False, REASON_NOT_PAUSED, snapshot)
        self.cancel_pending()
        self._scheduler.resume()
        return self._result(COMMAND_RESUME, True, REASON_ACCEPTED)

    def _toggle_pause(self, arguments: Mapping[str, Any]) -> CommandResult:
        if self._scheduler.snapshot().is_paused:
            result = self._resume(arguments)
        else:
            result = self._pause(arguments)
        return CommandResult(
            command=COMMAND_TOGGLE_PAUSE,
            accepted=result.accepted,
            reason=result.reason,
            snapshot=result.snapshot,
        )

    def _pause_for(self, arguments: Mapping[str, Any]) -> CommandResult:
        minutes = _positive_float(arguments.get("minutes"))
        if minutes is None:
            return self._result(COMMAND_PAUSE_FOR, False, REASON_INVALID_ARGUMENT)

        with self._timer_lock:
            snapshot = self._scheduler.snapshot()
            if not snapshot.running:
                return self._result(COMMAND_PAUSE_FOR, False, REASON_NOT_RUNNING, snapshot)
            if not snapshot.is_paused:
                self._scheduler.pause()

            self._resume_generation += 1
            timer = self._timer_factory(
                minutes * 60.0,
                functools.partial(self._deferred_resume, self._resume_generation),
            )
            timer.daemon = True
            previous = self._resume_timer
            self._resume_timer = timer
            timer.start()
        if previous is not None:
            previous.cancel()
        self._logger.info("Paused for %.1f minutes", minutes)
        return self._result(COMMAND_PAUSE_FOR, True, REASON_ACCEPTED)

    def _deferred_resume(self, generation: int) -> None:
        with self._timer_lock:
            if generation != self._resume_generation:
                self._logger.debug("Ignoring superseded pause timer")
                return
            self._resume_timer = None
            self._logger.info("Pause period elapsed, resuming")
            self._scheduler.resume()

    def _skip_break(self, _arguments: Mapping[str, Any]) -> CommandResult:
        snapshot = self._scheduler.snapshot()
        if not snapshot.running:
            return self._result(COMMAND_SKIP_BREAK, False, REASON_NOT_RUNNING, snapshot)
        if not snapshot.in_break:
            return self._result(COMMAND_SKIP_BREAK, False, REASON_NOT_IN_BREAK, snapshot)
        if snapshot.state == STATE_LONG_BREAK and snapshot.strict_mode:
            return self._result(COMMAND_SKIP_BREAK, False, REASON_STRICT_MODE, snapshot)
        self._scheduler.skip_break()
        return self._result(COMMAND_SKIP_BREAK, True, REASON_ACCEPTED)

    def _force_short_break(self, _arguments: Mapping[str, Any]) -> CommandResult:
        return self._force(COMMAND_FORCE_SHORT_BREAK, STATE_SHORT_BREAK)

    def _force_long_break(self, _arguments: Mapping[str, Any]) -> CommandResult:
        return self._force(COMMAND_FORCE_LONG_BREAK, STATE_LONG_BREAK)

    def _force(self, command: str, kind: str) -> CommandResult:
        snapshot = self._scheduler.snapshot()
        if not snapshot.running:
            return self._result(command, False, REASON_NOT_RUNNING, snapshot)
        if snapshot.state != STATE_WORK:
            return self._result(command, False, REASON_NOT_WORKING, snapshot)
        self._scheduler.force_break(kind)
        return self._result(command, True, REASON_ACCEPTED)

    def _reset_idle(self, _arguments: Mapping[str, Any]) -> CommandResult:
        self._scheduler.reset_for_idle()
        return self._result(COMMAND_RESET_IDLE, True, REASON_ACCEPTED)

    def _result(
        self,
        command: str,
        accepted: bool,
        reason: str,
        snapshot: Optional[SchedulerSnapshot] = None,
    ) -> CommandResult:
        return CommandResult(
            command=command,
            accepted=accepted,
            reason=reason,
            snapshot=snapshot or self._scheduler.snapshot(),
        )


def _positive_float(raw: Any) -> Optional[float]:
    if isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if value <= 0:
        return None
    return value

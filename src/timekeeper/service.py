"""Thread-safe break scheduling state machine."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from .config import ScheduleConfig
from .constants import (
    BREAK_STATES,
    DEFAULT_SUBSCRIPTION_BUFFER,
    DEFAULT_TICK_INTERVAL_SECONDS,
    EVENT_IDLE_ERROR,
    EVENT_IDLE_RESET,
    EVENT_PROGRESS,
    EVENT_STATE_CHANGE,
    STATE_LONG_BREAK,
    STATE_PAUSED,
    STATE_SHORT_BREAK,
    STATE_WORK,
)
from .contracts import IdleDetector
from .errors import IdleDetectionUnsupported
from .events import EventBroadcaster, EventKind, SchedulerEvent, SessionState, Subscription


@dataclass(frozen=True)
class SchedulerSnapshot:
    """Immutable view of scheduler state for runtime and UI publishers."""
    running: bool
    state: SessionState
    previous_state: SessionState
    remaining_seconds: float
    next_short_seconds: float
    next_long_seconds: float
    next_break_seconds: float
    strict_mode: bool
    break_progress: float

    @property
    def in_break(self) -> bool:
        return self.state in BREAK_STATES

    @property
    def is_paused(self) -> bool:
        return self.state == STATE_PAUSED


class BreakScheduler:
    """Break reminder state machine advanced by a fixed-interval tick.

    Every public method runs as one critical section under a single lock, so
    commands, config updates and ticks never interleave partially. Events are
    emitted under the same lock and offered to subscribers without blocking.
    """

    def __init__(
        self,
        config: ScheduleConfig,
        *,
        tick_interval_seconds: float = DEFAULT_TICK_INTERVAL_SECONDS,
        idle_detector: Optional[IdleDetector] = None,
        logger: Optional[logging.Logger] = None,
        clock: Callable[[], float] = time.monotonic,
        now_fn: Optional[Callable[[], datetime]] = None,
        run_tick_loop: bool = True,
    ):
        if tick_interval_seconds <= 0:
            tick_interval_seconds = DEFAULT_TICK_INTERVAL_SECONDS

        self._tick_interval = float(tick_interval_seconds)
        self._config = config.normalized()
        self._idle_detector = idle_detector
        self._logger = logger or logging.getLogger("timekeeper")
        self._clock = clock
        self._now_fn = now_fn or (lambda: datetime.now(timezone.utc))
        self._run_tick_loop = run_tick_loop

        self._lock = threading.Lock()
        self._broadcaster = EventBroadcaster(logger=self._logger.getChild("events"))
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

        self._running = False
        self._stopped = False
        self._state: SessionState = STATE_WORK
        self._previous_state: SessionState = STATE_WORK
        self._remaining = 0.0
        self._next_short = 0.0
        self._next_long = 0.0
        self._idle_unsupported = False
        self._last_idle_check: Optional[float] = None
        self._last_progress_at: Optional[float] = None
        self._reset_work_timers_locked()

    @property
    def tick_interval_seconds(self) -> float:
        return self._tick_interval

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._running

    @property
    def config(self) -> ScheduleConfig:
        with self._lock:
            return self._config

    def set_idle_detector(self, detector: Optional[IdleDetector]) -> None:
        with self._lock:
            self._idle_detector = detector

    def subscribe(self, buffer_size: int = DEFAULT_SUBSCRIPTION_BUFFER) -> Subscription:
        return self._broadcaster.subscribe(buffer_size)

    def snapshot(self) -> SchedulerSnapshot:
        with self._lock:
            return SchedulerSnapshot(
                running=self._running,
                state=self._state,
                previous_state=self._previous_state,
                remaining_seconds=self._remaining,
                next_short_seconds=self._next_short,
                next_long_seconds=self._next_long,
                next_break_seconds=self._next_break_remaining_locked(),
                strict_mode=self._strict_locked(self._active_break_locked()),
                break_progress=self._break_progress_locked(),
            )

    def start(self) -> None:
        with self._lock:
            if self._running:
                return
            if self._stopped:
                self._logger.warning("Break scheduler was stopped and cannot be restarted")
                return

            self._running = True
            self._state = STATE_WORK
            self._previous_state = STATE_WORK
            self._remaining = 0.0
            self._last_idle_check = None
            self._last_progress_at = None
            self._reset_work_timers_locked()
            self._logger.info(
                "Break scheduler started: short=%ss long=%ss tick=%ss",
                self._config.short.interval_seconds,
                self._config.long.interval_seconds,
                self._tick_interval,
            )
            self._emit_locked(EVENT_STATE_CHANGE, remaining=self._next_break_remaining_locked())

            if self._run_tick_loop:
                self._stop_event.clear()
                self._thread = threading.Thread(
                    target=self._run,
                    daemon=True,
                    name="timekeeper-tick",
                )
                self._thread.start()

    def stop(self, timeout_seconds: float = 5.0) -> None:
        with self._lock:
            if not self._running:
                return
            self._stop_event.set()
            self._running = False
            self._stopped = True
            # Closing under the lock guarantees no tick emits afterwards.
            self._broadcaster.close()
            thread = self._thread
            self._thread = None
            self._logger.info("Break scheduler stopped")

        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout_seconds)
            if thread.is_alive():
                self._logger.error(
                    "Tick thread did not stop within %.1fs",
                    timeout_seconds,
                )

    def pause(self) -> None:
        with self._lock:
            if not self._running or self._state == STATE_PAUSED:
                self._logger.debug("Ignoring pause: running=%s state=%s", self._running, self._state)
                return
            self._previous_state = self._state
            self._state = STATE_PAUSED
            self._logger.info("Break scheduler paused during %s", self._previous_state)
            self._emit_locked(EVENT_STATE_CHANGE)

    def resume(self) -> None:
        with self._lock:
            if not self._running or self._state != STATE_PAUSED:
                self._logger.debug("Ignoring resume: running=%s state=%s", self._running, self._state)
                return
            self._state = self._previous_state
            self._logger.info("Break scheduler resumed into %s", self._state)
            if self._state in BREAK_STATES:
                self._emit_locked(
                    EVENT_STATE_CHANGE,
                    remaining=self._remaining,
                    progress=self._break_progress_locked(),
                    strict_mode=self._strict_locked(self._state),
                )
            else:
                self._emit_locked(
                    EVENT_STATE_CHANGE,
                    remaining=self._next_break_remaining_locked(),
                    progress=self._work_progress_locked(),
                )

    def update_config(self, config: ScheduleConfig) -> None:
        with self._lock:
            config = config.normalized()
            if self._idle_unsupported:
                config = config.without_idle_reset()
            self._config = config
            self._reset_work_timers_locked()
            self._logger.info(
                "Schedule updated: short=%ss/%ss enabled=%s long=%ss/%ss enabled=%s strict=%s idle=%s",
                config.short.interval_seconds,
                config.short.duration_seconds,
                config.short.enabled,
                config.long.interval_seconds,
                config.long.duration_seconds,
                config.long.enabled,
                config.long.strict_mode,
                config.idle.enabled,
            )

    def skip_break(self) -> None:
        with self._lock:
            if not self._running or self._state not in BREAK_STATES:
                self._logger.debug("Ignoring skip outside a break: state=%s", self._state)
                return
            self._logger.info("Skipping %s with %.1fs left", self._state, self._remaining)
            self._enter_work_locked()

    def force_break(self, kind: str) -> None:
        if kind not in BREAK_STATES:
            self._logger.debug("Ignoring force_break with invalid kind: %s", kind)
            return
        with self._lock:
            if not self._running or self._state != STATE_WORK:
                self._logger.debug(
                    "Ignoring force_break(%s): running=%s state=%s",
                    kind,
                    self._running,
                    self._state,
                )
                return
            self._logger.info("Forcing %s", kind)
            self._enter_break_locked(kind)

    def reset_for_idle(self) -> None:
        with self._lock:
            self._reset_work_timers_locked()

    def tick(self, now: Optional[float] = None) -> None:
        """Advance the state machine by one tick interval."""
        with self._lock:
            if not self._running or self._state == STATE_PAUSED:
                return
            if now is None:
                now = self._clock()

            if self._state == STATE_WORK:
                self._check_idle_locked(now)
                self._advance_work_locked(now)
            else:
                self._advance_break_locked()

    def _run(self) -> None:
        while not self._stop_event.wait(self._tick_interval):
            try:
                self.tick()
            except Exception as error:
                self._logger.error("Tick failed: %s", error, exc_info=True)

    def _check_idle_locked(self, now: float) -> None:
        policy = self._config.idle
        if not policy.enabled or self._idle_unsupported or self._idle_detector is None:
            return
        if (
            self._last_idle_check is not None
            and now - self._last_idle_check < policy.check_interval_seconds
        ):
            return
        self._last_idle_check = now

        try:
            idle_seconds = float(self._idle_detector.idle_seconds())
        except IdleDetectionUnsupported as error:
            self._idle_unsupported = True
            self._config = self._config.without_idle_reset()
            self._logger.warning("Idle detection unsupported, idle reset disabled: %s", error)
            self._emit_locked(EVENT_IDLE_ERROR, message=str(error) or "idle detection unsupported")
            return
        except Exception as error:
            self._logger.warning("Idle query failed: %s", error)
            self._emit_locked(EVENT_IDLE_ERROR, message=str(error) or type(error).__name__)
            return

        if idle_seconds >= policy.reset_after_seconds:
            self._reset_work_timers_locked()
            self._logger.info("User idle for %.0fs, work timers reset", idle_seconds)
            self._emit_locked(
                EVENT_IDLE_RESET,
                remaining=self._next_break_remaining_locked(),
                message="idle reset",
            )

    def _advance_work_locked(self, now: float) -> None:
        config = self._config
        if config.long.enabled:
            self._next_long -= self._tick_interval
        if config.short.enabled:
            self._next_short -= self._tick_interval

        if config.long.enabled and self._next_long <= 0:
            self._enter_break_locked(STATE_LONG_BREAK)
            return
        if config.short.enabled and self._next_short <= 0:
            self._enter_break_locked(STATE_SHORT_BREAK)
            return

        if (
            self._last_progress_at is None
            or now - self._last_progress_at >= self._tick_interval
        ):
            self._last_progress_at = now
            self._emit_locked(
                EVENT_PROGRESS,
                remaining=self._next_break_remaining_locked(),
                progress=self._work_progress_locked(),
            )

    def _advance_break_locked(self) -> None:
        self._remaining = max(0.0, self._remaining - self._tick_interval)
        if self._remaining > 0:
            self._emit_locked(
                EVENT_PROGRESS,
                remaining=self._remaining,
                progress=self._break_progress_locked(),
                strict_mode=self._strict_locked(self._state),
            )
            return
        self._logger.info("%s finished", self._state)
        self._enter_work_locked()

    def _enter_break_locked(self, state: str) -> None:
        self._state = state
        if state == STATE_LONG_BREAK:
            self._remaining = self._config.long.duration_seconds
            self._reset_work_timers_locked()
        else:
            self._remaining = self._config.short.duration_seconds
            self._next_short = self._config.short.interval_seconds
        self._logger.info("Entering %s for %.0fs", state, self._remaining)
        self._emit_locked(
            EVENT_STATE_CHANGE,
            remaining=self._remaining,
            strict_mode=self._strict_locked(state),
        )

    def _enter_work_locked(self) -> None:
        self._state = STATE_WORK
        self._remaining = 0.0
        self._reset_work_timers_locked()
        self._emit_locked(EVENT_STATE_CHANGE, remaining=self._next_break_remaining_locked())

    def _reset_work_timers_locked(self) -> None:
        self._next_short = self._config.short.interval_seconds
        self._next_long = self._config.long.interval_seconds

    def _active_break_locked(self) -> str:
        if self._state == STATE_PAUSED:
            return self._previous_state
        return self._state

    def _strict_locked(self, state: str) -> bool:
        return state == STATE_LONG_BREAK and self._config.long.strict_mode

    def _break_progress_locked(self) -> float:
        state = self._active_break_locked()
        if state == STATE_SHORT_BREAK:
            return break_progress(self._config.short.duration_seconds, self._remaining)
        if state == STATE_LONG_BREAK:
            return break_progress(self._config.long.duration_seconds, self._remaining)
        return 0.0

    def _next_break_remaining_locked(self) -> float:
        candidates = []
        if self._config.short.enabled:
            candidates.append(self._next_short)
        if self._config.long.enabled:
            candidates.append(self._next_long)
        if not candidates:
            return 0.0
        return max(0.0, min(candidates))

    def _work_progress_locked(self) -> float:
        short = self._config.short
        long = self._config.long
        if long.enabled and (not short.enabled or self._next_long <= self._next_short):
            return _fraction(long.interval_seconds - self._next_long, long.interval_seconds)
        if short.enabled:
            return _fraction(short.interval_seconds - self._next_short, short.interval_seconds)
        return 0.0

    def _emit_locked(
        self,
        kind: EventKind,
        *,
        remaining: float = 0.0,
        progress: float = 0.0,
        strict_mode: bool = False,
        message: Optional[str] = None,
    ) -> None:
        self._broadcaster.broadcast(
            SchedulerEvent(
                kind=kind,
                state=self._state,
                occurred_at=self._now_fn(),
                remaining_seconds=max(0.0, remaining),
                progress=progress,
                strict_mode=strict_mode,
                message=message,
            )
        )


def break_progress(duration_seconds: float, remaining_seconds: float) -> float:
    """Fraction of a break already elapsed, clamped to [0, 1]."""
    if duration_seconds <= 0:
        return 1.0
    return _fraction(duration_seconds - remaining_seconds, duration_seconds)


def _fraction(done: float, total: float) -> float:
    if total <= 0:
        return 0.0
    return min(1.0, max(0.0, done / total))

"""Scheduler event payloads and the non-blocking fan-out to observers."""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Iterator, Literal, Optional

from .constants import DEFAULT_SUBSCRIPTION_BUFFER
from .errors import SubscriptionClosed

SessionState = Literal["work", "short_break", "long_break", "paused"]
EventKind = Literal["state_change", "progress", "idle_reset", "idle_error"]


@dataclass(frozen=True)
class SchedulerEvent:
    """Immutable notification delivered to every subscriber."""
    kind: EventKind
    state: SessionState
    occurred_at: datetime
    remaining_seconds: float = 0.0
    progress: float = 0.0
    strict_mode: bool = False
    message: Optional[str] = None


_CLOSED = object()


class Subscription:
    """Bounded event queue owned by one observer.

    The scheduler only offers events without blocking; the observer reads with
    ``get`` or by iterating until the subscription is closed and drained.
    """

    def __init__(self, buffer_size: int = DEFAULT_SUBSCRIPTION_BUFFER):
        if buffer_size <= 0:
            buffer_size = DEFAULT_SUBSCRIPTION_BUFFER
        self._queue: queue.Queue = queue.Queue(maxsize=buffer_size)
        self._closed = threading.Event()
        self._dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    @property
    def dropped(self) -> int:
        """Number of events lost because the buffer was full."""
        return self._dropped

    @property
    def buffer_size(self) -> int:
        return self._queue.maxsize

    def offer(self, event: SchedulerEvent) -> bool:
        if self._closed.is_set():
            return False
        try:
            self._queue.put_nowait(event)
        except queue.Full:
            self._dropped += 1
            return False
        return True

    def get(self, timeout: Optional[float] = None) -> SchedulerEvent:
        """Return the next event.

        Raises ``SubscriptionClosed`` once closed and drained, and
        ``queue.Empty`` when ``timeout`` expires first.
        """
        try:
            item = self._queue.get_nowait()
        except queue.Empty:
            if self._closed.is_set():
                raise SubscriptionClosed("subscription closed") from None
            item = self._queue.get(timeout=timeout)
        if item is _CLOSED:
            raise SubscriptionClosed("subscription closed")
        return item

    def close(self) -> None:
        if self._closed.is_set():
            return
        self._closed.set()
        # Wakes a blocked reader; a full queue means the reader is not blocked.
        try:
            self._queue.put_nowait(_CLOSED)
        except queue.Full:
            pass

    def __iter__(self) -> Iterator[SchedulerEvent]:
        while True:
            try:
                yield self.get()
            except SubscriptionClosed:
                return


class EventBroadcaster:
    """Thread-safe registry of subscriptions with best-effort delivery."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger("timekeeper.events")
        self._lock = threading.Lock()
        self._subscriptions: list[Subscription] = []
        self._closed = False

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def subscribe(self, buffer_size: int = DEFAULT_SUBSCRIPTION_BUFFER) -> Subscription:
        subscription = Subscription(buffer_size)
        with self._lock:
            if self._closed:
                subscription.close()
                self._logger.debug("Subscription requested after close; returned closed")
                return subscription
            self._subscriptions.append(subscription)
        return subscription

    def broadcast(self, event: SchedulerEvent) -> int:
        """Offer ``event`` to every subscriber and return how many accepted it."""
        with self._lock:
            subscriptions = tuple(self._subscriptions)

        delivered = 0
        for subscription in subscriptions:
            if subscription.offer(event):
                delivered += 1
            else:
                self._logger.debug(
                    "Dropped %s event for a full subscriber (dropped=%d)",
                    event.kind,
                    subscription.dropped,
                )
        return delivered

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            subscriptions = self._subscriptions
            self._subscriptions = []

        for subscription in subscriptions:
            subscription.close()

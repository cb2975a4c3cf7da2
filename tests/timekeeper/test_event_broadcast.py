import datetime as dt
import queue
import threading
import unittest

from timekeeper import (
    BreakSchedule,
    BreakScheduler,
    EventBroadcaster,
    ScheduleConfig,
    SchedulerEvent,
    Subscription,
    SubscriptionClosed,
)

_NOW = dt.datetime(2026, 3, 2, 9, 0, tzinfo=dt.timezone.utc)


def _event(remaining: float = 0.0) -> SchedulerEvent:
    return SchedulerEvent(
        kind="progress",
        state="work",
        occurred_at=_NOW,
        remaining_seconds=remaining,
    )


class SubscriptionTests(unittest.TestCase):
    def test_full_buffer_drops_instead_of_blocking(self) -> None:
        subscription = Subscription(buffer_size=1)

        self.assertTrue(subscription.offer(_event(1.0)))
        self.assertFalse(subscription.offer(_event(2.0)))

        self.assertEqual(1, subscription.dropped)
        self.assertEqual(1.0, subscription.get(timeout=0).remaining_seconds)

    def test_non_positive_buffer_uses_default(self) -> None:
        self.assertEqual(1, Subscription(buffer_size=0).buffer_size)

    def test_get_times_out_with_queue_empty(self) -> None:
        subscription = Subscription(buffer_size=4)
        with self.assertRaises(queue.Empty):
            subscription.get(timeout=0.01)

    def test_close_drains_buffered_events_then_ends(self) -> None:
        subscription = Subscription(buffer_size=4)
        subscription.offer(_event(3.0))
        subscription.offer(_event(2.0))

        subscription.close()

        self.assertFalse(subscription.offer(_event(1.0)))
        self.assertEqual([3.0, 2.0], [event.remaining_seconds for event in subscription])
        with self.assertRaises(SubscriptionClosed):
            subscription.get(timeout=0)

    def test_close_with_full_buffer_still_ends_iteration(self) -> None:
        subscription = Subscription(buffer_size=1)
        subscription.offer(_event(5.0))

        subscription.close()

        self.assertEqual([5.0], [event.remaining_seconds for event in subscription])

    def test_close_wakes_blocked_reader(self) -> None:
        subscription = Subscription(buffer_size=2)
        outcome: list[str] = []

        def reader() -> None:
            try:
                subscription.get(timeout=5.0)
            except SubscriptionClosed:
                outcome.append("closed")

        thread = threading.Thread(target=reader)
        thread.start()
        subscription.close()
        thread.join(timeout=5.0)

        self.assertFalse(thread.is_alive())
        self.assertEqual(["closed"], outcome)


class EventBroadcasterTests(unittest.TestCase):
    def test_broadcast_reaches_every_subscriber(self) -> None:
        broadcaster = EventBroadcaster()
        first = broadcaster.subscribe(4)
        second = broadcaster.subscribe(4)

        delivered = broadcaster.broadcast(_event(7.0))

        self.assertEqual(2, delivered)
        self.assertEqual(2, broadcaster.subscriber_count)
        self.assertEqual(7.0, first.get(timeout=0).remaining_seconds)
        self.assertEqual(7.0, second.get(timeout=0).remaining_seconds)

    def test_slow_subscriber_does_not_affect_others(self) -> None:
        broadcaster = EventBroadcaster()
        slow = broadcaster.subscribe(1)
        fast = broadcaster.subscribe(16)

        for remaining in range(10):
            broadcaster.broadcast(_event(float(remaining)))

        self.assertEqual(9, slow.dropped)
        self.assertEqual(10, len([fast.get(timeout=0) for _ in range(10)]))

    def test_close_ends_all_subscriptions(self) -> None:
        broadcaster = EventBroadcaster()
        subscription = broadcaster.subscribe(4)

        broadcaster.close()

        self.assertTrue(subscription.closed)
        self.assertEqual(0, broadcaster.subscriber_count)
        self.assertEqual(0, broadcaster.broadcast(_event()))
        self.assertTrue(broadcaster.subscribe(4).closed)


class SchedulerFanOutTests(unittest.TestCase):
    def test_unread_subscriber_never_blocks_ticks(self) -> None:
        scheduler = BreakScheduler(
            ScheduleConfig(),
            run_tick_loop=False,
            now_fn=lambda: _NOW,
        )
        stalled = scheduler.subscribe()
        scheduler.start()

        for now in range(1, 1001):
            scheduler.tick(now=float(now))

        self.assertEqual("short_break", scheduler.snapshot().state)
        self.assertGreater(stalled.dropped, 0)
        first = stalled.get(timeout=0)
        self.assertEqual("state_change", first.kind)
        self.assertEqual("work", first.state)

    def test_tick_loop_thread_reaches_a_break(self) -> None:
        config = ScheduleConfig(
            short=BreakSchedule(interval_seconds=0.05, duration_seconds=0.05),
        )
        scheduler = BreakScheduler(config, tick_interval_seconds=0.01)
        subscription = scheduler.subscribe(1024)
        scheduler.start()
        try:
            states = []
            while "short_break" not in states:
                event = subscription.get(timeout=5.0)
                if event.kind == "state_change":
                    states.append(event.state)
        finally:
            scheduler.stop(timeout_seconds=2.0)

        self.assertEqual(["work", "short_break"], states[:2])
        self.assertFalse(scheduler.is_running)


if __name__ == "__main__":
    unittest.main()

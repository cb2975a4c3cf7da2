import datetime as dt
import queue
import unittest

from timekeeper import (
    BreakScheduler,
    IdleDetectionError,
    IdleDetectionUnsupported,
    IdleResetPolicy,
    ScheduleConfig,
    SubscriptionClosed,
)

_NOW = dt.datetime(2026, 3, 2, 9, 0, tzinfo=dt.timezone.utc)


class _FakeIdleDetector:
    def __init__(self, *results) -> None:
        self._results = list(results)
        self.calls = 0

    def idle_seconds(self) -> float:
        self.calls += 1
        result = self._results[min(self.calls, len(self._results)) - 1]
        if isinstance(result, Exception):
            raise result
        return result


def _scheduler(detector, idle: IdleResetPolicy | None = None) -> BreakScheduler:
    return BreakScheduler(
        ScheduleConfig(idle=idle or IdleResetPolicy()),
        idle_detector=detector,
        run_tick_loop=False,
        now_fn=lambda: _NOW,
    )


def _drain(subscription) -> list:
    events = []
    while True:
        try:
            events.append(subscription.get(timeout=0))
        except (queue.Empty, SubscriptionClosed):
            return events


class IdleResetTests(unittest.TestCase):
    def test_idle_beyond_threshold_resets_work_timers(self) -> None:
        detector = _FakeIdleDetector(10.0, 10.0, 400.0)
        scheduler = _scheduler(detector)
        subscription = scheduler.subscribe(256)
        scheduler.start()

        for now in range(1, 11):
            scheduler.tick(now=float(now))
        self.assertEqual(890.0, scheduler.snapshot().next_short_seconds)

        scheduler.tick(now=11.0)

        self.assertEqual(3, detector.calls)
        self.assertEqual(899.0, scheduler.snapshot().next_short_seconds)
        resets = [event for event in _drain(subscription) if event.kind == "idle_reset"]
        self.assertEqual(1, len(resets))
        self.assertEqual(900.0, resets[0].remaining_seconds)
        self.assertEqual("work", resets[0].state)

    def test_idle_query_respects_check_interval(self) -> None:
        detector = _FakeIdleDetector(0.0)
        scheduler = _scheduler(detector, IdleResetPolicy(check_interval_seconds=5.0))
        scheduler.start()

        for now in range(1, 7):
            scheduler.tick(now=float(now))

        self.assertEqual(2, detector.calls)

    def test_idle_not_queried_during_break_or_pause(self) -> None:
        detector = _FakeIdleDetector(0.0)
        scheduler = _scheduler(detector, IdleResetPolicy(check_interval_seconds=1.0))
        scheduler.start()

        scheduler.force_break("short_break")
        scheduler.tick(now=1.0)
        scheduler.skip_break()
        scheduler.pause()
        scheduler.tick(now=2.0)

        self.assertEqual(0, detector.calls)

    def test_disabled_policy_never_queries(self) -> None:
        detector = _FakeIdleDetector(10_000.0)
        scheduler = _scheduler(detector, IdleResetPolicy(enabled=False))
        scheduler.start()

        for now in range(1, 20):
            scheduler.tick(now=float(now * 10))

        self.assertEqual(0, detector.calls)

    def test_unsupported_detector_reports_once_and_disables_queries(self) -> None:
        detector = _FakeIdleDetector(IdleDetectionUnsupported("no X11 display"))
        scheduler = _scheduler(detector)
        subscription = scheduler.subscribe(256)
        scheduler.start()

        for now in range(1, 21):
            scheduler.tick(now=float(now * 10))

        errors = [event for event in _drain(subscription) if event.kind == "idle_error"]
        self.assertEqual(1, len(errors))
        self.assertEqual("no X11 display", errors[0].message)
        self.assertEqual(1, detector.calls)
        self.assertFalse(scheduler.config.idle.enabled)

    def test_unsupported_latch_survives_config_update(self) -> None:
        detector = _FakeIdleDetector(IdleDetectionUnsupported("unsupported"))
        scheduler = _scheduler(detector)
        scheduler.start()
        scheduler.tick(now=1.0)

        scheduler.update_config(ScheduleConfig(idle=IdleResetPolicy(enabled=True)))
        for now in range(2, 30):
            scheduler.tick(now=float(now * 10))

        self.assertFalse(scheduler.config.idle.enabled)
        self.assertEqual(1, detector.calls)

    def test_transient_failure_reports_and_keeps_querying(self) -> None:
        detector = _FakeIdleDetector(IdleDetectionError("xprintidle timed out"))
        scheduler = _scheduler(detector, IdleResetPolicy(check_interval_seconds=1.0))
        subscription = scheduler.subscribe(256)
        scheduler.start()

        for now in range(1, 4):
            scheduler.tick(now=float(now))

        errors = [event for event in _drain(subscription) if event.kind == "idle_error"]
        self.assertEqual(3, len(errors))
        self.assertEqual(3, detector.calls)
        self.assertTrue(scheduler.config.idle.enabled)
        self.assertEqual(897.0, scheduler.snapshot().next_short_seconds)

    def test_set_idle_detector_swaps_backend(self) -> None:
        scheduler = _scheduler(None, IdleResetPolicy(check_interval_seconds=1.0))
        scheduler.start()
        scheduler.tick(now=1.0)

        detector = _FakeIdleDetector(0.0)
        scheduler.set_idle_detector(detector)
        scheduler.tick(now=2.0)

        self.assertEqual(1, detector.calls)


if __name__ == "__main__":
    unittest.main()

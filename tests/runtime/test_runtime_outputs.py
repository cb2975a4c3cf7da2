import datetime as dt
import json
import tempfile
import unittest
from pathlib import Path

from runtime.journal import EventJournal
from runtime.messages import format_remaining, snapshot_status_message, status_message
from runtime.ui import RuntimeUIPublisher, scheduler_event_payload
from timekeeper import SchedulerEvent, SchedulerSnapshot

_NOW = dt.datetime(2026, 3, 2, 9, 0, tzinfo=dt.timezone.utc)


class _RecordingUIServer:
    def __init__(self) -> None:
        self.published: list[tuple[str, dict]] = []

    def publish(self, event_type: str, **payload) -> None:
        self.published.append((event_type, payload))


def _snapshot(**overrides) -> SchedulerSnapshot:
    values = {
        "running": True,
        "state": "work",
        "previous_state": "work",
        "remaining_seconds": 0.0,
        "next_short_seconds": 125.0,
        "next_long_seconds": 2000.0,
        "next_break_seconds": 125.0,
        "strict_mode": False,
        "break_progress": 0.0,
    }
    values.update(overrides)
    return SchedulerSnapshot(**values)


class StatusMessageTests(unittest.TestCase):
    def test_format_remaining_uses_minutes_and_seconds(self) -> None:
        self.assertEqual("14:59", format_remaining(899.4))
        self.assertEqual("00:00", format_remaining(-5))
        self.assertEqual("60:00", format_remaining(3600))

    def test_status_message_per_state(self) -> None:
        self.assertEqual("next break in 02:05", status_message("work", 125))
        self.assertEqual("short break: 00:15 left", status_message("short_break", 15))
        self.assertEqual(
            "long break: 05:00 left (strict)",
            status_message("long_break", 300, strict_mode=True),
        )
        self.assertEqual("paused", status_message("paused", 40))

    def test_snapshot_status_message(self) -> None:
        self.assertEqual("not started", snapshot_status_message(_snapshot(running=False)))
        self.assertEqual("next break in 02:05", snapshot_status_message(_snapshot()))
        self.assertEqual(
            "short break: 00:09 left",
            snapshot_status_message(_snapshot(state="short_break", remaining_seconds=9.0)),
        )


class RuntimeUIPublisherTests(unittest.TestCase):
    def test_scheduler_event_maps_to_websocket_type(self) -> None:
        server = _RecordingUIServer()
        publisher = RuntimeUIPublisher(server)
        event = SchedulerEvent(
            kind="state_change",
            state="long_break",
            occurred_at=_NOW,
            remaining_seconds=300.0,
            strict_mode=True,
        )

        publisher.publish_scheduler_event(event)

        self.assertEqual(1, len(server.published))
        event_type, payload = server.published[0]
        self.assertEqual("state", event_type)
        self.assertEqual("long_break", payload["state"])
        self.assertEqual(300.0, payload["remaining_seconds"])
        self.assertTrue(payload["strict_mode"])
        self.assertEqual("long break: 05:00 left (strict)", payload["status"])
        self.assertEqual(_NOW.isoformat(), payload["occurred_at"])
        self.assertNotIn("message", payload)

    def test_idle_error_payload_carries_message(self) -> None:
        event = SchedulerEvent(
            kind="idle_error",
            state="work",
            occurred_at=_NOW,
            message="xprintidle not found",
        )

        payload = scheduler_event_payload(event)

        self.assertEqual("xprintidle not found", payload["message"])

    def test_publisher_without_server_is_a_no_op(self) -> None:
        publisher = RuntimeUIPublisher(None)
        publisher.publish("state", state="work")


class EventJournalTests(unittest.TestCase):
    def test_records_one_json_line_per_event(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "logs" / "events.jsonl"
            journal = EventJournal(path)

            journal.record(
                SchedulerEvent(
                    kind="state_change",
                    state="short_break",
                    occurred_at=_NOW,
                    remaining_seconds=15.0,
                )
            )
            journal.record(
                SchedulerEvent(
                    kind="idle_reset",
                    state="work",
                    occurred_at=_NOW,
                    remaining_seconds=900.0,
                    message="idle reset",
                )
            )
            journal.close()
            journal.close()

            lines = path.read_text(encoding="utf-8").splitlines()

        self.assertEqual(2, len(lines))
        first = json.loads(lines[0])
        second = json.loads(lines[1])
        self.assertEqual("state_change", first["event"])
        self.assertEqual("short_break", first["state"])
        self.assertEqual(15.0, first["remaining_seconds"])
        self.assertEqual(_NOW.isoformat(), first["ts"])
        self.assertNotIn("message", first)
        self.assertEqual("idle reset", second["message"])

    def test_write_failure_is_logged_not_raised(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            blocker = Path(temp_dir) / "not_a_dir"
            blocker.write_text("", encoding="utf-8")
            journal = EventJournal(blocker / "events.jsonl")

            with self.assertLogs("runtime.journal", level="ERROR"):
                journal.record(SchedulerEvent(kind="progress", state="work", occurred_at=_NOW))


if __name__ == "__main__":
    unittest.main()

import asyncio
import json
import threading
import types
import unittest

from server.config import UIServerConfig
from server.service import UIServer


class UIServerMessageTests(unittest.TestCase):
    def test_command_reply_wraps_handler_payload(self) -> None:
        calls = []

        def handler(command, arguments):
            calls.append((command, arguments))
            return {"command": command, "accepted": True, "reason": "accepted"}

        server = UIServer(UIServerConfig(), command_handler=handler)

        reply = json.loads(server._handle_client_message('{"command": "pause_for", "minutes": 5}'))

        self.assertEqual([("pause_for", {"minutes": 5})], calls)
        self.assertEqual("command_result", reply["type"])
        self.assertTrue(reply["accepted"])

    def test_invalid_json_produces_error_event(self) -> None:
        server = UIServer(UIServerConfig(), command_handler=lambda c, a: {})

        reply = json.loads(server._handle_client_message("{oops"))

        self.assertEqual("error", reply["type"])
        self.assertIn("Invalid JSON", reply["message"])

    def test_missing_handler_produces_error_event(self) -> None:
        server = UIServer(UIServerConfig())

        reply = json.loads(server._handle_client_message('{"command": "start"}'))

        self.assertEqual("error", reply["type"])
        self.assertEqual("start", reply["command"])

    def test_failing_handler_produces_error_event(self) -> None:
        def handler(command, arguments):
            raise RuntimeError("boom")

        server = UIServer(UIServerConfig())
        server.set_command_handler(handler)

        reply = json.loads(server._handle_client_message('{"command": "start"}'))

        self.assertEqual("error", reply["type"])
        self.assertIn("boom", reply["message"])

    def test_publish_without_running_loop_keeps_sticky_state(self) -> None:
        server = UIServer(UIServerConfig())

        server.publish("state", state="short_break", remaining_seconds=15.0)
        server.publish("hello", message="ignored")

        sticky = [json.loads(item) for item in server._sticky_events.snapshot()]
        self.assertEqual(1, len(sticky))
        self.assertEqual("short_break", sticky[0]["state"])


class _FakeConnection:
    def __init__(self, messages=()) -> None:
        self.request = types.SimpleNamespace(path="/ws")
        self.remote_address = ("127.0.0.1", 50000)
        self.sent: list[str] = []
        self._messages = list(messages)

    async def send(self, message: str) -> None:
        self.sent.append(message)

    async def close(self, code: int = 1000, reason: str = "") -> None:
        return None

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for message in self._messages:
            yield message


class UIServerConcurrencyTests(unittest.TestCase):
    def test_slow_command_does_not_stall_broadcasts(self) -> None:
        entered = threading.Event()
        release = threading.Event()
        finished = threading.Event()

        def handler(command, arguments):
            entered.set()
            release.wait(2.0)
            finished.set()
            return {"command": command, "accepted": True, "reason": "accepted"}

        server = UIServer(UIServerConfig(), command_handler=handler)
        commanding = _FakeConnection(['{"command": "stop"}'])
        watching = _FakeConnection()

        async def scenario() -> bool:
            task = asyncio.create_task(server._handler(commanding))
            for _ in range(200):
                if entered.is_set():
                    break
                await asyncio.sleep(0.01)
            server._connected_clients.add(watching)
            await asyncio.wait_for(server._broadcast('{"type":"progress"}'), timeout=1.0)
            broadcast_while_blocked = not finished.is_set()
            release.set()
            await asyncio.wait_for(task, timeout=5.0)
            return broadcast_while_blocked

        self.assertTrue(asyncio.run(scenario()))
        self.assertEqual(['{"type":"progress"}'], watching.sent)
        self.assertEqual("hello", json.loads(commanding.sent[0])["type"])
        self.assertEqual("command_result", json.loads(commanding.sent[-1])["type"])


class UIServerRoutingTests(unittest.TestCase):
    def _status(self, path: str):
        server = UIServer(UIServerConfig())
        request = types.SimpleNamespace(path=path)
        return asyncio.run(server._process_request(None, request))

    def test_healthz_returns_ok(self) -> None:
        response = self._status("/healthz")
        self.assertEqual(200, response.status_code)
        self.assertEqual(b"ok\n", response.body)

    def test_websocket_path_passes_through(self) -> None:
        self.assertIsNone(self._status("/ws?client=tray"))

    def test_unknown_path_returns_not_found(self) -> None:
        self.assertEqual(404, self._status("/index.html").status_code)


if __name__ == "__main__":
    unittest.main()

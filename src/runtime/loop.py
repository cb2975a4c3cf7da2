"""Runtime orchestration that drives the scheduler and fans its events out."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol

from contracts.ui_protocol import EVENT_ERROR
from timekeeper import BreakScheduler, SchedulerEvent
from timekeeper.constants import EVENT_IDLE_ERROR, EVENT_IDLE_RESET, EVENT_STATE_CHANGE

from .commands import CommandDispatcher
from .journal import EventJournal
from .messages import event_status_message
from .ui import RuntimeUIPublisher, UIServerLike, command_result_payload

DEFAULT_EVENT_BUFFER = 64


class UIServerControl(UIServerLike, Protocol):
    def stop(self, timeout_seconds: float = 5.0) -> None:
        ...


@dataclass(frozen=True)
class RuntimeBootstrap:
    """Dependency bundle required to construct the runtime engine."""
    logger: logging.Logger
    scheduler: BreakScheduler
    ui_server: Optional[UIServerControl] = None
    journal: Optional[EventJournal] = None
    event_buffer: int = DEFAULT_EVENT_BUFFER


class RuntimeEngine:
    """Starts the scheduler and forwards its events until the stream closes."""
    def __init__(self, bootstrap: RuntimeBootstrap):
        self._bootstrap = bootstrap
        self._logger = bootstrap.logger
        self._scheduler = bootstrap.scheduler
        self._ui = RuntimeUIPublisher(bootstrap.ui_server)
        self._dispatcher = CommandDispatcher(
            self._scheduler,
            logger=self._logger.getChild("commands"),
        )
        self._subscription = self._scheduler.subscribe(bootstrap.event_buffer)

    @property
    def dispatcher(self) -> CommandDispatcher:
        return self._dispatcher

    def handle_command(self, command: str, arguments: Mapping[str, Any]) -> dict[str, Any]:
        """Entry point for UI clients; returns the payload of a command_result event."""
        return command_result_payload(self._dispatcher.dispatch(command, arguments))

    def request_stop(self) -> None:
        self._dispatcher.cancel_pending()
        self._scheduler.stop()

    def run(self) -> int:
        try:
            self._scheduler.start()
            self._logger.info("Break reminders running")
            for event in self._subscription:
                self._handle_event(event)
            self._logger.info("Event stream closed")
            return 0
        except KeyboardInterrupt:
            self._logger.info("Shutdown requested by keyboard interrupt.")
            return 0
        except Exception as error:
            self._logger.error("Unexpected error: %s", error, exc_info=True)
            self._ui.publish(EVENT_ERROR, message=f"Runtime failed: {error}")
            return 1
        finally:
            self._shutdown()

    def _handle_event(self, event: SchedulerEvent) -> None:
        if event.kind == EVENT_STATE_CHANGE:
            self._logger.info("State -> %s (%s)", event.state, event_status_message(event))
        elif event.kind == EVENT_IDLE_RESET:
            self._logger.info("Idle reset: %s", event_status_message(event))
        elif event.kind == EVENT_IDLE_ERROR:
            self._logger.warning("Idle detection error: %s", event.message)

        self._ui.publish_scheduler_event(event)
        journal = self._bootstrap.journal
        if journal is not None:
            journal.record(event)

    def _shutdown(self) -> None:
        self._dispatcher.cancel_pending()
        self._scheduler.stop()

        ui_server = self._bootstrap.ui_server
        if ui_server is not None:
            self._logger.info("Stopping UI server...")
            try:
                ui_server.stop(timeout_seconds=5.0)
            except Exception as error:
                self._logger.error("Error stopping UI server: %s", error, exc_info=True)

        journal = self._bootstrap.journal
        if journal is not None:
            journal.close()

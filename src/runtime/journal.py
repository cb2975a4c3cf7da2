"""Append-only JSON Lines journal of scheduler events."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import IO, Any, Optional

from timekeeper import SchedulerEvent


class EventJournal:
    """Writes one JSON object per scheduler event; failures are logged, not raised."""

    def __init__(self, path: str | Path, logger: Optional[logging.Logger] = None):
        self._path = Path(path)
        self._logger = logger or logging.getLogger("runtime.journal")
        self._lock = threading.Lock()
        self._file: Optional[IO[str]] = None

    @property
    def path(self) -> Path:
        return self._path

    def record(self, event: SchedulerEvent) -> None:
        entry: dict[str, Any] = {
            "ts": event.occurred_at.isoformat(),
            "event": event.kind,
            "state": event.state,
            "remaining_seconds": round(event.remaining_seconds, 3),
            "progress": round(event.progress, 4),
            "strict_mode": event.strict_mode,
        }
        if event.message:
            entry["message"] = event.message
        self._write(entry)

    def close(self) -> None:
        with self._lock:
            if self._file is None:
                return
            try:
                self._file.close()
            except OSError as error:
                self._logger.warning("Failed to close journal %s: %s", self._path, error)
            finally:
                self._file = None

    def _write(self, entry: dict[str, Any]) -> None:
        line = json.dumps(entry, ensure_ascii=False)
        with self._lock:
            try:
                if self._file is None:
                    self._path.parent.mkdir(parents=True, exist_ok=True)
                    self._file = open(self._path, "a", encoding="utf-8")
                self._file.write(line + "\n")
                self._file.flush()
            except OSError as error:
                self._logger.error("Failed to write journal %s: %s", self._path, error)

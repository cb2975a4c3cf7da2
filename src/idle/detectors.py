"""Platform idle detectors satisfying the scheduler's idle query contract."""

from __future__ import annotations

import logging
import shutil
import subprocess
from typing import Optional

from timekeeper import IdleDetectionError, IdleDetectionUnsupported

XPRINTIDLE_BINARY = "xprintidle"


class XprintidleDetector:
    """Reads X11 idle time in milliseconds from the ``xprintidle`` helper."""

    def __init__(
        self,
        binary_path: str,
        *,
        timeout_seconds: float = 2.0,
        logger: Optional[logging.Logger] = None,
    ):
        self._binary_path = binary_path
        self._timeout_seconds = timeout_seconds
        self._logger = logger or logging.getLogger("idle.xprintidle")

    def idle_seconds(self) -> float:
        try:
            completed = subprocess.run(
                [self._binary_path],
                capture_output=True,
                text=True,
                timeout=self._timeout_seconds,
                check=True,
            )
        except FileNotFoundError as error:
            raise IdleDetectionUnsupported(f"xprintidle not found: {error}") from error
        except subprocess.TimeoutExpired as error:
            raise IdleDetectionError(
                f"xprintidle timed out after {self._timeout_seconds:.1f}s"
            ) from error
        except subprocess.CalledProcessError as error:
            stderr = (error.stderr or "").strip()
            raise IdleDetectionError(
                f"xprintidle exited with {error.returncode}: {stderr}"
            ) from error

        raw = completed.stdout.strip()
        try:
            idle_millis = int(raw)
        except ValueError as error:
            raise IdleDetectionError(f"parse idle milliseconds: {raw!r}") from error
        self._logger.debug("User idle for %dms", idle_millis)
        return max(0, idle_millis) / 1000.0


class UnsupportedIdleDetector:
    """Fallback used where no idle backend exists."""

    def idle_seconds(self) -> float:
        raise IdleDetectionUnsupported("idle detection unsupported")


def find_xprintidle() -> Optional[str]:
    return shutil.which(XPRINTIDLE_BINARY)

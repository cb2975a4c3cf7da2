"""Collaborator protocols consumed by the break scheduler."""

from __future__ import annotations

from typing import Protocol


class IdleDetector(Protocol):
    """Protocol for platform adapters reporting time since last user input.

    Implementations raise ``IdleDetectionUnsupported`` when the platform cannot
    answer at all, and any other exception for transient failures.
    """
    def idle_seconds(self) -> float:
        ...

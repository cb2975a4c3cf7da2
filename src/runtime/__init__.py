"""Runtime engine exports."""

from .commands import CommandDispatcher, CommandResult
from .journal import EventJournal
from .loop import RuntimeBootstrap, RuntimeEngine

__all__ = [
    "CommandDispatcher",
    "CommandResult",
    "EventJournal",
    "RuntimeBootstrap",
    "RuntimeEngine",
]

"""Break scheduling core: state machine, schedule config, and event fan-out."""

from .config import BreakSchedule, IdleResetPolicy, LongBreakSchedule, ScheduleConfig
from .contracts import IdleDetector
from .errors import (
    IdleDetectionError,
    IdleDetectionUnsupported,
    SubscriptionClosed,
    TimekeeperError,
)
from .events import (
    EventBroadcaster,
    EventKind,
    SchedulerEvent,
    SessionState,
    Subscription,
)
from .service import BreakScheduler, SchedulerSnapshot, break_progress

__all__ = [
    "BreakSchedule",
    "BreakScheduler",
    "EventBroadcaster",
    "EventKind",
    "IdleDetectionError",
    "IdleDetectionUnsupported",
    "IdleDetector",
    "IdleResetPolicy",
    "LongBreakSchedule",
    "ScheduleConfig",
    "SchedulerEvent",
    "SchedulerSnapshot",
    "SessionState",
    "Subscription",
    "SubscriptionClosed",
    "TimekeeperError",
    "break_progress",
]

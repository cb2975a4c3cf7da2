class TimekeeperError(Exception):
    """Base exception for break scheduler integrations."""


class IdleDetectionError(TimekeeperError):
    """Raised when an idle query fails transiently."""


class IdleDetectionUnsupported(IdleDetectionError):
    """Raised when idle detection is not available on this platform."""


class SubscriptionClosed(TimekeeperError):
    """Raised when reading from a subscription that was closed and drained."""

"""Platform adapters answering "how long since the last user input"."""

from .detectors import UnsupportedIdleDetector, XprintidleDetector, find_xprintidle
from .providers import build_idle_detector

__all__ = [
    "UnsupportedIdleDetector",
    "XprintidleDetector",
    "build_idle_detector",
    "find_xprintidle",
]

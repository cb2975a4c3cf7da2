"""Factory for building the idle detector available on this system."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from timekeeper import IdleDetector

from .detectors import UnsupportedIdleDetector, XprintidleDetector, find_xprintidle


def build_idle_detector(
    *,
    enabled: bool,
    logger: logging.Logger,
) -> Optional[IdleDetector]:
    """Pick an idle backend; unsupported platforms get a detector that says so once."""
    if not enabled:
        logger.info("Idle reset disabled")
        return None

    if sys.platform.startswith("linux"):
        binary_path = find_xprintidle()
        if binary_path:
            logger.info("Idle detection via %s", binary_path)
            return XprintidleDetector(binary_path, logger=logger.getChild("xprintidle"))
        logger.warning("xprintidle not found; idle reset will be disabled")
    else:
        logger.warning("No idle backend for platform %s", sys.platform)

    return UnsupportedIdleDetector()

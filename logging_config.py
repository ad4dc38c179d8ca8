"""Centralized logging configuration."""
from __future__ import annotations

import sys

from loguru import logger

log_format = " | ".join(
    (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</>",
        "<lvl>{level:<8}</>",
        "<c>{name}:{function}:{line}</>",
        "{message}",
    )
)


def configure_logging(level: str = "INFO") -> None:
    """Replace loguru's default sink with a formatted stderr sink."""
    logger.remove()
    logger.add(sys.stderr, format=log_format, level=level.upper())

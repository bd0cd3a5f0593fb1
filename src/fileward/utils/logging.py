"""structlog configuration helpers."""

from __future__ import annotations

import logging
import sys

import structlog

__all__ = ["configure_logging"]


def _stderr_logger(*args: object) -> structlog.PrintLogger:
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(level: str | int = "WARNING") -> None:
    """Configure structlog with a minimum level.

    Args:
        level: Level name ("DEBUG", "INFO", ...) or numeric logging level.
    """

    if isinstance(level, str):
        numeric = logging.getLevelName(level.upper())
        if not isinstance(numeric, int):
            raise ValueError(f"Unknown log level: {level}")
    else:
        numeric = level

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric),
        # Resolve stderr per logger so redirected streams are honoured
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )

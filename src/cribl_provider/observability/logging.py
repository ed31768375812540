"""structlog configuration for the CLI."""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import Any

import structlog


class LogLevel(StrEnum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def configure_logging(
    *, json_output: bool = False, level: LogLevel | str = LogLevel.INFO
) -> None:
    """Configure structlog to render through the stdlib logging module.

    Raises ``ValueError`` for a *level* that is not a ``LogLevel`` name.
    """
    logging.basicConfig(format="%(message)s", level=LogLevel(level.upper()))
    processors: list[Any] = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
    )

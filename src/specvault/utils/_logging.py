"""Logging utilities for specvault.

This module provides standalone structlog logger factories. Each logger is
self-contained and does not modify global structlog configuration; components
receive their logger by injection.
"""

import logging
import sys
from os import getenv
from pathlib import Path
from typing import Literal, cast

import structlog
from structlog.typing import FilteringBoundLogger

__all__ = ["LogFormatType", "create_logger", "get_null_logger", "log_level_from_string"]

LogFormatType = Literal["json", "text"]


def log_level_from_string(level: str, *, respect_env: bool = True) -> int:
    """Convert a log level string to a logging level integer.

    Args:
        level: Log level string (debug, info, warning, error).
        respect_env: If True, SPECVAULT_DEBUG overrides to DEBUG level.

    Returns:
        The logging level as an integer. Unknown names map to INFO.
    """
    if respect_env and getenv("SPECVAULT_DEBUG", None):
        return logging.DEBUG

    log_levels = logging.getLevelNamesMapping()
    return log_levels.get(level.upper(), logging.INFO)


def create_logger(
    *,
    level: str = "info",
    log_format: LogFormatType = "json",
    log_file: str = "",
) -> FilteringBoundLogger:
    """Create a standalone structlog logger.

    The log level can be overridden by the SPECVAULT_DEBUG environment
    variable, which forces DEBUG regardless of ``level``.

    Args:
        level: Log level threshold (debug, info, warning, error).
        log_format: Output format, either "json" or "text".
        log_file: Path to a log file opened in append mode. Empty writes
            to stderr.

    Returns:
        A configured FilteringBoundLogger instance.
    """
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger_factory = structlog.WriteLoggerFactory(file=log_path.open("a"))
    else:
        logger_factory = structlog.WriteLoggerFactory(file=sys.stderr)

    processors: list[structlog.typing.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if log_format == "json":
        processors.append(structlog.processors.dict_tracebacks)
        processors.append(structlog.processors.JSONRenderer())
    else:
        # "timestamp [level] event key=value ..."
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    wrapper_class = structlog.make_filtering_bound_logger(log_level_from_string(level))

    return cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            logger_factory(),
            processors=processors,
            wrapper_class=wrapper_class,
            context_class=dict,
        ),
    )


def get_null_logger() -> FilteringBoundLogger:
    """Return a logger that drops every event."""
    return cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            structlog.ReturnLogger(),
            processors=[],
            wrapper_class=structlog.make_filtering_bound_logger(logging.CRITICAL),
            context_class=dict,
        ),
    )

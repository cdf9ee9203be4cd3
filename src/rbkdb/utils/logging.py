"""
utils/logging.py — structlog setup shared by the CLI and the library.

structlog renders each event (console or JSON, per RBK_DB_LOG_FORMAT) and
hands the finished line to a named stdlib logger, whose root handler writes
to stderr. stdout is left to command output such as the completion script.

Usage:
    from rbkdb.utils.logging import configure_logging, get_logger

    configure_logging(log_level="DEBUG")
    log = get_logger(__name__, pipeline="dump")
    log.info("dump_start", database="rebrickable.db")
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from rbkdb.config import settings


def configure_logging(
    log_level: str | None = None,
    log_format: str | None = None,
) -> None:
    """
    Route structlog and stdlib logging to stderr at *log_level*.

    Safe to call again; the latest call wins. Arguments left as None fall
    back to settings.log_level and settings.log_format.
    """
    level_name = (log_level or settings.log_level).upper()
    level = getattr(logging, level_name, logging.INFO)
    json_output = (log_format or settings.log_format) == "json"

    # force=True replaces handlers from an earlier call (or from a test runner).
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level, force=True)

    renderer: Any
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            # Needs the named loggers from stdlib.LoggerFactory below.
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str, **initial_values: Any) -> structlog.BoundLogger:
    """Return the structlog logger *name*, pre-bound with *initial_values*."""
    logger = structlog.get_logger(name)
    if initial_values:
        logger = logger.bind(**initial_values)
    return logger  # type: ignore[return-value]

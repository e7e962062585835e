"""Structured logging for the progression engine.

The engine only logs at the edges of its rules: data problems found while
folding ability effects, snapshots that reference unknown abilities, and
similar recoverable conditions. Callers own the output format; this module
offers a sensible default.

Example:
    >>> from progression.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.warning("ability_unknown", ability_id="fireball")
"""

from __future__ import annotations

import logging
import sys

import structlog
from structlog.types import EventDict, Processor, WrappedLogger


def add_engine_context(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Tag every entry with the engine name."""
    event_dict.setdefault("engine", "progression")
    return event_dict


def configure_logging(*, level: str = "INFO", json_format: bool = False) -> None:
    """Configure structlog for console (development) or JSON output.

    Args:
        level: The logging level name (DEBUG, INFO, WARNING, ...).
        json_format: Emit one JSON object per line instead of coloured text.
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_engine_context,
        structlog.processors.StackInfoRenderer(),
    ]

    if json_format:
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(
                colors=False,
                exception_formatter=structlog.dev.plain_traceback,
            ),
        ]

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Return a structlog logger bound to ``name`` (typically ``__name__``)."""
    if name:
        return structlog.get_logger(name)
    return structlog.get_logger()

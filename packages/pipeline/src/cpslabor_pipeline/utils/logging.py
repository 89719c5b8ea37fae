"""
utils/logging.py — structlog setup for pipeline runs.

Output is JSON lines or a console rendering (settings.log_format), always on
stderr. configure_logging() is called once by the CLI; library modules just
call structlog.get_logger(__name__).

Usage:
    from cpslabor_pipeline.utils.logging import bind_run_context, configure_logging, get_logger

    configure_logging(log_level="DEBUG")
    bind_run_context(scheme="arrival-cohort")     # carried by every later event
    get_logger(__name__).warning("records_excluded", year=2020, excluded=118)
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from cpslabor_shared.config import settings


def _renderer(fmt: str) -> Any:
    if fmt == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(
    log_level: str | None = None,
    log_format: str | None = None,
) -> None:
    """
    Configure structlog for a pipeline process. Safe to call more than once.

    Args:
        log_level:  Overrides settings.log_level.
        log_format: Overrides settings.log_format ("json" or "console").
    """
    level = logging.getLevelName((log_level or settings.log_level).upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _renderer(log_format or settings.log_format),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def bind_run_context(**values: Any) -> None:
    """Replace the per-run context merged into every event (scheme, extract, ...)."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**values)


def get_logger(name: str, **initial_values: Any) -> structlog.typing.FilteringBoundLogger:
    """structlog logger for name, with initial_values bound if given."""
    logger = structlog.get_logger(name)
    return logger.bind(**initial_values) if initial_values else logger

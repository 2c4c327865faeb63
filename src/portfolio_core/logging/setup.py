"""Structured logging setup with structlog.

The engine itself never configures logging; callers (an app, a notebook, the
test suite) call ``setup_logging`` once and every ``portfolio_core`` logger
follows. Events are rendered by a single stdlib handler on the root logger,
so engine events and third-party stdlib records share one format.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Callable, TextIO

import structlog

if TYPE_CHECKING:
    from portfolio_core.config.schema import LoggingConfig

RENDERERS: dict[str, Callable[[], structlog.types.Processor]] = {
    "json": lambda: structlog.processors.JSONRenderer(sort_keys=True),
    "console": structlog.dev.ConsoleRenderer,
}


def _event_processors() -> list[structlog.types.Processor]:
    """Enrichment applied to every engine event before rendering."""
    return [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]


def _root_handler(renderer: structlog.types.Processor, stream: TextIO | None) -> logging.Handler:
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )
    return handler


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    stream: TextIO | None = None,
) -> None:
    """Route structlog through one root handler.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: "json" for machine-readable output, "console" for humans.
        stream: Destination stream, stderr when omitted.

    Raises:
        ValueError: *log_format* is not a known renderer.
    """
    try:
        renderer = RENDERERS[log_format]()
    except KeyError:
        raise ValueError(f"log_format must be one of {tuple(RENDERERS)}, got {log_format!r}") from None

    structlog.configure(
        processors=_event_processors(),
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        # Module-level loggers must pick up a later reconfiguration
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    root.handlers[:] = [_root_handler(renderer, stream)]
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


def setup_logging_from_config(config: LoggingConfig) -> None:
    """Apply a ``LoggingConfig`` section."""
    setup_logging(level=config.level, log_format=config.format)


def get_logger(name: str | None = None, **initial_context) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger, optionally pre-bound with context."""
    logger = structlog.get_logger(name)
    return logger.bind(**initial_context) if initial_context else logger

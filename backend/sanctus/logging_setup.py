"""Structured logging with per-request context.

Configures structlog for console output in development and JSON output in
production. Request hooks bind a request id, method and path into the
structlog contextvars so every event logged while serving a request
carries them.
"""

import logging
import sys
import uuid
from typing import Any

import structlog
from structlog.types import EventDict, Processor


def add_logger_name(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add logger name to log entry.

    Args:
        logger: Logger instance.
        method_name: Method name (unused).
        event_dict: Event dictionary to modify.

    Returns:
        EventDict: Modified event dictionary with logger name.
    """
    event_dict["logger"] = logger.name if hasattr(logger, "name") else "sanctus"
    return event_dict


def configure_logging(level: str = "INFO", fmt: str = "console") -> None:
    """Configure structured logging for the application.

    Args:
        level: Standard logging level name (e.g. "INFO").
        fmt: "console" for coloured development output, anything else for JSON.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if fmt == "console":
        renderer: Processor = structlog.dev.ConsoleRenderer(colors=False)
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )

    # Configure standard logging for third-party libraries
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Optional logger name. If not provided, uses 'sanctus'.
    """
    return structlog.get_logger(name or "sanctus")


def bind_request_context(method: str, path: str, request_id: str | None = None) -> str:
    """Bind request-scoped fields; returns the request id used."""
    request_id = request_id or f"req_{uuid.uuid4().hex[:12]}"
    structlog.contextvars.bind_contextvars(request_id=request_id, method=method, path=path)
    return request_id


def clear_request_context() -> None:
    """Clear all context variables so nothing leaks between requests."""
    structlog.contextvars.clear_contextvars()

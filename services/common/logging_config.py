"""
Centralized logging configuration for the meetings calendar services.

This module provides consistent logging setup including:
- Structured logging with JSON format
- Request ID propagation from the caller's context
- A readable text format for local debugging

Usage:
    from services.common.logging_config import setup_service_logging

    setup_service_logging(
        service_name="meetings",
        log_level="INFO",
        log_format="json"
    )
"""

import logging
import sys
from contextvars import ContextVar

import structlog

# Set by callers (API layer, workers) so engine logs carry their correlation id
request_id_var: ContextVar[str] = ContextVar("request_id", default="uninitialized")

_RESERVED_KEYS = ("timestamp", "level", "logger", "event", "service", "request_id")


def add_request_context(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: structlog.types.EventDict,
) -> structlog.types.EventDict:
    """Add the request ID to all log entries when one is set."""
    request_id = request_id_var.get()
    if request_id and request_id != "uninitialized":
        event_dict["request_id"] = request_id
    return event_dict


def add_service_context(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: structlog.types.EventDict,
) -> structlog.types.EventDict:
    """Derive the service name from a logger path like "services.meetings.x"."""
    logger_name = event_dict.get("logger", "")
    if logger_name.startswith("services."):
        service_parts = logger_name.split(".")
        if len(service_parts) >= 2:
            event_dict.setdefault("service", service_parts[1])
    return event_dict


class EnhancedTextRenderer:
    """Text renderer for local debugging."""

    def __init__(self, service_name: str):
        self.service_name = service_name

    def __call__(
        self,
        logger: structlog.types.WrappedLogger,
        method_name: str,
        event_dict: structlog.types.EventDict,
    ) -> str:
        timestamp = event_dict.get("timestamp", "")
        level = str(event_dict.get("level", "info")).upper()
        service = event_dict.get("service", self.service_name)
        logger_name = str(event_dict.get("logger", ""))
        if logger_name.startswith("services."):
            logger_name = logger_name[len("services.") :]

        request_id = event_dict.get("request_id", "")
        request_suffix = f"[{request_id[-4:]}]" if request_id else ""

        parts = [
            timestamp,
            f"[{service}]",
            f"[{level}]",
            request_suffix,
            logger_name,
            f"- {event_dict.get('event', '')}",
        ]

        extra_context = []
        for key, value in event_dict.items():
            if key in _RESERVED_KEYS:
                continue
            if isinstance(value, (str, int, float, bool)):
                extra_context.append(f"{key}={value}")
            else:
                extra_context.append(f"{key}={str(value)[:150]}")
        if extra_context:
            parts.append(f"| {', '.join(extra_context)}")

        return " ".join(filter(None, parts))


def setup_service_logging(
    service_name: str,
    log_level: str = "INFO",
    log_format: str = "json",
) -> None:
    """
    Set up logging configuration for a service.

    Args:
        service_name: Name of the service (e.g., "meetings")
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: Format type ("json" or "text")
    """
    processors: list = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        add_request_context,
        add_service_context,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(EnhancedTextRenderer(service_name))

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # structlog output is already rendered
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        handlers=[handler],
        force=True,
    )

    get_logger(__name__).info(
        f"Logging configured for {service_name}",
        log_level=log_level,
        log_format=log_format,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)

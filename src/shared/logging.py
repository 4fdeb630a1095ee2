"""
Structured logging using structlog with:
- JSON/console switchable format
- Correlation ID + request context via contextvars
- Phone number (MSISDN) masking
"""

from __future__ import annotations

import logging
import re
import sys
from typing import Any

import structlog


# ---------------------------------------------------------------------
# PII redaction
# ---------------------------------------------------------------------


class PhoneRedactionProcessor:
    """
    Structlog processor masking phone numbers inside event_dict (recursively).
    Keeps the first two and the last four characters: 15551234567 -> 15****4567.
    Only fields named in ``fields`` are touched so wamids and UUIDs stay intact.
    """

    P_MSISDN = re.compile(r"^\+?[1-9]\d{7,14}$")

    def __init__(self, fields: tuple[str, ...] = ("to", "from_number", "to_number", "recipient_id", "phone_number")):
        self.fields = set(fields)

    def __call__(self, logger, method_name, event_dict):
        for key in self.fields & event_dict.keys():
            event_dict[key] = self._mask(event_dict[key])
        return event_dict

    def _mask(self, value: Any) -> Any:
        if isinstance(value, str) and self.P_MSISDN.match(value):
            return f"{value[:2]}****{value[-4:]}"
        return value


# ---------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------


def configure_logging(log_level: str = "INFO", json_logs: bool = True, cache_loggers: bool = True) -> None:
    """
    Configure structured logging for the application.

    Sets up structlog with processors for:
    - Merging contextvars (correlation_id, path, method)
    - Adding logger name, level and ISO timestamp
    - Masking phone numbers
    - JSON formatting (production) or console (development)

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Whether to output JSON format (True for prod, False for dev)
        cache_loggers: Freeze each logger on first use; off when tests swap processors
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
        force=True,
    )

    # Quiet noisy libraries
    for noisy in ("httpx", "httpcore", "sqlalchemy.engine", "aiosqlite"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        PhoneRedactionProcessor(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=cache_loggers,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Usage:
        logger = get_logger(__name__)
        logger.info("webhook_received", webhook_id=str(webhook.id))
    """
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context variables to all subsequent log entries of this task."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()

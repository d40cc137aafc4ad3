"""Structured logging with tx_id support.

Uses structlog for structured logging with JSON or console output.
The id of the transaction being executed is bound through structlog's
context variables, so every entry logged during the transaction carries it.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog


def get_tx_id() -> str:
    """Transaction id bound to the current context ("" outside a transaction)."""
    return structlog.contextvars.get_contextvars().get("tx_id", "")


def set_tx_id(tx_id: str) -> None:
    """Bind *tx_id* for every log entry in this context; "" unbinds it."""
    if tx_id:
        structlog.contextvars.bind_contextvars(tx_id=tx_id)
    else:
        structlog.contextvars.unbind_contextvars("tx_id")


def setup_logging(
    level: str = "INFO",
    format: str = "json",
) -> None:
    """Configure structured logging for the host.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        format: "json" for production, "console" for development.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger for a module."""
    return structlog.get_logger(name)

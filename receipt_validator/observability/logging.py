"""
Structured logging for the receipt validator.

Every entry carries service/version, the bound request_id, and never the
receipt blob itself.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from receipt_validator.config import settings

# Keys that may hold a base64 receipt; only their length is kept
RECEIPT_KEYS = frozenset({"receipt_data", "receiptData", "receipt-data"})


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Stamp service name and version."""
    event_dict["service"] = settings.service_name
    event_dict["version"] = settings.api_version
    return event_dict


def redact_receipt_data(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Replace receipt blobs with their length."""
    for key in RECEIPT_KEYS & event_dict.keys():
        value = event_dict.pop(key)
        event_dict["receipt_length"] = len(value) if isinstance(value, str) else 0
    return event_dict


def build_processors(log_level: str, log_format: str) -> list[Processor]:
    """Processor chain for the given level and output format."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_app_context,
        redact_receipt_data,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    # Tracebacks as structured dicts when debugging, flat strings otherwise
    if log_level.upper() == "DEBUG":
        processors.append(structlog.processors.ExceptionRenderer())
    else:
        processors.append(structlog.processors.format_exc_info)

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    return processors


def setup_logging() -> None:
    """
    Configure structlog on top of stdlib logging.

    A verify call in JSON format looks like:
    {
        "event": "apple_receipt_verified",
        "level": "info",
        "logger": "receipt_validator.services.apple_receipt_verifier",
        "environment": "Sandbox",
        "status": 0,
        "request_id": "3f2a...",
        ...
    }
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper()),
    )

    structlog.configure(
        processors=build_processors(settings.log_level, settings.log_format),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Module logger, e.g. ``logger = get_logger(__name__)``."""
    return structlog.get_logger(name)  # type: ignore[no-any-return]


class log_context:
    """
    Bind fields to every log entry emitted inside the block.

    The request middleware wraps each request in
    ``with log_context(request_id=...)``.
    """

    def __init__(self, **kwargs: Any) -> None:
        self.context = kwargs

    def __enter__(self) -> None:
        structlog.contextvars.bind_contextvars(**self.context)

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        structlog.contextvars.unbind_contextvars(*self.context.keys())

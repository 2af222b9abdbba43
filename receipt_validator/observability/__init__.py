"""
Observability module - Logging, Metrics, and Tracing.
"""

from receipt_validator.observability.logging import get_logger, log_context, setup_logging
from receipt_validator.observability.metrics import metrics
from receipt_validator.observability.tracing import setup_tracing

__all__ = [
    "get_logger",
    "log_context",
    "setup_logging",
    "metrics",
    "setup_tracing",
]

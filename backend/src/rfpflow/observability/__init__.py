"""Observability: structured logging, correlation ids and Prometheus metrics."""

from .correlation import get_correlation_id, set_correlation_id, generate_correlation_id
from .logging_config import configure_logging

__all__ = [
    "configure_logging",
    "generate_correlation_id",
    "get_correlation_id",
    "set_correlation_id",
]

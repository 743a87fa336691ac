"""Observability: logging configuration, correlation IDs and request middleware."""

from course_ingest.observability.correlation import (
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from course_ingest.observability.logger import configure_logging

__all__ = [
    "configure_logging",
    "set_correlation_id",
    "get_correlation_id",
    "clear_correlation_id",
]

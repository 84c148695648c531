"""
Logging and run correlation for the ingestion pipeline.

Exports: configure_logging, CorrelationIdFilter, set_correlation_id,
get_correlation_id, clear_correlation_id
"""

from .correlation import clear_correlation_id, get_correlation_id, set_correlation_id
from .logger import CorrelationIdFilter, configure_logging

__all__ = [
    "configure_logging",
    "CorrelationIdFilter",
    "set_correlation_id",
    "get_correlation_id",
    "clear_correlation_id",
]

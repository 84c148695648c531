"""
Lambda helpers: event parsing and environment configuration.
"""

from .config import resolve_database_url, validate_environment
from .event_parser import parse_s3_event, parse_s3_record

__all__ = [
    "parse_s3_event",
    "parse_s3_record",
    "resolve_database_url",
    "validate_environment",
]

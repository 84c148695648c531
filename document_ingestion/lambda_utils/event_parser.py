"""
S3 upload event parsing utilities for Lambda.
"""

import json
import logging
from typing import Any, Dict, List
from urllib.parse import unquote_plus

from pydantic import ValidationError

from document_ingestion.exceptions import MessageParseError
from document_ingestion.models import IngestionRequest

logger = logging.getLogger(__name__)


def _unwrap_records(record: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Return the S3 records carried by one event record.

    S3 can notify Lambda directly, or through SQS, in which case the S3
    event is a JSON string in the SQS record body:
    {"body": "{\"Records\": [{\"eventSource\": \"aws:s3\", ...}]}"}
    """
    body = record.get("body")
    if body is None:
        return [record]

    s3_event = json.loads(body)
    if "Records" in s3_event:
        return s3_event.get("Records") or []
    return [s3_event]


def parse_s3_record(record: Dict[str, Any]) -> IngestionRequest:
    """
    Parse one S3 event record.

    {
        "awsRegion": "us-east-1",
        "eventSource": "aws:s3",
        "s3": {
            "bucket": {"name": "bucket-name"},
            "object": {"key": "uploads/report+2024.pdf", "size": 1024}
        }
    }

    Object keys arrive URL-encoded (spaces as "+") and are decoded here.
    """
    event_source = record.get("eventSource")
    if event_source is not None and event_source != "aws:s3":
        raise MessageParseError(
            f"Invalid event source: {event_source}",
            details={"eventSource": event_source},
        )

    try:
        s3_info = record["s3"]
        bucket = s3_info["bucket"]["name"]
        key = unquote_plus(s3_info["object"]["key"])
        return IngestionRequest(
            document_key=key,
            storage_location=bucket,
            region=record.get("awsRegion"),
        )
    except (KeyError, TypeError) as e:
        raise MessageParseError(f"Missing S3 event field: {e}") from e
    except ValidationError as e:
        raise MessageParseError(f"Invalid S3 event record: {e}") from e


def parse_s3_event(event: Dict[str, Any]) -> List[IngestionRequest]:
    """
    Parse an S3 upload notification into ingestion requests, one per record.

    Raises:
        MessageParseError: Event has no records or a record is malformed
    """
    if not isinstance(event, dict):
        raise MessageParseError(f"Event must be an object, got {type(event).__name__}")

    records = event.get("Records")
    if not records:
        raise MessageParseError("No records in event")

    requests: List[IngestionRequest] = []
    try:
        for record in records:
            for s3_record in _unwrap_records(record):
                requests.append(parse_s3_record(s3_record))
    except json.JSONDecodeError as e:
        logger.error("parse_s3_event - JSONDecodeError: %s", e)
        raise MessageParseError(f"Invalid JSON in message body: {e}") from e
    except AttributeError as e:
        raise MessageParseError(f"Invalid S3 event format: {e}") from e

    if not requests:
        raise MessageParseError("No S3 records in event")

    logger.info(
        "parse_s3_event - Parsed S3 event",
        extra={"document_keys": [r.document_key for r in requests]},
    )
    return requests

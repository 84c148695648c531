"""
Lambda handler for S3-triggered document ingestion.

Runs each uploaded document through the ingestion pipeline:
fetch → stage → parse → chunk → tag → embed → upsert to S3 Vectors.

Environment variables:
- DOC_INGEST_VECTORS_BUCKET: S3 Vectors bucket name
- DOC_INGEST_DATABASE_URL: PostgreSQL connection string
- DOC_INGEST_DB_SECRET_ARN: Secret holding the database password (optional)
- DOC_INGEST_AWS_REGION: AWS region
- DOC_INGEST_LOG_LEVEL: Logging level

Dependencies: lambda_utils, entrypoint
System role: Lambda entry point for document ingestion
"""

import asyncio
import json
import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

# Load environment variables from .env if present
load_dotenv()

from .configs import get_pipeline_settings
from .entrypoint import DocumentPipeline
from .exceptions import MessageParseError
from .lambda_utils import parse_s3_event, resolve_database_url, validate_environment
from .models import PipelineResult
from .observability import configure_logging

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_pipeline() -> DocumentPipeline:
    """
    Build the pipeline once per warm container.

    Raises:
        ValueError: Missing required environment variable
    """
    settings = resolve_database_url(get_pipeline_settings())
    validate_environment(settings)
    return DocumentPipeline(settings)


def build_response(results: List[PipelineResult]) -> Dict[str, Any]:
    """Aggregate per-document results into the Lambda response."""
    failed_count = sum(1 for r in results if not r.succeeded)
    return {
        "statusCode": 200 if failed_count == 0 else 500,
        "body": json.dumps(
            {
                "processed": len(results) - failed_count,
                "failed": failed_count,
                "results": [r.to_body() for r in results],
            },
            default=str,
        ),
    }


async def handle_event(
    event: Dict[str, Any],
    pipeline: Optional[DocumentPipeline] = None,
) -> Dict[str, Any]:
    """
    Process every document in an S3 upload event, one after another.

    A failed document does not stop the rest of the batch; the response
    status is 500 when any of them failed.

    Args:
        event: S3 notification event
        pipeline: Pipeline to use (cached default if None)

    Returns:
        Dict with statusCode and a JSON body of per-document results
    """
    try:
        requests = parse_s3_event(event)
    except MessageParseError as e:
        logger.error("handle_event - MessageParseError: %s", e)
        payload = event if isinstance(event, dict) else {"raw": repr(event)}
        return build_response([PipelineResult.failure(document_key="", error=e, event=payload)])

    if pipeline is None:
        try:
            pipeline = get_pipeline()
        except Exception as e:
            logger.error("handle_event - Pipeline setup failed: %s: %s", type(e).__name__, e)
            return build_response(
                [
                    PipelineResult.failure(document_key=r.document_key, error=e, event=event)
                    for r in requests
                ]
            )

    results = []
    for request in requests:
        results.append(await pipeline.process(request, event=event))

    return build_response(results)


def _log_level() -> str:
    """Configured log level; INFO when settings are invalid, which setup reports per record."""
    try:
        return get_pipeline_settings().log_level
    except ValidationError:
        return "INFO"


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Lambda handler for S3 upload events.

    Args:
        event: S3 notification event with Records array
        context: Lambda context object

    Returns:
        Dict with statusCode and body
    """
    configure_logging(_log_level())
    logger.info(
        "handler - Received S3 event",
        extra={"record_count": len(event.get("Records") or []) if isinstance(event, dict) else 0},
    )
    return asyncio.run(handle_event(event))

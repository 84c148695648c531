"""
S3 document download task.

Reads the uploaded document's bytes from S3. The blocking boto3 call runs
in a worker thread under an explicit timeout so the event loop stays free
for the concurrent metadata lookup.

Dependencies: boto3
System role: First stage of document ingestion pipeline (S3 source)
"""

import asyncio
import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from document_ingestion.exceptions import FetchError

logger = logging.getLogger(__name__)


class S3DownloadTask:
    """Download document bytes from S3."""

    def __init__(self, region: str = "us-east-1", timeout: float = 30.0) -> None:
        """
        Initialize S3 download task.

        Args:
            region: Default AWS region when the request carries none
            timeout: Seconds allowed for one download
        """
        self._region = region
        self._timeout = timeout
        self._clients: dict[str, object] = {}

    def _get_client(self, region: str):
        if region not in self._clients:
            self._clients[region] = boto3.client("s3", region_name=region)
        return self._clients[region]

    def _get_object_bytes(self, bucket: str, key: str, region: str) -> bytes:
        response = self._get_client(region).get_object(Bucket=bucket, Key=key)
        return response["Body"].read()

    async def download(self, bucket: str, key: str, region: str | None = None) -> bytes:
        """
        Download an object's bytes.

        Args:
            bucket: S3 bucket name
            key: S3 object key
            region: Bucket region (task default if None)

        Returns:
            bytes: Object content

        Raises:
            FetchError: When the object is missing, unreadable or the call times out
        """
        if not key:
            raise FetchError("S3 key is required", details={"bucket": bucket})

        details = {"bucket": bucket, "key": key}
        try:
            content = await asyncio.wait_for(
                asyncio.to_thread(self._get_object_bytes, bucket, key, region or self._region),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as e:
            raise FetchError(
                f"Timed out after {self._timeout}s downloading from S3", details
            ) from e
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code in ("404", "NoSuchKey"):
                raise FetchError(f"File not found in S3: {key}", details) from e
            raise FetchError(f"Failed to download from S3: {e}", details) from e
        except BotoCoreError as e:
            raise FetchError(f"Failed to download from S3: {e}", details) from e

        logger.info(
            "download - Downloaded document",
            extra={"bucket": bucket, "key": key, "size_bytes": len(content)},
        )
        return content

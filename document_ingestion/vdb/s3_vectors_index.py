"""
S3 Vectors index client for ingestion upserts.

Writes precomputed vectors with put_vectors. Records are keyed, so writing
a key that already exists overwrites it. Text is stored under the metadata
key LangChain's AmazonS3Vectors reads page content from, so retrieval code
built on langchain_aws can query the same index.

Dependencies: boto3
System role: Vector index boundary (S3 Vectors)
"""

import asyncio
import logging
from typing import Protocol, Sequence

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from document_ingestion.exceptions import VectorStoreError
from document_ingestion.models import VectorRecord

logger = logging.getLogger(__name__)

PAGE_CONTENT_METADATA_KEY = "_page_content"
MAX_VECTORS_PER_REQUEST = 500


class VectorIndexClient(Protocol):
    """Upserts vector records into a named collection."""

    async def upsert(self, collection: str, records: Sequence[VectorRecord]) -> None: ...


class S3VectorsIndex:
    """Vector index client for one S3 Vectors bucket."""

    def __init__(
        self,
        vectors_bucket: str,
        region: str = "us-east-1",
        credentials_profile_name: str | None = None,
        timeout: float = 30.0,
        batch_size: int = MAX_VECTORS_PER_REQUEST,
    ) -> None:
        """
        Initialize S3 Vectors client.

        Args:
            vectors_bucket: S3 Vectors bucket name
            region: AWS region for S3 Vectors
            credentials_profile_name: Optional AWS profile
            timeout: Seconds allowed for one put_vectors call
            batch_size: Vectors per put_vectors call (at most 500)

        Raises:
            ValueError: When vectors_bucket is empty
        """
        if not vectors_bucket:
            raise ValueError("vectors_bucket cannot be empty")

        self._vectors_bucket = vectors_bucket
        self._timeout = timeout
        self._batch_size = min(batch_size, MAX_VECTORS_PER_REQUEST)

        session = boto3.session.Session(profile_name=credentials_profile_name)
        self._client = session.client("s3vectors", region_name=region)

    @staticmethod
    def _to_vector(record: VectorRecord) -> dict:
        return {
            "key": record.key,
            "data": {"float32": [float(value) for value in record.embedding]},
            "metadata": {**record.metadata, PAGE_CONTENT_METADATA_KEY: record.text},
        }

    def _put_vectors(self, collection: str, vectors: list[dict]) -> None:
        self._client.put_vectors(
            vectorBucketName=self._vectors_bucket,
            indexName=collection,
            vectors=vectors,
        )

    async def upsert(self, collection: str, records: Sequence[VectorRecord]) -> None:
        """
        Write records into an index, overwriting records with the same key.

        Args:
            collection: Index name within the bucket
            records: Records to write

        Raises:
            VectorStoreError: When a put_vectors call fails or times out
        """
        for start in range(0, len(records), self._batch_size):
            batch = [self._to_vector(record) for record in records[start : start + self._batch_size]]
            details = {
                "bucket": self._vectors_bucket,
                "index": collection,
                "batch_start": start,
                "batch_size": len(batch),
            }
            try:
                await asyncio.wait_for(
                    asyncio.to_thread(self._put_vectors, collection, batch),
                    timeout=self._timeout,
                )
            except asyncio.TimeoutError as e:
                raise VectorStoreError(
                    f"put_vectors timed out after {self._timeout}s", "upsert", details
                ) from e
            except (ClientError, BotoCoreError) as e:
                raise VectorStoreError(
                    f"Failed to upsert into S3 Vectors: {e}", "upsert", details
                ) from e

        logger.info(
            "upsert - Upserted vectors",
            extra={"bucket": self._vectors_bucket, "index": collection, "count": len(records)},
        )

"""
Embedding and upsert coordination for tagged chunks.

Embeds tagged chunks and upserts (vector, text, metadata) records into the
configured vector index collection. Record keys derive from the document id
and the chunk position, so ingesting the same document again overwrites its
records instead of duplicating them.

Dependencies: hashlib, document_ingestion.tasks.embedding_task, document_ingestion.vdb
System role: Final stage of document ingestion pipeline
"""

import hashlib
import logging
from typing import Any, Sequence

from document_ingestion.exceptions import VectorStoreError
from document_ingestion.models import Chunk, VectorRecord
from document_ingestion.vdb import VectorIndexClient

from .embedding_task import EmbeddingTask

logger = logging.getLogger(__name__)

# Source-position fields worth keeping; loader metadata such as the staged
# file path or PDF producer is dropped to stay under index metadata limits.
SOURCE_POSITION_KEYS = ("page",)


def generate_record_key(document_id: str, chunk_index: int) -> str:
    """
    Generate a deterministic record key.

    Args:
        document_id: Document identifier
        chunk_index: Position of the chunk in the document

    Returns:
        str: SHA-256 hex digest prefix (32 chars)
    """
    return hashlib.sha256(f"{document_id}:{chunk_index}".encode()).hexdigest()[:32]


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (str, int, float, bool))


class VectorStoreTask:
    """Embed tagged chunks and upsert them into the vector index."""

    def __init__(
        self,
        embedding_task: EmbeddingTask,
        vector_index: VectorIndexClient,
        collection: str = "documents",
    ) -> None:
        """
        Initialize vector store task.

        Args:
            embedding_task: Embedding generator
            vector_index: Vector index client
            collection: Collection (index name) receiving the records

        Raises:
            ValueError: When collection is empty
        """
        if not collection:
            raise ValueError("collection cannot be empty")

        self._embedding_task = embedding_task
        self._vector_index = vector_index
        self._collection = collection

    def _sanitize_metadata(self, chunk: Chunk, chunk_index: int) -> dict[str, Any]:
        """Flatten chunk metadata to scalar values the index can filter on."""
        metadata = {
            key: chunk.source_position[key]
            for key in SOURCE_POSITION_KEYS
            if _is_scalar(chunk.source_position.get(key))
        }
        metadata.update({key: value for key, value in chunk.metadata.items() if _is_scalar(value)})
        metadata["chunk_index"] = chunk_index
        return metadata

    def build_records(
        self,
        chunks: Sequence[Chunk],
        vectors: Sequence[list[float]],
        document_id: str,
    ) -> list[VectorRecord]:
        return [
            VectorRecord(
                key=generate_record_key(document_id, index),
                embedding=vector,
                text=chunk.text,
                metadata=self._sanitize_metadata(chunk, index),
            )
            for index, (chunk, vector) in enumerate(zip(chunks, vectors))
        ]

    async def embed_and_store(self, chunks: Sequence[Chunk], document_id: str) -> list[str]:
        """
        Embed chunks and upsert them as vector records.

        Args:
            chunks: Tagged chunks in document order
            document_id: Document identifier used for record keys

        Returns:
            list[str]: Record keys written, in chunk order

        Raises:
            EmbeddingServiceError: When embedding fails
            VectorStoreError: When the upsert fails
        """
        if not chunks:
            logger.warning(
                "embed_and_store - No chunks to store",
                extra={"document_id": document_id},
            )
            return []

        vectors = await self._embedding_task.embed([chunk.text for chunk in chunks])
        records = self.build_records(chunks, vectors, document_id)

        try:
            await self._vector_index.upsert(self._collection, records)
        except VectorStoreError:
            raise
        except Exception as e:
            raise VectorStoreError(
                f"Failed to upsert vectors: {e}",
                "upsert",
                {"document_id": document_id, "chunk_count": len(records)},
            ) from e

        logger.info(
            "embed_and_store - Stored chunks",
            extra={
                "document_id": document_id,
                "chunk_count": len(records),
                "collection": self._collection,
            },
        )
        return [record.key for record in records]

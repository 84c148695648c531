"""
Embedding generation task using Amazon Bedrock embeddings.

Embeds chunk texts in batches through a LangChain Embeddings client, each
batch bounded by a timeout.

Dependencies: langchain_aws, langchain_core
System role: Embedding half of the fifth pipeline stage
"""

import asyncio
import logging

from langchain_aws import BedrockEmbeddings
from langchain_core.embeddings import Embeddings

from document_ingestion.exceptions import EmbeddingServiceError

logger = logging.getLogger(__name__)


class EmbeddingTask:
    """Generate embedding vectors for chunk texts."""

    def __init__(
        self,
        embeddings: Embeddings,
        batch_size: int = 100,
        timeout: float = 60.0,
    ) -> None:
        """
        Initialize embedding task.

        Args:
            embeddings: LangChain embeddings client
            batch_size: Number of texts per embedding request
            timeout: Seconds allowed for one batch request

        Raises:
            ValueError: When batch_size is not positive
        """
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")

        self._embeddings = embeddings
        self._batch_size = batch_size
        self._timeout = timeout

    @classmethod
    def for_bedrock(
        cls,
        model_id: str = "amazon.titan-embed-text-v2:0",
        region: str = "us-east-1",
        credentials_profile_name: str | None = None,
        batch_size: int = 100,
        timeout: float = 60.0,
    ) -> "EmbeddingTask":
        """
        Build an embedding task backed by Bedrock.

        Raises:
            ValueError: When model_id is empty
        """
        if not model_id:
            raise ValueError("model_id cannot be empty")

        embeddings = BedrockEmbeddings(
            model_id=model_id,
            region_name=region,
            credentials_profile_name=credentials_profile_name,
        )
        return cls(embeddings, batch_size=batch_size, timeout=timeout)

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """
        Generate embeddings for texts, preserving order.

        Args:
            texts: Chunk texts to embed

        Returns:
            list[list[float]]: One vector per text

        Raises:
            EmbeddingServiceError: When a request fails, times out or returns
                the wrong number of vectors
        """
        vectors: list[list[float]] = []
        for start in range(0, len(texts), self._batch_size):
            batch = texts[start : start + self._batch_size]
            details = {"batch_start": start, "batch_size": len(batch)}
            try:
                batch_vectors = await asyncio.wait_for(
                    self._embeddings.aembed_documents(batch),
                    timeout=self._timeout,
                )
            except asyncio.TimeoutError as e:
                raise EmbeddingServiceError(
                    f"Embedding request timed out after {self._timeout}s", details
                ) from e
            except Exception as e:
                raise EmbeddingServiceError(f"Failed to generate embeddings: {e}", details) from e

            if len(batch_vectors) != len(batch):
                raise EmbeddingServiceError(
                    "Embedding service returned a different number of vectors",
                    {**details, "vector_count": len(batch_vectors)},
                )
            vectors.extend(batch_vectors)

        logger.info("embed - Generated embeddings", extra={"vector_count": len(vectors)})
        return vectors

"""
Ownership tagging for document chunks.

Dependencies: document_ingestion.models
System role: Fourth stage of document ingestion pipeline
"""

from typing import Iterable

from document_ingestion.models import Chunk

FILE_ID_KEY = "fileId"
USER_ID_KEY = "userId"


def tag(chunks: Iterable[Chunk], file_id: str, user_id: str) -> list[Chunk]:
    """
    Annotate chunks with their owning document and user.

    Returns new chunks; text, order and count are unchanged and the input
    chunks are left untouched.

    Args:
        chunks: Chunks produced by the chunking task
        file_id: Document identifier from the metadata store
        user_id: Owner identifier from the metadata store

    Returns:
        list[Chunk]: Tagged copies of the chunks
    """
    return [
        chunk.model_copy(
            update={"metadata": {**chunk.metadata, FILE_ID_KEY: file_id, USER_ID_KEY: user_id}}
        )
        for chunk in chunks
    ]

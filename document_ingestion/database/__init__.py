"""
Metadata store access for the ingestion pipeline.

Exports: DocumentRepository, get_async_engine, get_async_session_factory
"""

from .document_repository import (
    DocumentRepository,
    get_async_engine,
    get_async_session_factory,
)

__all__ = ["DocumentRepository", "get_async_engine", "get_async_session_factory"]

"""
Exception hierarchy for the document ingestion pipeline.

Every stage raises a typed IngestionError; the pipeline boundary turns it
into a failed PipelineResult instead of letting it escape.

Dependencies: None (pure domain layer)
System role: Error taxonomy shared by all pipeline stages
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Error categories reported in a failed pipeline result."""

    INVALID_EVENT = "invalid_event"
    FETCH = "fetch"
    STAGING_WRITE = "staging_write"
    UNSUPPORTED_FORMAT = "unsupported_format"
    PARSE = "parse"
    EMBEDDING_SERVICE = "embedding_service"
    VECTOR_STORE = "vector_store"
    INTERNAL = "internal"


class IngestionError(Exception):
    """Base exception for all ingestion errors."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class MessageParseError(IngestionError):
    """Raised when the upload notification cannot be parsed."""

    kind = ErrorKind.INVALID_EVENT


class FetchError(IngestionError):
    """Raised when the object store or metadata store cannot be read."""

    kind = ErrorKind.FETCH


class DocumentNotFoundError(FetchError):
    """Raised when no active document record matches the storage key."""

    def __init__(self, document_key: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["document_key"] = document_key
        super().__init__(f"No active document found for key: {document_key}", details)


class StagingWriteError(IngestionError):
    """Raised when raw bytes cannot be written to the staging area."""

    kind = ErrorKind.STAGING_WRITE


class UnsupportedFormatError(IngestionError):
    """Raised when no parser is registered for a document format."""

    kind = ErrorKind.UNSUPPORTED_FORMAT

    def __init__(self, file_format: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["format"] = file_format
        super().__init__(f"Unsupported document format: {file_format!r}", details)


class ParseError(IngestionError):
    """Raised when document bytes are not valid for the declared format."""

    kind = ErrorKind.PARSE

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if file_path:
            details["file_path"] = file_path
        self.file_path = file_path
        super().__init__(message, details)


class EmbeddingServiceError(IngestionError):
    """Raised when the embedding service request fails."""

    kind = ErrorKind.EMBEDDING_SERVICE


class VectorStoreError(IngestionError):
    """Raised when vector index operations fail."""

    kind = ErrorKind.VECTOR_STORE

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize vector store error.

        Args:
            message: Error message
            operation: Operation that failed (upsert, delete)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)

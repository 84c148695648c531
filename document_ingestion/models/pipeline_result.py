"""
Pipeline result model for document ingestion.

Represents the terminal outcome of one pipeline run: either a success with
the processed document's identifiers, or a failure with the error kind, the
stage that failed and the original trigger payload.

Dependencies: pydantic, document_ingestion.exceptions
System role: Return type for DocumentPipeline.process()
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from document_ingestion.exceptions import ErrorKind, IngestionError


class PipelineStage(str, Enum):
    """Pipeline states, in execution order. FAILED is entered from any working stage and leads to CLEANUP."""

    FETCHING = "fetching"
    STAGING = "staging"
    PARSING = "parsing"
    CHUNKING = "chunking"
    TAGGING = "tagging"
    EMBEDDING = "embedding"
    CLEANUP = "cleanup"
    FAILED = "failed"


class IngestionStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class PipelineResult(BaseModel):
    """Result of document ingestion pipeline execution."""

    status: IngestionStatus = Field(description="Outcome of the run")
    document_key: str = Field(description="Object key of the processed document")
    file_id: str | None = Field(default=None, description="Document identifier from the metadata store")
    user_id: str | None = Field(default=None, description="Owner identifier from the metadata store")
    chunk_count: int = Field(default=0, description="Number of chunks upserted")
    record_keys: list[str] = Field(default_factory=list, description="Vector record keys written")
    processing_time_ms: float = Field(default=0.0, description="Total processing time in milliseconds")
    error_kind: ErrorKind | None = Field(default=None, description="Error category on failure")
    error_message: str | None = Field(default=None, description="Error description on failure")
    error_details: dict[str, Any] = Field(default_factory=dict, description="Error context on failure")
    failed_stage: PipelineStage | None = Field(default=None, description="Stage that raised the error")
    stages: list[PipelineStage] = Field(default_factory=list, description="States the run passed through, in order")
    cleanup_error: str | None = Field(default=None, description="Staging cleanup failure, if any")
    event: dict[str, Any] | None = Field(default=None, description="Original trigger payload on failure")

    @property
    def succeeded(self) -> bool:
        return self.status is IngestionStatus.SUCCESS

    @classmethod
    def failure(
        cls,
        document_key: str,
        error: Exception,
        stage: PipelineStage | None = None,
        event: dict[str, Any] | None = None,
        **fields: Any,
    ) -> "PipelineResult":
        """
        Build a failed result from an exception.

        Args:
            document_key: Object key of the document (may be empty for bad events)
            error: Exception that aborted the run
            stage: Stage in which the error was raised
            event: Original trigger payload, kept for diagnostics
            **fields: Extra result fields (processing_time_ms, file_id, ...)

        Returns:
            PipelineResult: Result with status FAILURE
        """
        if isinstance(error, IngestionError):
            kind = error.kind
            message = error.message
            details = dict(error.details)
        else:
            kind = ErrorKind.INTERNAL
            message = f"{type(error).__name__}: {error}"
            details = {}

        return cls(
            status=IngestionStatus.FAILURE,
            document_key=document_key,
            error_kind=kind,
            error_message=message,
            error_details=details,
            failed_stage=stage,
            event=event,
            **fields,
        )

    def to_body(self) -> dict[str, Any]:
        """Serialize to the per-record body returned to the invoking infrastructure."""
        if self.succeeded:
            return {
                "message": "Handle document successfully",
                "fileKey": self.document_key,
                "fileId": self.file_id,
                "userId": self.user_id,
                "chunkCount": self.chunk_count,
                "processingTimeMs": self.processing_time_ms,
            }

        return {
            "fileKey": self.document_key,
            "error": {
                "kind": self.error_kind.value if self.error_kind else None,
                "message": self.error_message,
                "stage": self.failed_stage.value if self.failed_stage else None,
                "details": self.error_details,
            },
            "cleanupError": self.cleanup_error,
            "event": self.event,
        }

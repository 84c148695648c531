"""
Inbound request models for document ingestion.

An IngestionRequest is built from one S3 upload notification record and
scoped to a single pipeline run.

Dependencies: pydantic
System role: Data validation and contract definition
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class IngestionRequest(BaseModel):
    """Document to ingest, as announced by the storage upload event."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "document_key": "uploads/5f2b/report.pdf",
                "storage_location": "documents-bucket",
                "region": "us-east-1",
            }
        },
    )

    document_key: str = Field(..., min_length=1, description="Object key of the uploaded document")
    storage_location: str = Field(..., min_length=1, description="Bucket holding the document")
    region: str | None = Field(default=None, description="Bucket region from the event")

    @property
    def file_extension(self) -> str:
        """Declared document format, taken from the key's extension."""
        filename = self.document_key.rsplit("/", 1)[-1]
        if "." not in filename:
            return ""
        return filename.rsplit(".", 1)[-1].lower()


class DocumentRecord(BaseModel):
    """Ownership record of an uploaded document (read-only)."""

    id: str = Field(description="Document identifier in the metadata store")
    owner_id: str = Field(description="Identifier of the user who uploaded the document")
    storage_key: str = Field(description="Object key of the document")
    deleted_at: datetime | None = Field(default=None, description="Soft-delete timestamp")

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None


class RawDocument(BaseModel):
    """Downloaded document bytes and their declared format."""

    content: bytes
    format: str

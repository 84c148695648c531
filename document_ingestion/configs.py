"""
Configuration settings for the document ingestion pipeline.

Provides environment-based configuration for staging, chunking, embedding,
vector index upserts and the metadata store.

Dependencies: pydantic, pydantic_settings
System role: Centralized pipeline configuration
"""

import tempfile
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SEPARATORS = ["\n\n", "\n", " ", ""]


class DocumentPipelineSettings(BaseSettings):
    """Settings for document ingestion pipeline."""

    model_config = SettingsConfigDict(
        env_prefix="DOC_INGEST_",
        case_sensitive=False,
        extra="ignore",
    )

    # AWS
    aws_region: str = Field(
        default="us-east-1",
        description="Default AWS region when the upload event carries none",
    )
    credentials_profile_name: str | None = Field(
        default=None,
        description="AWS profile for Bedrock and S3 Vectors (default credential chain if unset)",
    )

    # Chunking settings
    chunk_size: int = Field(
        default=1000,
        gt=0,
        description="Maximum chunk size in characters",
    )
    chunk_overlap: int = Field(
        default=200,
        ge=0,
        description="Overlap between consecutive chunks",
    )
    separators: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SEPARATORS),
        description="Separator hierarchy, coarsest first (JSON list in env)",
    )

    # Embedding settings
    embedding_model_id: str = Field(
        default="amazon.titan-embed-text-v2:0",
        description="Bedrock embedding model ID",
    )
    embedding_region: str = Field(
        default="us-east-1",
        description="AWS region for Bedrock embeddings",
    )
    embedding_batch_size: int = Field(
        default=100,
        gt=0,
        description="Number of chunks sent per embedding request",
    )

    # S3 Vectors settings
    vectors_bucket: str = Field(
        default="",
        description="S3 Vectors bucket name",
    )
    vectors_index: str = Field(
        default="documents",
        description="S3 Vectors index (collection) receiving the records",
    )

    # Metadata store
    database_url: str = Field(
        default="",
        description="PostgreSQL connection string",
    )
    database_require_ssl: bool = Field(
        default=True,
        description="Require SSL for the metadata store connection",
    )
    documents_table: str = Field(
        default="files",
        description="Table holding document ownership records",
    )
    db_secret_arn: str | None = Field(
        default=None,
        description="Secrets Manager ARN holding the database password",
    )

    # Staging and timeouts
    staging_root: str = Field(
        default_factory=tempfile.gettempdir,
        description="Directory under which run-scoped staging directories are created",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for object store, metadata store and vector index calls",
    )
    embedding_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Timeout for one embedding batch request",
    )

    log_level: str = Field(default="INFO", description="Root logging level")

    @model_validator(mode="after")
    def _check_overlap(self) -> "DocumentPipelineSettings":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError(
                f"chunk_overlap ({self.chunk_overlap}) must be smaller than "
                f"chunk_size ({self.chunk_size})"
            )
        return self


@lru_cache
def get_pipeline_settings() -> DocumentPipelineSettings:
    """
    Get cached pipeline settings instance.

    Returns:
        DocumentPipelineSettings: Singleton settings loaded from environment
    """
    return DocumentPipelineSettings()

"""
Document ingestion pipeline.

Self-contained Lambda-ready module for fetching, parsing, chunking, tagging,
embedding, and upserting uploaded documents into a vector index.

Dependencies: langchain_community, langchain_aws, boto3, sqlalchemy, pydantic
System role: Document ingestion pipeline entrypoint
"""

from .configs import (
    DocumentPipelineSettings,
    get_pipeline_settings,
)
from .entrypoint import DocumentPipeline
from .models import Chunk, IngestionRequest, PipelineResult

__all__ = [
    "DocumentPipeline",
    "DocumentPipelineSettings",
    "get_pipeline_settings",
    "Chunk",
    "IngestionRequest",
    "PipelineResult",
]

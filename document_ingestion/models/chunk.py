"""
Text models for the chunking stages of the pipeline.

ExtractedUnit is what a parser produces, Chunk is what the chunker and the
tagger produce, VectorRecord is what ends up in the vector index.

Dependencies: pydantic
System role: Data structures for document text flowing through ingestion
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ExtractedUnit(BaseModel):
    """Text unit extracted from a document, in reading order."""

    text: str = Field(description="Extracted text")
    source_position: dict[str, Any] = Field(
        default_factory=dict,
        description="Loader metadata locating the unit (source, page, ...)",
    )


class Chunk(BaseModel):
    """Bounded span of document text prepared for embedding."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(description="Chunk text content")
    source_position: dict[str, Any] = Field(
        default_factory=dict,
        description="Source position inherited from the extracted unit",
    )
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Chunk metadata (start_index, fileId, userId)",
    )


class VectorRecord(BaseModel):
    """Embedding vector with its chunk text and metadata, ready for upsert."""

    key: str = Field(description="Deterministic record key (document id + chunk index)")
    embedding: list[float] = Field(description="Embedding vector")
    text: str = Field(description="Chunk text content")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Flat filterable metadata")

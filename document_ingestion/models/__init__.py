"""
Models for document ingestion pipeline.

Exports: IngestionRequest, DocumentRecord, RawDocument, ExtractedUnit, Chunk,
VectorRecord, PipelineResult, PipelineStage, IngestionStatus
"""

from .chunk import Chunk, ExtractedUnit, VectorRecord
from .ingestion_request import DocumentRecord, IngestionRequest, RawDocument
from .pipeline_result import IngestionStatus, PipelineResult, PipelineStage

__all__ = [
    "IngestionRequest",
    "DocumentRecord",
    "RawDocument",
    "ExtractedUnit",
    "Chunk",
    "VectorRecord",
    "PipelineResult",
    "PipelineStage",
    "IngestionStatus",
]

"""
Task modules for document ingestion pipeline.

Exports: StagingArea, S3DownloadTask, ParsingTask, ChunkingTask, tag,
EmbeddingTask, VectorStoreTask
"""

from .chunking_task import ChunkingTask, split
from .embedding_task import EmbeddingTask
from .parsing_task import DocumentParser, LoaderParser, ParsingTask
from .s3_download_task import S3DownloadTask
from .staging_task import StagingArea
from .tagging_task import tag
from .vector_store_task import VectorStoreTask, generate_record_key

__all__ = [
    "StagingArea",
    "S3DownloadTask",
    "DocumentParser",
    "LoaderParser",
    "ParsingTask",
    "ChunkingTask",
    "split",
    "tag",
    "EmbeddingTask",
    "VectorStoreTask",
    "generate_record_key",
]

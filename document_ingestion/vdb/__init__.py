"""
Vector index boundary.

Exports: VectorIndexClient, S3VectorsIndex
"""

from .s3_vectors_index import PAGE_CONTENT_METADATA_KEY, S3VectorsIndex, VectorIndexClient

__all__ = ["VectorIndexClient", "S3VectorsIndex", "PAGE_CONTENT_METADATA_KEY"]

"""
Document pipeline orchestrator.

Coordinates fetch (S3 download and metadata lookup, concurrently), staging,
parsing, chunking, tagging, and embedding + upsert for one uploaded
document. The staging area is released on every exit path and every error
is turned into a failed PipelineResult at this boundary.

Dependencies: All task modules, configs
System role: Pipeline orchestration (coordinates only)
"""

import asyncio
import logging
import time
from typing import Any

from .configs import DocumentPipelineSettings, get_pipeline_settings
from .database import DocumentRepository
from .exceptions import DocumentNotFoundError
from .models import (
    DocumentRecord,
    IngestionRequest,
    IngestionStatus,
    PipelineResult,
    PipelineStage,
    RawDocument,
)
from .observability import clear_correlation_id, set_correlation_id
from .tasks import (
    ChunkingTask,
    EmbeddingTask,
    ParsingTask,
    S3DownloadTask,
    StagingArea,
    VectorStoreTask,
    tag,
)
from .vdb import S3VectorsIndex

logger = logging.getLogger(__name__)


class DocumentPipeline:
    """Orchestrate document ingestion: fetch -> stage -> parse -> chunk -> tag -> embed+upsert."""

    def __init__(
        self,
        settings: DocumentPipelineSettings | None = None,
        *,
        download_task: S3DownloadTask | None = None,
        document_repository: DocumentRepository | None = None,
        parsing_task: ParsingTask | None = None,
        chunking_task: ChunkingTask | None = None,
        vector_store_task: VectorStoreTask | None = None,
    ) -> None:
        """
        Initialize pipeline with configuration.

        Collaborators default to the AWS / PostgreSQL implementations built
        from settings; pass them explicitly to substitute other backends.

        Args:
            settings: Pipeline settings (loaded from environment if None)
            download_task: Object store client
            document_repository: Metadata store client
            parsing_task: Format registry of document parsers
            chunking_task: Recursive chunker
            vector_store_task: Embedding and upsert coordinator
        """
        self._settings = settings or get_pipeline_settings()
        s = self._settings

        self._download_task = download_task or S3DownloadTask(
            region=s.aws_region,
            timeout=s.request_timeout_seconds,
        )
        self._document_repository = document_repository or DocumentRepository.from_url(
            s.database_url,
            require_ssl=s.database_require_ssl,
            table=s.documents_table,
            timeout=s.request_timeout_seconds,
        )
        self._parsing_task = parsing_task or ParsingTask()
        self._chunking_task = chunking_task or ChunkingTask(
            chunk_size=s.chunk_size,
            chunk_overlap=s.chunk_overlap,
            separators=s.separators,
        )
        self._vector_store_task = vector_store_task or VectorStoreTask(
            embedding_task=EmbeddingTask.for_bedrock(
                model_id=s.embedding_model_id,
                region=s.embedding_region,
                credentials_profile_name=s.credentials_profile_name,
                batch_size=s.embedding_batch_size,
                timeout=s.embedding_timeout_seconds,
            ),
            vector_index=S3VectorsIndex(
                vectors_bucket=s.vectors_bucket,
                region=s.aws_region,
                credentials_profile_name=s.credentials_profile_name,
                timeout=s.request_timeout_seconds,
            ),
            collection=s.vectors_index,
        )

    async def _fetch(self, request: IngestionRequest) -> tuple[RawDocument, DocumentRecord]:
        """
        Download the document and look up its record concurrently.

        Fails as soon as either call fails; the other one is cancelled.

        Raises:
            FetchError: Download or lookup failed
            DocumentNotFoundError: Record missing or soft-deleted
        """
        tasks = [
            asyncio.ensure_future(
                self._download_task.download(
                    request.storage_location,
                    request.document_key,
                    request.region,
                )
            ),
            asyncio.ensure_future(
                self._document_repository.find_active_document_by_key(request.document_key)
            ),
        ]
        try:
            content, record = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        if record is None or not record.is_active:
            raise DocumentNotFoundError(request.document_key)

        return RawDocument(content=content, format=request.file_extension), record

    async def process(
        self,
        request: IngestionRequest,
        event: dict[str, Any] | None = None,
    ) -> PipelineResult:
        """
        Process one document through the full pipeline.

        Never raises: failures come back as a PipelineResult with status
        FAILURE, the error kind and the stage that failed. The staging area
        is released before this returns, whatever the outcome.

        Args:
            request: Document to ingest
            event: Original trigger payload, attached to failed results

        Returns:
            PipelineResult: Terminal outcome of the run
        """
        start_time = time.perf_counter()
        run_id = set_correlation_id()
        stages: list[PipelineStage] = []
        record: DocumentRecord | None = None
        staging = StagingArea(self._settings.staging_root)

        def enter(stage: PipelineStage) -> None:
            stages.append(stage)
            logger.debug("process - Entering %s stage", stage.value)

        logger.info(
            "process - Starting ingestion",
            extra={
                "run_id": run_id,
                "document_key": request.document_key,
                "bucket": request.storage_location,
            },
        )

        try:
            async with staging:
                enter(PipelineStage.FETCHING)
                raw, record = await self._fetch(request)

                enter(PipelineStage.STAGING)
                staged_path = await staging.allocate(raw.format)
                await staging.write(staged_path, raw.content)

                enter(PipelineStage.PARSING)
                units = await self._parsing_task.parse(staged_path, raw.format)

                enter(PipelineStage.CHUNKING)
                chunks = self._chunking_task.chunk(units)

                enter(PipelineStage.TAGGING)
                tagged_chunks = tag(chunks, file_id=record.id, user_id=record.owner_id)

                enter(PipelineStage.EMBEDDING)
                record_keys = await self._vector_store_task.embed_and_store(
                    tagged_chunks, document_id=record.id
                )

                enter(PipelineStage.CLEANUP)

            elapsed_ms = (time.perf_counter() - start_time) * 1000
            result = PipelineResult(
                status=IngestionStatus.SUCCESS,
                document_key=request.document_key,
                file_id=record.id,
                user_id=record.owner_id,
                chunk_count=len(record_keys),
                record_keys=record_keys,
                processing_time_ms=elapsed_ms,
                stages=stages,
                cleanup_error=staging.cleanup_error,
            )
            logger.info(
                "process - Document ingested",
                extra={
                    "document_key": request.document_key,
                    "file_id": record.id,
                    "chunk_count": result.chunk_count,
                    "processing_time_ms": elapsed_ms,
                },
            )

        except Exception as e:
            failed_stage = stages[-1] if stages else PipelineStage.FETCHING
            # The staging area has already been released by the context manager
            stages.extend([PipelineStage.FAILED, PipelineStage.CLEANUP])
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                "process - %s failed at %s stage: %s",
                type(e).__name__,
                failed_stage.value,
                e,
                extra={"document_key": request.document_key},
            )
            result = PipelineResult.failure(
                document_key=request.document_key,
                error=e,
                stage=failed_stage,
                event=event if event is not None else request.model_dump(),
                file_id=record.id if record else None,
                user_id=record.owner_id if record else None,
                processing_time_ms=elapsed_ms,
                stages=stages,
                cleanup_error=staging.cleanup_error,
            )

        finally:
            clear_correlation_id()

        return result

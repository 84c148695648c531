"""
Recursive character chunking of extracted document text.

Splits each extracted unit with langchain's RecursiveCharacterTextSplitter,
trying separators from coarsest (paragraph break) to finest (any
character). A chunk the splitter leaves longer than chunk_size, because
none of the configured separators could break it, is cut into fixed-width
windows so no chunk ever exceeds chunk_size.

Dependencies: langchain_text_splitters, document_ingestion.models
System role: Third stage of document ingestion pipeline
"""

import logging
from typing import Iterable, Sequence

from langchain_text_splitters import RecursiveCharacterTextSplitter

from document_ingestion.configs import DEFAULT_SEPARATORS
from document_ingestion.models import Chunk, ExtractedUnit

logger = logging.getLogger(__name__)


class ChunkingTask:
    """Split extracted units into bounded, overlapping chunks."""

    def __init__(
        self,
        chunk_size: int = 1000,
        chunk_overlap: int = 200,
        separators: Sequence[str] | None = None,
    ) -> None:
        """
        Initialize chunking task with splitter configuration.

        Args:
            chunk_size: Maximum chunk size in characters
            chunk_overlap: Overlap between consecutive chunks
            separators: Delimiters tried coarsest first; "" splits anywhere

        Raises:
            ValueError: When chunk_size <= 0 or overlap is not in [0, chunk_size)
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if chunk_overlap < 0 or chunk_overlap >= chunk_size:
            raise ValueError(
                f"chunk_overlap must be in [0, {chunk_size}), got {chunk_overlap}"
            )

        self._chunk_size = chunk_size
        self._chunk_overlap = chunk_overlap
        self._separators = list(DEFAULT_SEPARATORS if separators is None else separators)

        # An empty list means "no separators" here, but the splitter reads it as its defaults
        self._splitter: RecursiveCharacterTextSplitter | None = None
        if self._separators:
            self._splitter = RecursiveCharacterTextSplitter(
                chunk_size=chunk_size,
                chunk_overlap=chunk_overlap,
                separators=self._separators,
                keep_separator=False,
                add_start_index=True,
                length_function=len,
            )

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @property
    def chunk_overlap(self) -> int:
        return self._chunk_overlap

    @property
    def separators(self) -> list[str]:
        return list(self._separators)

    def chunk(self, units: Iterable[ExtractedUnit]) -> list[Chunk]:
        """
        Split extracted units into chunks, preserving unit order.

        Args:
            units: Extracted units in reading order

        Returns:
            list[Chunk]: Chunks carrying the unit's source position and
            their start_index inside the unit text
        """
        chunks: list[Chunk] = []
        for unit in units:
            for text, start_index in self._split_unit(unit.text):
                metadata = {"start_index": start_index} if start_index is not None else {}
                chunks.append(
                    Chunk(
                        text=text,
                        source_position=dict(unit.source_position),
                        metadata=metadata,
                    )
                )

        logger.debug("chunk - Produced %d chunks", len(chunks))
        return chunks

    def split_text(self, text: str) -> list[str]:
        """Split one text into chunk strings."""
        return [chunk for chunk, _ in self._split_unit(text)]

    def _split_unit(self, text: str) -> list[tuple[str, int | None]]:
        """Chunks of text paired with their offset in it, None when not locatable."""
        if self._splitter is None:
            return self._slice(text, 0)

        pieces: list[tuple[str, int | None]] = []
        for document in self._splitter.create_documents([text]):
            start = document.metadata.get("start_index", -1)
            start = start if start >= 0 else None
            if len(document.page_content) <= self._chunk_size:
                pieces.append((document.page_content, start))
            else:
                pieces.extend(self._slice(document.page_content, start))
        return pieces

    def _slice(self, text: str, base: int | None) -> list[tuple[str, int | None]]:
        """Fixed-width windows advancing by chunk_size - chunk_overlap."""
        step = self._chunk_size - self._chunk_overlap
        windows: list[tuple[str, int | None]] = []
        start = 0
        while True:
            raw = text[start : start + self._chunk_size]
            window = raw.strip()
            if window:
                offset = None if base is None else base + start + len(raw) - len(raw.lstrip())
                windows.append((window, offset))
            if start + self._chunk_size >= len(text):
                break
            start += step

        logger.debug(
            "_slice - No separator applies, sliced %d characters into %d windows",
            len(text),
            len(windows),
        )
        return windows


def split(
    units: Iterable[ExtractedUnit],
    chunk_size: int = 1000,
    chunk_overlap: int = 200,
    separators: Sequence[str] | None = None,
) -> list[Chunk]:
    """
    Split extracted units into chunks with a one-off ChunkingTask.

    Args:
        units: Extracted units in reading order
        chunk_size: Maximum chunk size in characters
        chunk_overlap: Overlap between consecutive chunks
        separators: Delimiters tried coarsest first

    Returns:
        list[Chunk]: Chunks in emission order
    """
    return ChunkingTask(chunk_size, chunk_overlap, separators).chunk(units)

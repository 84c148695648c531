"""
Document parsing task using LangChain document loaders.

Dispatches on the declared document format through a registry of parsers.
PDF goes through PyPDFLoader (one unit per page), DOCX through
Docx2txtLoader (one unit per document). New formats are added with
ParsingTask.register() without touching the pipeline.

Dependencies: langchain_community.document_loaders
System role: Second stage of document ingestion pipeline
"""

import asyncio
import logging
from pathlib import Path
from typing import Callable, Protocol

from langchain_community.document_loaders import Docx2txtLoader, PyPDFLoader
from langchain_core.document_loaders import BaseLoader

from document_ingestion.exceptions import ParseError, UnsupportedFormatError
from document_ingestion.models import ExtractedUnit

logger = logging.getLogger(__name__)


class DocumentParser(Protocol):
    """Extracts ordered text units from a staged file."""

    def extract(self, path: str) -> list[ExtractedUnit]: ...


class LoaderParser:
    """DocumentParser backed by a LangChain loader class."""

    def __init__(self, loader_factory: Callable[[str], BaseLoader]) -> None:
        """
        Args:
            loader_factory: Callable building a loader for a file path
        """
        self._loader_factory = loader_factory

    def extract(self, path: str) -> list[ExtractedUnit]:
        documents = self._loader_factory(path).load()
        return [
            ExtractedUnit(text=doc.page_content, source_position=dict(doc.metadata))
            for doc in documents
        ]


def pdf_parser() -> LoaderParser:
    return LoaderParser(lambda path: PyPDFLoader(path))


def docx_parser() -> LoaderParser:
    return LoaderParser(lambda path: Docx2txtLoader(path))


class ParsingTask:
    """Parse staged documents into ordered text units."""

    def __init__(self, parsers: dict[str, DocumentParser] | None = None) -> None:
        """
        Initialize parsing task.

        Args:
            parsers: Format to parser mapping (PDF and DOCX if None)
        """
        if parsers is None:
            parsers = {"pdf": pdf_parser(), "docx": docx_parser()}
        self._parsers: dict[str, DocumentParser] = {
            fmt.lower(): parser for fmt, parser in parsers.items()
        }

    @property
    def supported_formats(self) -> list[str]:
        return sorted(self._parsers)

    def register(self, file_format: str, parser: DocumentParser) -> None:
        """Register (or replace) the parser for a format."""
        self._parsers[file_format.lower()] = parser

    def get_parser(self, file_format: str) -> DocumentParser:
        """
        Look up the parser for a format.

        Raises:
            UnsupportedFormatError: When no parser is registered
        """
        parser = self._parsers.get(file_format.lower())
        if parser is None:
            raise UnsupportedFormatError(
                file_format,
                details={"supported_formats": self.supported_formats},
            )
        return parser

    async def parse(self, file_path: str | Path, file_format: str) -> list[ExtractedUnit]:
        """
        Parse a staged document into extracted units.

        Args:
            file_path: Path to the staged document
            file_format: Declared format (file extension)

        Returns:
            list[ExtractedUnit]: Units in reading order

        Raises:
            UnsupportedFormatError: When the format has no registered parser
            ParseError: When document parsing fails or yields nothing
        """
        parser = self.get_parser(file_format)
        path = str(file_path)

        if not Path(path).exists():
            raise ParseError(f"File not found: {path}", path)

        try:
            units = await asyncio.to_thread(parser.extract, path)
        except Exception as e:
            raise ParseError(f"Failed to parse {file_format} document: {e}", path) from e

        if not units:
            raise ParseError("Document contains no extractable text", path)

        logger.info(
            "parse - Extracted units",
            extra={"format": file_format, "unit_count": len(units)},
        )
        return units

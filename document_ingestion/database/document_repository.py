"""
Document ownership lookups in PostgreSQL.

Reads the ownership record of an uploaded document by its storage key,
ignoring soft-deleted records. Read-only: the pipeline never writes here.

Dependencies: sqlalchemy, asyncpg
System role: Metadata store boundary for the ingestion pipeline
"""

import asyncio
import logging
import re

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from document_ingestion.exceptions import FetchError
from document_ingestion.models import DocumentRecord

logger = logging.getLogger(__name__)

_TABLE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


def get_async_engine(database_url: str, require_ssl: bool = True) -> AsyncEngine:
    """
    Create async engine for the metadata store.

    NullPool keeps no connections between calls: every Lambda invocation
    runs its own event loop and asyncpg connections are bound to a loop.

    Args:
        database_url: PostgreSQL connection string
        require_ssl: Require SSL on the connection

    Returns:
        AsyncEngine: SQLAlchemy async engine

    Raises:
        ValueError: database_url is empty
    """
    if not database_url:
        raise ValueError("database_url is not set")

    # Convert postgres:// to postgresql+asyncpg://
    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql+asyncpg://", 1)
    elif database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)

    connect_args = {"ssl": "require"} if require_ssl else {}
    return create_async_engine(
        database_url,
        echo=False,
        poolclass=NullPool,
        connect_args=connect_args,
    )


def get_async_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """
    Create async session factory bound to an engine.

    Returns:
        async_sessionmaker: Session factory
    """
    return async_sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


class DocumentRepository:
    """Look up active document records by storage key."""

    def __init__(
        self,
        session_factory: async_sessionmaker,
        table: str = "files",
        timeout: float = 30.0,
    ) -> None:
        """
        Initialize with a session factory.

        Args:
            session_factory: Factory producing AsyncSession objects
            table: Table holding document records
            timeout: Seconds allowed for one lookup

        Raises:
            ValueError: table is not a plain (optionally schema-qualified) identifier
        """
        if not _TABLE_NAME.match(table):
            raise ValueError(f"Invalid table name: {table!r}")

        self._session_factory = session_factory
        self._timeout = timeout
        self._statement = text(
            f"""
            SELECT id, created_by, key, deleted_at
            FROM {table}
            WHERE key = :key AND deleted_at IS NULL
            LIMIT 1
            """
        )

    @classmethod
    def from_url(
        cls,
        database_url: str,
        require_ssl: bool = True,
        table: str = "files",
        timeout: float = 30.0,
    ) -> "DocumentRepository":
        engine = get_async_engine(database_url, require_ssl)
        return cls(get_async_session_factory(engine), table=table, timeout=timeout)

    async def _query(self, key: str) -> DocumentRecord | None:
        async with self._session_factory() as session:
            result = await session.execute(self._statement, {"key": key})
            row = result.mappings().first()

        if row is None:
            return None
        return DocumentRecord(
            id=str(row["id"]),
            owner_id=str(row["created_by"]),
            storage_key=row["key"],
            deleted_at=row["deleted_at"],
        )

    async def find_active_document_by_key(self, key: str) -> DocumentRecord | None:
        """
        Find the non-deleted document record for a storage key.

        Args:
            key: Storage key of the uploaded document

        Returns:
            DocumentRecord | None: The record, or None when missing or soft-deleted

        Raises:
            FetchError: When the metadata store is unreachable or times out
        """
        try:
            record = await asyncio.wait_for(self._query(key), timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise FetchError(
                f"Metadata lookup timed out after {self._timeout}s",
                details={"document_key": key},
            ) from e
        except (SQLAlchemyError, OSError) as e:
            logger.error("find_active_document_by_key - %s: %s", type(e).__name__, e)
            raise FetchError(
                f"Failed to read document record: {e}",
                details={"document_key": key},
            ) from e

        logger.info(
            "find_active_document_by_key - Lookup finished",
            extra={"document_key": key, "found": record is not None},
        )
        return record

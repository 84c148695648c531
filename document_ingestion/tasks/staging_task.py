"""
Run-scoped staging area for raw document bytes.

Each pipeline run gets its own scratch directory under the staging root
(Lambda uses /tmp). Release removes the whole directory, so concurrent runs
in one process never delete each other's files.

Dependencies: asyncio, secrets, shutil, tempfile
System role: Temporary resource lifecycle for the ingestion pipeline
"""

import asyncio
import logging
import secrets
import shutil
import string
import tempfile
from pathlib import Path

from document_ingestion.exceptions import StagingWriteError

logger = logging.getLogger(__name__)

FILENAME_ALPHABET = string.digits + string.ascii_lowercase + string.ascii_uppercase
FILENAME_ID_LENGTH = 10


def generate_file_id(length: int = FILENAME_ID_LENGTH) -> str:
    """Random identifier drawn from the 62-symbol alphanumeric alphabet."""
    return "".join(secrets.choice(FILENAME_ALPHABET) for _ in range(length))


class StagingArea:
    """
    Private scratch directory for one pipeline run.

    The directory is created on the first allocation and removed by
    release_all(), which the async context manager calls on every exit path.
    Filesystem calls run in worker threads so the event loop stays free:

        async with StagingArea("/tmp") as staging:
            path = await staging.allocate("pdf")
            await staging.write(path, content)
    """

    def __init__(self, root: str | Path, prefix: str = "doc-ingest-") -> None:
        """
        Initialize staging area.

        Args:
            root: Directory under which the run directory is created
            prefix: Prefix of the run directory name
        """
        self._root = Path(root)
        self._prefix = prefix
        self._directory: Path | None = None
        self._directory_lock = asyncio.Lock()
        self._released = False
        self.cleanup_error: str | None = None

    @property
    def directory(self) -> Path | None:
        """Run directory, or None before the first allocation."""
        return self._directory

    @property
    def released(self) -> bool:
        return self._released

    async def __aenter__(self) -> "StagingArea":
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> bool:
        await self.release_all()
        return False

    async def _ensure_directory(self) -> Path:
        async with self._directory_lock:
            if self._released:
                raise StagingWriteError(
                    "Staging area already released",
                    details={"root": str(self._root)},
                )
            if self._directory is None:
                try:
                    created = await asyncio.to_thread(
                        tempfile.mkdtemp, prefix=self._prefix, dir=self._root
                    )
                except OSError as e:
                    raise StagingWriteError(
                        f"Failed to create staging directory: {e}",
                        details={"root": str(self._root)},
                    ) from e
                self._directory = Path(created)
                logger.debug("allocate - Created staging directory %s", self._directory)
            return self._directory

    async def allocate(self, extension: str) -> Path:
        """
        Produce a collision-resistant file path inside the run directory.

        Args:
            extension: File extension without the leading dot

        Returns:
            Path: Path of the form <run dir>/doc-<id>.<extension>

        Raises:
            StagingWriteError: When the run directory cannot be created
        """
        directory = await self._ensure_directory()
        suffix = f".{extension}" if extension else ""
        return directory / f"doc-{generate_file_id()}{suffix}"

    async def write(self, path: Path, content: bytes) -> Path:
        """
        Persist bytes at an allocated path.

        Args:
            path: Path returned by allocate()
            content: Raw document bytes

        Returns:
            Path: The written path

        Raises:
            StagingWriteError: On insufficient space or permission failure
        """
        try:
            await asyncio.to_thread(path.write_bytes, content)
        except OSError as e:
            raise StagingWriteError(
                f"Failed to write staged file: {e}",
                details={"path": str(path), "size_bytes": len(content)},
            ) from e

        logger.info(
            "write - Staged document",
            extra={"path": str(path), "size_bytes": len(content)},
        )
        return path

    async def release_all(self) -> str | None:
        """
        Remove every file of the run directory and the directory itself.

        Runs at most once. Never raises: a failure is logged and kept in
        cleanup_error so it cannot hide the error that ended the run.

        Returns:
            str | None: Cleanup error description, None on success
        """
        if self._released:
            return self.cleanup_error
        self._released = True

        if self._directory is None:
            return None

        try:
            await asyncio.to_thread(shutil.rmtree, self._directory)
            logger.info("release_all - Removed staging directory %s", self._directory)
        except FileNotFoundError:
            pass
        except OSError as e:
            self.cleanup_error = f"{type(e).__name__}: {e}"
            logger.error(
                "release_all - Failed to remove staging directory %s: %s",
                self._directory,
                self.cleanup_error,
            )
        return self.cleanup_error

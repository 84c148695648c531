"""
Unit tests for the run-scoped staging area.

Tests allocation naming, writes, and release on every exit path.
Dependencies: pytest, pytest-asyncio, document_ingestion.tasks.staging_task
System role: Temporary resource lifecycle validation
"""

import re
import shutil
import tempfile
import threading
from pathlib import Path
from unittest.mock import patch

import pytest

from document_ingestion.exceptions import ErrorKind, StagingWriteError
from document_ingestion.tasks.staging_task import StagingArea, generate_file_id

STAGED_NAME = re.compile(r"^doc-[0-9A-Za-z]{10}\.pdf$")


class TestGenerateFileId:
    def test_uses_alphanumeric_alphabet(self) -> None:
        """Should produce 10 characters from [0-9A-Za-z]."""
        assert re.fullmatch(r"[0-9A-Za-z]{10}", generate_file_id())

    def test_ids_do_not_repeat(self) -> None:
        """Should not collide across many draws."""
        assert len({generate_file_id() for _ in range(200)}) == 200


class TestStagingArea:
    """Test suite for StagingArea."""

    @pytest.mark.asyncio
    async def test_directory_created_lazily(self, tmp_path: Path) -> None:
        """
        Test the run directory only exists after the first allocation.

        Arrange: Create staging area under tmp_path
        Act: Allocate a path
        Assert: Directory created under the root with the run prefix
        """
        # Arrange
        staging = StagingArea(tmp_path)
        assert staging.directory is None

        # Act
        path = await staging.allocate("pdf")

        # Assert
        assert staging.directory is not None
        assert staging.directory.parent == tmp_path
        assert staging.directory.name.startswith("doc-ingest-")
        assert path.parent == staging.directory
        assert STAGED_NAME.match(path.name)

    @pytest.mark.asyncio
    async def test_allocate_returns_distinct_paths(self, tmp_path: Path) -> None:
        """Should never hand out the same path twice."""
        staging = StagingArea(tmp_path)

        paths = {await staging.allocate("pdf") for _ in range(50)}

        assert len(paths) == 50
        assert len(list(tmp_path.iterdir())) == 1

    @pytest.mark.asyncio
    async def test_allocate_without_extension(self, tmp_path: Path) -> None:
        """Should omit the dot when the extension is empty."""
        path = await StagingArea(tmp_path).allocate("")

        assert re.fullmatch(r"doc-[0-9A-Za-z]{10}", path.name)

    @pytest.mark.asyncio
    async def test_filesystem_calls_run_off_the_event_loop(self, tmp_path: Path) -> None:
        """Should create and remove the run directory in worker threads."""
        loop_thread = threading.get_ident()
        seen_threads: dict[str, int] = {}
        real_mkdtemp, real_rmtree = tempfile.mkdtemp, shutil.rmtree

        def mkdtemp(*args, **kwargs):
            seen_threads["mkdtemp"] = threading.get_ident()
            return real_mkdtemp(*args, **kwargs)

        def rmtree(*args, **kwargs):
            seen_threads["rmtree"] = threading.get_ident()
            return real_rmtree(*args, **kwargs)

        with patch("document_ingestion.tasks.staging_task.tempfile.mkdtemp", side_effect=mkdtemp), patch(
            "document_ingestion.tasks.staging_task.shutil.rmtree", side_effect=rmtree
        ):
            async with StagingArea(tmp_path) as staging:
                await staging.write(await staging.allocate("pdf"), b"data")

        assert set(seen_threads) == {"mkdtemp", "rmtree"}
        assert loop_thread not in seen_threads.values()
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_write_persists_bytes(self, tmp_path: Path) -> None:
        """Should write content at the allocated path."""
        staging = StagingArea(tmp_path)
        path = await staging.allocate("pdf")

        written = await staging.write(path, b"%PDF-1.7 content")

        assert written == path
        assert path.read_bytes() == b"%PDF-1.7 content"

    @pytest.mark.asyncio
    async def test_write_failure_raises_staging_write_error(self, tmp_path: Path) -> None:
        """Should wrap filesystem errors in StagingWriteError."""
        staging = StagingArea(tmp_path)
        path = await staging.allocate("pdf")
        shutil.rmtree(staging.directory)

        with pytest.raises(StagingWriteError) as exc_info:
            await staging.write(path, b"data")

        assert exc_info.value.kind is ErrorKind.STAGING_WRITE
        assert exc_info.value.details["path"] == str(path)

    @pytest.mark.asyncio
    async def test_missing_root_raises_staging_write_error(self, tmp_path: Path) -> None:
        """Should fail allocation when the run directory cannot be created."""
        staging = StagingArea(tmp_path / "does-not-exist")

        with pytest.raises(StagingWriteError):
            await staging.allocate("pdf")

    @pytest.mark.asyncio
    async def test_release_all_removes_directory(self, tmp_path: Path) -> None:
        """Should delete every staged file and the run directory."""
        staging = StagingArea(tmp_path)
        first = await staging.write(await staging.allocate("pdf"), b"one")
        second = await staging.write(await staging.allocate("docx"), b"two")

        assert await staging.release_all() is None

        assert not first.exists()
        assert not second.exists()
        assert list(tmp_path.iterdir()) == []
        assert staging.released

    @pytest.mark.asyncio
    async def test_release_all_is_idempotent(self, tmp_path: Path) -> None:
        """Should do nothing on the second call."""
        staging = StagingArea(tmp_path)
        await staging.allocate("pdf")

        with patch("document_ingestion.tasks.staging_task.shutil.rmtree") as mock_rmtree:
            await staging.release_all()
            await staging.release_all()

        mock_rmtree.assert_called_once_with(staging.directory)

    @pytest.mark.asyncio
    async def test_release_without_allocation(self, tmp_path: Path) -> None:
        """Should succeed when nothing was ever staged."""
        staging = StagingArea(tmp_path)

        assert await staging.release_all() is None
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_release_failure_is_recorded_not_raised(self, tmp_path: Path) -> None:
        """Should keep the cleanup error instead of raising it."""
        staging = StagingArea(tmp_path)
        await staging.allocate("pdf")

        with patch(
            "document_ingestion.tasks.staging_task.shutil.rmtree",
            side_effect=PermissionError("denied"),
        ):
            error = await staging.release_all()

        assert error == "PermissionError: denied"
        assert staging.cleanup_error == error

    @pytest.mark.asyncio
    async def test_allocate_after_release_raises(self, tmp_path: Path) -> None:
        """Should refuse to stage into a released area."""
        staging = StagingArea(tmp_path)
        await staging.release_all()

        with pytest.raises(StagingWriteError):
            await staging.allocate("pdf")

    @pytest.mark.asyncio
    async def test_release_leaves_other_areas_untouched(self, tmp_path: Path) -> None:
        """Should only remove its own run directory under a shared root."""
        first = StagingArea(tmp_path)
        second = StagingArea(tmp_path)
        await first.write(await first.allocate("pdf"), b"one")
        kept = await second.write(await second.allocate("pdf"), b"two")

        await first.release_all()

        assert first.directory != second.directory
        assert not first.directory.exists()
        assert kept.read_bytes() == b"two"
        assert list(tmp_path.iterdir()) == [second.directory]

    @pytest.mark.asyncio
    async def test_context_manager_releases_on_error(self, tmp_path: Path) -> None:
        """Should release the run directory when the block raises."""
        with pytest.raises(RuntimeError):
            async with StagingArea(tmp_path) as staging:
                await staging.write(await staging.allocate("pdf"), b"data")
                raise RuntimeError("stage failed")

        assert staging.released
        assert list(tmp_path.iterdir()) == []

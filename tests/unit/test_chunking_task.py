"""
Unit tests for the recursive chunker.

Dependencies: pytest, document_ingestion.tasks.chunking_task
System role: Chunk size, overlap and ordering guarantees
"""

import string

import pytest

from document_ingestion.models import ExtractedUnit
from document_ingestion.tasks.chunking_task import ChunkingTask, split


def _letters(length: int) -> str:
    return "".join(string.ascii_lowercase[i % 26] for i in range(length))


class TestChunkingTaskValidation:
    """Test splitter configuration checks."""

    @pytest.mark.parametrize(
        "chunk_size, chunk_overlap",
        [(0, 0), (-5, 0), (100, 100), (100, 150), (100, -1)],
    )
    def test_invalid_configuration_raises(self, chunk_size: int, chunk_overlap: int) -> None:
        """Should reject non-positive size and overlap outside [0, size)."""
        with pytest.raises(ValueError):
            ChunkingTask(chunk_size=chunk_size, chunk_overlap=chunk_overlap)

    def test_default_configuration(self) -> None:
        """Should default to 1000/200 with the paragraph-first separator list."""
        task = ChunkingTask()

        assert task.chunk_size == 1000
        assert task.chunk_overlap == 200
        assert task.separators == ["\n\n", "\n", " ", ""]


class TestSplitText:
    """Test splitting a single text."""

    def test_short_text_is_one_stripped_chunk(self) -> None:
        """Should return the whole text when it fits."""
        task = ChunkingTask(chunk_size=100, chunk_overlap=10)

        assert task.split_text("  hello world \n") == ["hello world"]

    def test_blank_text_yields_no_chunks(self) -> None:
        """Should drop whitespace-only text."""
        task = ChunkingTask(chunk_size=100, chunk_overlap=10)

        assert task.split_text("   \n\n  ") == []
        assert task.split_text("") == []

    def test_word_overlap_example(self) -> None:
        """Should produce 999/999/799 character chunks for 480 five-char words."""
        text = "abcd " * 480
        task = ChunkingTask(chunk_size=1000, chunk_overlap=200, separators=[" ", ""])

        chunks = task.split_text(text)

        assert [len(c) for c in chunks] == [999, 999, 799]
        assert chunks[1][:199] == chunks[0][-199:]
        assert chunks[2][:199] == chunks[1][-199:]
        assert chunks[2].count("abcd") == 160

    def test_unbroken_run_falls_through_to_characters(self) -> None:
        """Should split a run without spaces by character with the full overlap."""
        text = "x" * 2400
        task = ChunkingTask(chunk_size=1000, chunk_overlap=200, separators=[" ", ""])

        chunks = task.split_text(text)

        assert [len(c) for c in chunks] == [1000, 1000, 800]
        assert chunks[1][:200] == chunks[0][-200:]
        assert chunks[2][:200] == chunks[1][-200:]

    def test_paragraphs_are_not_overlapped_when_tail_is_too_long(self) -> None:
        """Should emit one chunk per paragraph when a paragraph exceeds the overlap."""
        first = ("alpha " * 100).strip()
        second = ("omega " * 100).strip()
        task = ChunkingTask(chunk_size=1000, chunk_overlap=200)

        chunks = task.split_text(f"{first}\n\n{second}")

        assert chunks == [first, second]

    def test_character_overlap_is_exact(self) -> None:
        """Should share exactly chunk_overlap characters with the empty separator."""
        text = _letters(2500)
        task = ChunkingTask(chunk_size=100, chunk_overlap=20, separators=[""])

        chunks = task.split_text(text)

        assert len(chunks) > 1
        for previous, current in zip(chunks, chunks[1:]):
            assert current[:20] == previous[-20:]

    def test_character_chunks_reconstruct_text(self) -> None:
        """Should rebuild the input by dropping each chunk's overlap prefix."""
        text = _letters(2500)
        task = ChunkingTask(chunk_size=100, chunk_overlap=20, separators=[""])

        chunks = task.split_text(text)

        assert chunks[0] + "".join(c[20:] for c in chunks[1:]) == text

    def test_no_chunk_exceeds_chunk_size(self) -> None:
        """Should respect chunk_size for mixed paragraphs, lines and long tokens."""
        text = "\n\n".join(
            [
                "Intro paragraph with a few words.",
                "\n".join(f"line {i} " * 7 for i in range(20)),
                "x" * 730,
                " ".join(f"token{i}" for i in range(200)),
            ]
        )
        task = ChunkingTask(chunk_size=120, chunk_overlap=30)

        chunks = task.split_text(text)

        assert chunks
        assert all(0 < len(c) <= 120 for c in chunks)

    def test_fixed_width_fallback_when_no_separator_applies(self) -> None:
        """Should cut unsplittable text into overlapping windows ending at the text end."""
        text = _letters(250)
        task = ChunkingTask(chunk_size=100, chunk_overlap=20, separators=["\n\n"])

        chunks = task.split_text(text)

        assert chunks == [text[0:100], text[80:180], text[160:250]]

    def test_empty_separator_list_falls_back_to_windows(self) -> None:
        """Should still bound chunks when no separators are configured."""
        task = ChunkingTask(chunk_size=50, chunk_overlap=0, separators=[])

        chunks = task.split_text("y" * 120)

        assert chunks == ["y" * 50, "y" * 50, "y" * 20]

    def test_is_deterministic(self) -> None:
        """Should return identical chunks for identical input."""
        text = " ".join(f"word{i}" for i in range(800))
        task = ChunkingTask(chunk_size=150, chunk_overlap=40)

        assert task.split_text(text) == task.split_text(text)


class TestChunk:
    """Test chunking extracted units."""

    def test_preserves_unit_order_and_source_position(self, sample_units) -> None:
        """Should emit chunks unit by unit, each carrying its unit's position."""
        task = ChunkingTask(chunk_size=100, chunk_overlap=20)

        chunks = task.chunk(sample_units)

        pages = [c.source_position["page"] for c in chunks]
        assert pages[0] == 0
        assert pages == sorted(pages)
        assert pages.count(1) > 1
        assert chunks[0].text == "Short first page."

    def test_start_index_locates_chunk_in_unit_text(self) -> None:
        """Should record increasing offsets that point at the chunk text."""
        text = " ".join(f"word{i}" for i in range(500))
        task = ChunkingTask(chunk_size=200, chunk_overlap=50)

        chunks = task.chunk([ExtractedUnit(text=text)])

        starts = [c.metadata["start_index"] for c in chunks]
        assert starts[0] == 0
        assert starts == sorted(set(starts))
        for chunk, start in zip(chunks, starts):
            assert text[start : start + len(chunk.text)] == chunk.text

    def test_start_index_of_fixed_width_windows(self) -> None:
        """Should offset sliced windows from the start of the unsplittable piece."""
        text = "intro\n\n" + _letters(250)
        task = ChunkingTask(chunk_size=100, chunk_overlap=20, separators=["\n\n"])

        chunks = task.chunk([ExtractedUnit(text=text)])

        assert [c.text for c in chunks] == ["intro", text[7:107], text[87:187], text[167:257]]
        assert [c.metadata["start_index"] for c in chunks] == [0, 7, 87, 167]

    def test_blank_units_produce_no_chunks(self) -> None:
        """Should skip units without text."""
        task = ChunkingTask(chunk_size=100, chunk_overlap=20)

        assert task.chunk([ExtractedUnit(text="  "), ExtractedUnit(text="")]) == []

    def test_split_function_matches_task(self, sample_units) -> None:
        """Should behave like a ChunkingTask built with the same arguments."""
        expected = ChunkingTask(100, 20).chunk(sample_units)

        assert split(sample_units, chunk_size=100, chunk_overlap=20) == expected

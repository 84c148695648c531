"""
Unit tests for ownership tagging.

Dependencies: pytest, document_ingestion.tasks.tagging_task
System role: Tagging purity validation
"""

from document_ingestion.models import Chunk
from document_ingestion.tasks.tagging_task import tag


class TestTag:
    def test_adds_owner_metadata(self) -> None:
        """Should add fileId and userId while keeping existing metadata."""
        chunks = [
            Chunk(text="first", source_position={"page": 0}, metadata={"start_index": 0}),
            Chunk(text="second", source_position={"page": 0}, metadata={"start_index": 6}),
        ]

        tagged = tag(chunks, file_id="file-1", user_id="user-1")

        assert [c.metadata for c in tagged] == [
            {"start_index": 0, "fileId": "file-1", "userId": "user-1"},
            {"start_index": 6, "fileId": "file-1", "userId": "user-1"},
        ]

    def test_preserves_text_order_and_count(self) -> None:
        """Should only change metadata."""
        chunks = [Chunk(text=f"chunk {i}", source_position={"page": i}) for i in range(5)]

        tagged = tag(chunks, file_id="f", user_id="u")

        assert [c.text for c in tagged] == [c.text for c in chunks]
        assert [c.source_position for c in tagged] == [c.source_position for c in chunks]

    def test_input_chunks_unchanged(self) -> None:
        """Should return new chunks and leave the input untouched."""
        original = Chunk(text="text", metadata={"start_index": 0})

        tagged = tag([original], file_id="f", user_id="u")

        assert original.metadata == {"start_index": 0}
        assert tagged[0] is not original

    def test_empty_input(self) -> None:
        assert tag([], file_id="f", user_id="u") == []

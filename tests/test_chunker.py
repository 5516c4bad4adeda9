"""Tests for page-aware text chunking."""

import pytest

from cougar_tutor.ingestion.chunker import TextChunker


class TestValidation:
    def test_overlap_must_be_smaller_than_size(self):
        with pytest.raises(ValueError):
            TextChunker(chunk_size=100, chunk_overlap=100)

    def test_minimum_chunk_size(self):
        with pytest.raises(ValueError):
            TextChunker(chunk_size=40, chunk_overlap=10)


class TestSplit:
    def test_empty_text(self):
        assert TextChunker().split("   ") == []

    def test_short_text_single_chunk(self):
        text = "A limit describes the value a function approaches."
        assert TextChunker(chunk_size=100, chunk_overlap=10).split(text) == [text]

    def test_tiny_fragments_dropped(self):
        assert TextChunker(chunk_size=100, chunk_overlap=10, min_chunk_size=20).split("Figure 2.1") == []

    def test_prefers_sentence_boundaries(self):
        sentence = "The derivative measures an instantaneous rate of change. "
        chunks = TextChunker(chunk_size=120, chunk_overlap=20).split(sentence * 6)
        assert len(chunks) > 1
        assert all(chunk.endswith(".") for chunk in chunks)

    def test_long_unbroken_text_terminates(self):
        chunks = TextChunker(chunk_size=50, chunk_overlap=49).split("x" * 500)
        assert chunks
        assert all(len(chunk) <= 50 for chunk in chunks)


class TestChunkPages:
    def test_metadata_and_sequential_indexes(self):
        chunker = TextChunker(chunk_size=100, chunk_overlap=10)
        pages = [
            (12, "Continuity means the limit equals the value of the function."),
            (13, ""),
            (14, "The intermediate value theorem follows from continuity."),
        ]
        chunks = chunker.chunk_pages(pages, book="openstax", source_file="calc1.pdf")

        assert [c.chunk_index for c in chunks] == [0, 1]
        assert [c.metadata["page"] for c in chunks] == [12, 14]
        assert all(c.metadata["book"] == "openstax" for c in chunks)
        assert all(c.metadata["source_file"] == "calc1.pdf" for c in chunks)

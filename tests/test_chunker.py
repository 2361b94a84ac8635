"""Tests for rag.chunker — fixed-length chunking."""

import pytest

from gguf_rag.rag.chunker import chunk_documents, chunk_text


class TestChunkText:
    def test_drops_trailing_remainder(self):
        assert chunk_text("ABCDEFGHIJ", 3) == ["ABC", "DEF", "GHI"]

    def test_exact_multiple(self):
        assert chunk_text("ABCDEF", 2) == ["AB", "CD", "EF"]

    def test_chunk_size_equal_to_length(self):
        assert chunk_text("hello", 5) == ["hello"]

    @pytest.mark.parametrize("size", [0, -1, -10])
    def test_non_positive_size_is_empty(self, size):
        assert chunk_text("some text", size) == []

    def test_size_larger_than_text_is_empty(self):
        assert chunk_text("short", 6) == []

    def test_empty_text(self):
        assert chunk_text("", 4) == []

    @pytest.mark.parametrize(
        "text,size",
        [
            ("The quick brown fox jumps over the lazy dog", 7),
            ("a" * 100, 9),
            ("line one\nline two\nline three\n", 4),
            ("x", 1),
        ],
    )
    def test_count_length_and_prefix(self, text, size):
        chunks = chunk_text(text, size)
        assert len(chunks) == len(text) // size
        assert all(len(c) == size for c in chunks)
        assert "".join(chunks) == text[: size * len(chunks)]

    def test_deterministic(self):
        text = "repeatable chunking input"
        assert chunk_text(text, 4) == chunk_text(text, 4)


class TestChunkDocuments:
    def test_each_document_drops_its_own_remainder(self):
        assert chunk_documents(["ABCDE", "FGHIJ"], 2) == ["AB", "CD", "FG", "HI"]

    def test_empty_input(self):
        assert chunk_documents([], 3) == []

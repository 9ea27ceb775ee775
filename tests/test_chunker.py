"""Tests for chunking.chunker — chunk_text and TextChunker."""

import pytest

from chunking import ChunkingConfig, TextChunker, chunk_text
from chunking.models import DEFAULT_CHUNK_SIZE, normalize_sizes


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

def _paragraphs(n: int, words: int = 3) -> str:
    return "\n\n".join(
        " ".join(f"p{i}w{j}" for j in range(words)) for i in range(n)
    )


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

class TestEmptyInput:
    def test_empty_string(self):
        assert chunk_text("") == []

    def test_whitespace_only(self):
        assert chunk_text("   \n\n  \t\n\n") == []

    def test_none(self):
        assert chunk_text(None) == []


class TestParagraphs:
    def test_short_text_is_single_chunk(self):
        assert chunk_text("Alpha.\n\nBeta.", 1000, 0) == ["Alpha.\n\nBeta."]

    def test_skips_blank_paragraphs(self):
        assert chunk_text("Alpha.\n\n   \n\nBeta.", 1000, 0) == ["Alpha.\n\nBeta."]

    def test_normalizes_crlf(self):
        assert chunk_text("a\r\n\r\nb", 1000, 0) == ["a\n\nb"]

    def test_emits_when_next_paragraph_does_not_fit(self):
        chunks = chunk_text("one two three\n\nfour five six", 20, 0)
        assert chunks == ["one two three", "four five six"]

    def test_overlap_seeds_next_chunk_with_trailing_words(self):
        chunks = chunk_text("one two three\n\nfour five six", 20, 2)
        assert chunks == ["one two three", "two three\n\nfour five six"]

    def test_without_overlap_chunks_cover_input_in_order(self):
        text = _paragraphs(12)
        chunks = chunk_text(text, 40, 0)
        assert len(chunks) > 1
        assert "\n\n".join(chunks) == text

    def test_chunks_respect_target_size(self):
        chunks = chunk_text(_paragraphs(20), 50, 0)
        assert all(len(c) <= 50 for c in chunks)

    def test_deterministic(self):
        text = _paragraphs(15, words=6)
        assert chunk_text(text, 60, 3) == chunk_text(text, 60, 3)


class TestLongParagraphs:
    def test_splits_into_sentences(self):
        chunks = chunk_text("First one. Second one. Third one.", 25, 0)
        assert chunks == ["First one. Second one.", "Third one."]

    def test_oversized_sentence_emitted_verbatim(self):
        sentence = "x" * 50
        assert chunk_text(sentence, 20, 0) == [sentence]

    def test_oversized_sentence_after_buffered_paragraph(self):
        long_sentence = "y" * 60
        chunks = chunk_text(f"short\n\n{long_sentence}", 20, 0)
        assert chunks == ["short", long_sentence]

    def test_cjk_delimiters(self):
        text = "今天天气很好。我们去公园吧！你觉得怎么样？"
        chunks = chunk_text(text, 10, 0)
        assert chunks == ["今天天气很好。", "我们去公园吧！", "你觉得怎么样？"]


class TestNormalization:
    def test_non_positive_size_uses_default(self):
        assert normalize_sizes(0, 10) == (DEFAULT_CHUNK_SIZE, 10)
        assert normalize_sizes(-5, 10) == (DEFAULT_CHUNK_SIZE, 10)

    @pytest.mark.parametrize("overlap", [-1, 100, 150])
    def test_invalid_overlap_falls_back_to_fifth(self, overlap):
        assert normalize_sizes(100, overlap) == (100, 20)

    def test_invalid_config_still_chunks(self):
        assert chunk_text("Hello", 0, -1) == ["Hello"]


class TestTextChunker:
    def test_uses_config(self):
        chunker = TextChunker(ChunkingConfig(chunk_size=20, chunk_overlap=0))
        assert chunker.chunk("one two three\n\nfour five six") == [
            "one two three",
            "four five six",
        ]

    def test_default_config(self):
        chunker = TextChunker()
        assert chunker.config.chunk_size == 1000
        assert chunker.config.chunk_overlap == 200

    def test_config_normalizes_invalid_values(self):
        config = ChunkingConfig(chunk_size=0, chunk_overlap=-3)
        assert config.chunk_size == 1000
        assert config.chunk_overlap == 200

    def test_config_overlap_not_smaller_than_size(self):
        config = ChunkingConfig(chunk_size=100, chunk_overlap=100)
        assert config.chunk_overlap == 20

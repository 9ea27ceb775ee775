"""
Text Chunker - Core chunking logic for the RAG pipeline

Splits arbitrary text (documents or rendered chat transcripts) into
overlapping fragments sized to a target character length.

Algorithm:
1. Split the text into paragraphs at blank lines.
2. Accumulate paragraphs into a buffer until the next one would exceed
   the target size, then emit the buffer as a chunk.
3. Seed the next buffer with the trailing `overlap` words of the chunk
   just emitted (sliding window measured in words).
4. A paragraph longer than the target size is split into sentences and
   the same accumulate/emit logic runs at sentence granularity.
5. A single sentence longer than the target size is emitted verbatim.

Usage:
    from chunking import TextChunker, ChunkingConfig, chunk_text

    chunks = chunk_text(text, target_size=1000, overlap=200)
    chunks = TextChunker(ChunkingConfig(chunk_size=500)).chunk(text)
"""

from typing import Optional

from .models import (
    DEFAULT_CHUNK_OVERLAP,
    DEFAULT_CHUNK_SIZE,
    ChunkingConfig,
    normalize_sizes,
)
from .sentence_splitter import split_sentences

PARAGRAPH_SEPARATOR = "\n\n"
SENTENCE_SEPARATOR = " "


def chunk_text(
    text: str,
    target_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_CHUNK_OVERLAP,
) -> list[str]:
    """
    Split text into ordered, overlapping fragments.

    Args:
        text: The text to split.
        target_size: Target maximum characters per fragment. Values <= 0
            fall back to DEFAULT_CHUNK_SIZE.
        overlap: Number of trailing words of each fragment repeated at the
            start of the next one. Values outside [0, target_size) fall
            back to 20% of target_size.

    Returns:
        List of fragments in document order. Empty or whitespace-only
        input yields an empty list; any other input yields at least one
        fragment. Sentences longer than target_size are never truncated.
    """
    target_size, overlap = normalize_sizes(target_size, overlap)

    if not text or not text.strip():
        return []

    text = text.replace("\r\n", "\n")
    chunks: list[str] = []
    buffer = ""

    for paragraph in text.split(PARAGRAPH_SEPARATOR):
        if not paragraph.strip():
            continue

        if len(paragraph) > target_size:
            for sentence in split_sentences(paragraph):
                if len(buffer) + len(sentence) + len(SENTENCE_SEPARATOR) <= target_size:
                    buffer = _append(buffer, sentence, SENTENCE_SEPARATOR)
                    continue

                if buffer:
                    chunks.append(buffer)
                    buffer = _overlap_tail(buffer, overlap)

                if len(sentence) > target_size:
                    chunks.append(sentence)
                    buffer = ""
                else:
                    buffer = _append(buffer, sentence, SENTENCE_SEPARATOR)
            continue

        if len(buffer) + len(paragraph) + len(PARAGRAPH_SEPARATOR) <= target_size:
            buffer = _append(buffer, paragraph, PARAGRAPH_SEPARATOR)
            continue

        if buffer:
            chunks.append(buffer)
            buffer = _overlap_tail(buffer, overlap)
        buffer = _append(buffer, paragraph, PARAGRAPH_SEPARATOR)

    if buffer:
        chunks.append(buffer)

    return chunks


class TextChunker:
    """
    Config-bound wrapper around chunk_text.

    Holds no state besides its configuration, so one instance can be
    shared by concurrent ingestions.
    """

    def __init__(self, config: Optional[ChunkingConfig] = None):
        self.config = config or ChunkingConfig()

    def chunk(self, text: str) -> list[str]:
        """Split text using the configured size and overlap."""
        return chunk_text(text, self.config.chunk_size, self.config.chunk_overlap)


# -------------------------------------------------------------------------
# Internal helpers
# -------------------------------------------------------------------------

def _append(buffer: str, piece: str, separator: str) -> str:
    if not buffer:
        return piece
    return f"{buffer}{separator}{piece}"


def _overlap_tail(chunk: str, overlap: int) -> str:
    """Return the last `overlap` whitespace-delimited words of a chunk."""
    if overlap <= 0:
        return ""
    words = chunk.split()
    return SENTENCE_SEPARATOR.join(words[-overlap:])

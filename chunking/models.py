"""
Data Models for the Chunking Pipeline

Defines:
1. ChunkingConfig - Target chunk size and word overlap

Design Principles:
- Pydantic v2 for validation and serialization
- Forgiving defaults: invalid sizes are normalised, never rejected,
  because callers pass through whatever their own configuration holds

Usage:
    config = ChunkingConfig(chunk_size=800, chunk_overlap=50)
    chunks = TextChunker(config).chunk(text)
"""

import logging
from typing import Any

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1000
DEFAULT_CHUNK_OVERLAP = 200


def normalize_sizes(chunk_size: int, chunk_overlap: int) -> tuple[int, int]:
    """
    Apply the fallback rules for chunk size and overlap.

    A non-positive size falls back to DEFAULT_CHUNK_SIZE; an overlap that
    is negative or not smaller than the size falls back to 20% of the size.
    """
    if chunk_size <= 0:
        chunk_size = DEFAULT_CHUNK_SIZE
    if chunk_overlap < 0 or chunk_overlap >= chunk_size:
        chunk_overlap = chunk_size // 5
    return chunk_size, chunk_overlap


class ChunkingConfig(BaseModel):
    """
    Configuration for the chunker.

    chunk_size is measured in characters, chunk_overlap in words carried
    over from the end of one chunk to the start of the next.
    """
    chunk_size: int = Field(
        DEFAULT_CHUNK_SIZE,
        description="Target maximum characters per chunk",
    )
    chunk_overlap: int = Field(
        DEFAULT_CHUNK_OVERLAP,
        description="Trailing words of a chunk repeated at the head of the next one",
    )

    def model_post_init(self, __context: Any) -> None:
        size, overlap = normalize_sizes(self.chunk_size, self.chunk_overlap)
        if (size, overlap) != (self.chunk_size, self.chunk_overlap):
            logger.warning(
                f"Normalised chunking config ({self.chunk_size}, {self.chunk_overlap}) "
                f"to ({size}, {overlap})"
            )
            self.chunk_size = size
            self.chunk_overlap = overlap

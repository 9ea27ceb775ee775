"""
Chunking Module - Paragraph/sentence sliding window chunking for RAG

Splits documents and rendered chat transcripts into overlapping fragments
sized to a target character length. Pure functions, no I/O.

Quick Start:
    from chunking import TextChunker, ChunkingConfig

    chunker = TextChunker(ChunkingConfig(chunk_size=1000, chunk_overlap=200))
    fragments = chunker.chunk(text)
"""

__version__ = "1.0.0"

from .chunker import TextChunker, chunk_text
from .extractor import extract_text
from .models import (
    DEFAULT_CHUNK_OVERLAP,
    DEFAULT_CHUNK_SIZE,
    ChunkingConfig,
    normalize_sizes,
)
from .sentence_splitter import split_sentences

__all__ = [
    "__version__",
    "TextChunker",
    "ChunkingConfig",
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_CHUNK_OVERLAP",
    "chunk_text",
    "extract_text",
    "normalize_sizes",
    "split_sentences",
]

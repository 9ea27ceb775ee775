"""
Vector Store Module - SQLite records + flat float32 vector files

Stores document fragments and their embeddings on local disk and answers
cosine-similarity queries with optional predicate filtering.

Quick Start:
    from vector_store import StoreConfig, VectorStore, HashEmbedder

    embedder = HashEmbedder(dimension=768)
    with VectorStore(StoreConfig(persist_directory="data/vectors")) as store:
        store.add(document, embedder.embed(document.content))
        results = store.search(embedder.embed("query text"), limit=3)
"""

__version__ = "1.0.0"

from .embedder import Embedder, HashEmbedder, OllamaEmbedder
from .models import Document, DocumentMetadata, SearchResult, StoreConfig
from .predicates import (
    Predicate,
    all_of,
    any_of,
    belongs_to_character,
    chat_id_is,
    from_source,
    has_tag,
    is_chat,
)
from .store import DEFAULT_SEARCH_LIMIT, VectorStore
from .vector_file import cosine_similarity, decode_vector, encode_vector

__all__ = [
    "__version__",
    "VectorStore",
    "StoreConfig",
    "Document",
    "DocumentMetadata",
    "SearchResult",
    "DEFAULT_SEARCH_LIMIT",
    "Embedder",
    "OllamaEmbedder",
    "HashEmbedder",
    "Predicate",
    "has_tag",
    "from_source",
    "is_chat",
    "belongs_to_character",
    "chat_id_is",
    "all_of",
    "any_of",
    "cosine_similarity",
    "encode_vector",
    "decode_vector",
]

"""
Retrieval component for RAG pipelines.

Ingests documents and chat transcripts into the vector store and answers
similarity queries, behind one composed RetrievalService.
"""

__version__ = "1.0.0"

from .config import RetrievalConfig
from .ingestion import CHARACTER_CHAT_SOURCE, CHAT_SOURCE, IngestionPipeline
from .models import (
    ChatSummary,
    ChatUploadRequest,
    DocumentSummary,
    IngestRequest,
    IngestResponse,
    IngestResult,
    QueryHit,
    QueryRequest,
    QueryResponse,
    SourceMetadata,
)
from .query import QueryPipeline, build_context
from .service import RetrievalService

__all__ = [
    "__version__",
    "RetrievalConfig",
    "RetrievalService",
    "IngestionPipeline",
    "QueryPipeline",
    "build_context",
    "CHAT_SOURCE",
    "CHARACTER_CHAT_SOURCE",
    "SourceMetadata",
    "IngestResult",
    "QueryHit",
    "IngestRequest",
    "IngestResponse",
    "ChatUploadRequest",
    "ChatSummary",
    "QueryRequest",
    "QueryResponse",
    "DocumentSummary",
]

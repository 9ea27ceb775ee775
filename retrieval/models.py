"""
Data Models for the Retrieval Layer

Defines:
1. SourceMetadata - Source-level metadata shared by every fragment of one ingest
2. IngestResult - Outcome of one ingestion call
3. QueryHit - One ranked fragment in caller-facing shape
4. Request/response payloads used by callers of RetrievalService
5. ChatSummary - Listing entry for a plain chat

The JSON field names of the payloads are stable: existing clients send
{name, content, type} for uploads and {query, limit} for searches, and
read {id, content, title, source, score} per result.
"""

from typing import Optional

from pydantic import BaseModel, Field

from chat_archive.models import ChatMessage


class SourceMetadata(BaseModel):
    """Metadata applied to all fragments produced from one source text."""
    source: str = Field(
        "",
        description="Origin identifier (file name or logical channel)",
    )
    title: str = Field(
        "",
        description="Title shared by all fragments of the source",
    )
    tags: set[str] = Field(
        default_factory=set,
        description="Tags attached to every fragment",
    )
    custom: dict[str, str] = Field(
        default_factory=dict,
        description="Caller-defined attributes copied to every fragment",
    )


class IngestResult(BaseModel):
    document_ids: list[str] = Field(default_factory=list)
    chunk_count: int = 0


class QueryHit(BaseModel):
    id: str
    content: str
    title: str
    source: str
    score: float


# =============================================================================
# Caller-facing payloads
# =============================================================================


class IngestRequest(BaseModel):
    name: str = Field(
        "",
        description="Title of the uploaded text",
    )
    content: str = Field(
        ...,
        description="Raw text to chunk and index",
    )
    type: str = Field(
        "",
        description="Logical source type; becomes the source and a tag",
    )
    tags: list[str] = Field(
        default_factory=list,
        description="Additional tags for filtered search",
    )


class IngestResponse(BaseModel):
    document_ids: list[str] = Field(default_factory=list)
    chunks: int = 0


class ChatUploadRequest(BaseModel):
    id: str = Field(
        "",
        description="Chat id; a new one is assigned when empty",
    )
    title: str = Field(
        "",
        description="Chat title; defaults to a timestamped title",
    )
    messages: list[ChatMessage] = Field(default_factory=list)


class QueryRequest(BaseModel):
    query: str = Field(
        ...,
        description="Natural-language query text",
    )
    limit: int = Field(
        0,
        description="Maximum number of results; <= 0 uses the configured default",
    )


class QueryResponse(BaseModel):
    query: str
    results: list[QueryHit] = Field(default_factory=list)


class DocumentSummary(BaseModel):
    source: str
    title: str
    chunk_count: int
    document_ids: list[str] = Field(default_factory=list)
    chat_id: Optional[str] = None


class ChatSummary(BaseModel):
    """One plain (non-character) chat, as recorded on its first fragment."""
    id: str
    title: str
    message_count: int = 0
    upload_time: str = ""

"""
Data Models for the Vector Store

Defines:
1. StoreConfig - Location and vector dimension of a store
2. DocumentMetadata - Source, tags and chunk position of a fragment
3. Document - One stored text fragment
4. SearchResult - A ranked search hit with its cosine similarity

Design Principles:
- Pydantic v2 for validation and serialization
- Documents are the unit of storage: one per chunk, one vector each
- Tags are an unordered set, serialized sorted so records are byte-stable
"""

from typing import Any

from pydantic import BaseModel, Field, field_serializer, model_validator


class StoreConfig(BaseModel):
    """Configuration for the vector store."""
    persist_directory: str = Field(
        "./data/vectors",
        description="Directory holding the document database and vector files",
    )
    dimension: int = Field(
        768,
        description="Length of every stored vector",
        gt=0,
    )
    database_name: str = Field(
        "docs.sqlite3",
        description="File name of the document database inside persist_directory",
    )


class DocumentMetadata(BaseModel):
    """
    Metadata attached to each fragment for filtering and for
    reconstructing where it came from.
    """
    source: str = Field(
        "",
        description="Origin identifier (file name or logical channel such as 'chat')",
    )
    title: str = Field(
        "",
        description="Title of the source the fragment belongs to",
    )
    tags: set[str] = Field(
        default_factory=set,
        description="Unordered tags used by search predicates",
    )
    custom: dict[str, str] = Field(
        default_factory=dict,
        description="Caller-defined attributes such as chat_id or character",
    )
    chunk_index: int = Field(
        0,
        description="Position of this fragment within its source (0-indexed)",
        ge=0,
    )
    chunk_count: int = Field(
        1,
        description="Total number of fragments of the source",
        ge=1,
    )

    @model_validator(mode="after")
    def _check_chunk_position(self) -> "DocumentMetadata":
        if self.chunk_index >= self.chunk_count:
            raise ValueError(
                f"chunk_index ({self.chunk_index}) must be less than "
                f"chunk_count ({self.chunk_count})"
            )
        return self

    @field_serializer("tags")
    def _serialize_tags(self, tags: set[str]) -> list[str]:
        return sorted(tags)


class Document(BaseModel):
    """A single stored text fragment."""
    id: str = Field(
        ...,
        description="Unique identifier assigned at ingestion time",
        min_length=1,
    )
    content: str = Field(
        ...,
        description="The fragment text",
    )
    metadata: DocumentMetadata = Field(
        default_factory=DocumentMetadata,
        description="Source and position metadata",
    )

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class SearchResult(BaseModel):
    """A single search result from the vector store."""
    document: Document
    score: float = Field(
        ...,
        description="Cosine similarity to the query vector (1 = same direction)",
    )

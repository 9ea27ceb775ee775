"""
Pytest fixtures for the storage and retrieval engine tests.
"""

import pytest

from chat_archive import ChatArchive, ChatMessage, ChatTranscript
from retrieval import RetrievalConfig, RetrievalService
from vector_store import Document, DocumentMetadata, HashEmbedder, StoreConfig, VectorStore

DIMENSION = 8


@pytest.fixture
def store_config(tmp_path):
    """StoreConfig pointing at a fresh temporary directory."""
    return StoreConfig(persist_directory=str(tmp_path / "vectors"), dimension=DIMENSION)


@pytest.fixture
def store(store_config):
    """An opened VectorStore, closed after the test."""
    with VectorStore(store_config) as opened:
        yield opened


@pytest.fixture
def embedder():
    """Deterministic embedder matching the store dimension."""
    return HashEmbedder(dimension=DIMENSION)


@pytest.fixture
def archive(tmp_path):
    return ChatArchive(str(tmp_path / "rag"))


@pytest.fixture
def sample_document():
    return Document(
        id="doc-1",
        content="Alpha.\n\nBeta.",
        metadata=DocumentMetadata(
            source="notes",
            title="Greek letters",
            tags={"databank", "notes"},
            custom={"upload_time": "2024-05-01T10:00:00+00:00"},
            chunk_index=0,
            chunk_count=1,
        ),
    )


@pytest.fixture
def sample_transcript():
    return ChatTranscript(
        id="c1",
        title="T",
        messages=[
            ChatMessage(role="user", content="hi", timestamp="2024-05-01 10:00"),
            ChatMessage(role="assistant", content="Hello! How can I help?", timestamp="2024-05-01 10:01"),
        ],
    )


@pytest.fixture
def service(tmp_path, embedder):
    """An opened RetrievalService on a temporary data directory."""
    config = RetrievalConfig(data_dir=str(tmp_path / "rag"), dimension=DIMENSION)
    with RetrievalService(config, embedder=embedder) as opened:
        yield opened

"""
Retrieval Service - composition root for the storage and retrieval engine

Builds the vector store, chat archive, chunker and both pipelines from a
RetrievalConfig and owns their lifecycle: open() once at startup, close()
once at shutdown. Everything below it receives its collaborators
explicitly; there are no module-level singletons.

Usage:
    from retrieval import RetrievalConfig, RetrievalService, QueryRequest

    with RetrievalService(RetrievalConfig.from_env()) as service:
        service.ingest(IngestRequest(name="notes.md", content=text, type="notes"))
        response = service.query(QueryRequest(query="What is alpha?", limit=3))
"""

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from chat_archive.archive import ChatArchive
from chat_archive.models import ChatInfo, ChatTranscript
from chunking.chunker import TextChunker
from chunking.extractor import extract_text
from chunking.models import ChunkingConfig
from core.exceptions import InvalidInputError, NotFoundError
from vector_store.embedder import Embedder, OllamaEmbedder
from vector_store.models import Document, StoreConfig
from vector_store.predicates import all_of, belongs_to_character, from_source, is_chat
from vector_store.store import VectorStore

from .config import RetrievalConfig
from .ingestion import CHAT_SOURCE, IngestionPipeline
from .models import (
    ChatSummary,
    ChatUploadRequest,
    DocumentSummary,
    IngestRequest,
    IngestResponse,
    IngestResult,
    QueryRequest,
    QueryResponse,
    SourceMetadata,
)
from .query import QueryPipeline

logger = logging.getLogger(__name__)

DATABANK_TAG = "databank"


class RetrievalService:
    """
    Single entry point for document and chat storage and retrieval.

    Documents are uploaded as text or files and searched by similarity.
    Character chats are archived verbatim and indexed per character; plain
    chats are only indexed. Call open() before use and close() afterwards,
    or use the service as a context manager.
    """

    def __init__(self, config: Optional[RetrievalConfig] = None, embedder: Optional[Embedder] = None):
        self.config = config or RetrievalConfig()
        self.embedder = embedder or OllamaEmbedder(
            model=self.config.embedding_model,
            base_url=self.config.ollama_base_url,
            dimension=self.config.dimension,
        )
        self.store = VectorStore(
            StoreConfig(
                persist_directory=str(self.config.vector_dir),
                dimension=self.config.dimension,
            )
        )
        self.archive = ChatArchive(self.config.data_dir)
        self.chunker = TextChunker(
            ChunkingConfig(
                chunk_size=self.config.chunk_size,
                chunk_overlap=self.config.chunk_overlap,
            )
        )
        self.ingestion = IngestionPipeline(self.store, self.embedder, self.chunker, self.archive)
        self.queries = QueryPipeline(self.store, self.embedder)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def open(self) -> "RetrievalService":
        self.store.open()
        logger.info(f"Retrieval service ready (data_dir={self.config.data_dir})")
        return self

    def close(self) -> None:
        self.store.close()

    def __enter__(self) -> "RetrievalService":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Documents
    # -------------------------------------------------------------------------

    def ingest(self, request: IngestRequest) -> IngestResponse:
        tags = {DATABANK_TAG, *request.tags}
        if request.type:
            tags.add(request.type)
        metadata = SourceMetadata(
            source=request.type,
            title=request.name,
            tags=tags,
            custom={"upload_time": datetime.now(timezone.utc).isoformat()},
        )
        return _response(self.ingestion.ingest_text(request.content, metadata))

    def ingest_file(self, filename: str, content: bytes) -> IngestResponse:
        """
        Extract, chunk and index an uploaded file.

        The file name becomes the source, its stem the title and its
        extension (without the dot) a tag.

        Raises:
            InvalidInputError: For a missing file name, an unsupported
                format or a file without text.
        """
        path = Path(filename or "")
        if not path.name:
            raise InvalidInputError("Uploaded file has no name")
        ext = path.suffix.lower()
        text = extract_text(content, ext)
        metadata = SourceMetadata(
            source=path.name,
            title=path.stem,
            tags={DATABANK_TAG, ext.lstrip(".")},
            custom={"upload_time": datetime.now(timezone.utc).isoformat()},
        )
        return _response(self.ingestion.ingest_text(text, metadata))

    def query(self, request: QueryRequest) -> QueryResponse:
        hits = self.queries.query(
            request.query,
            limit=self._limit(request),
            min_score=self.config.min_score,
        )
        return QueryResponse(query=request.query, results=hits)

    def list_documents(self) -> list[DocumentSummary]:
        """Group stored fragments by (source, title), in first-seen order."""
        groups: dict[tuple[str, str], DocumentSummary] = {}
        for doc in self.store.list():
            key = (doc.metadata.source, doc.metadata.title)
            summary = groups.get(key)
            if summary is None:
                summary = groups[key] = DocumentSummary(
                    source=doc.metadata.source,
                    title=doc.metadata.title,
                    chunk_count=0,
                    chat_id=doc.metadata.custom.get("chat_id"),
                )
            summary.chunk_count += 1
            summary.document_ids.append(doc.id)
        return list(groups.values())

    def get_document(self, doc_id: str) -> Document:
        return self.store.get(doc_id)

    def delete_document(self, doc_id: str) -> None:
        """Delete one stored fragment; raises NotFoundError for unknown ids."""
        self.store.delete(doc_id)
        logger.info(f"Deleted document {doc_id}")

    # -------------------------------------------------------------------------
    # Chats
    # -------------------------------------------------------------------------

    def ingest_chat(self, character: Optional[str], request: ChatUploadRequest) -> IngestResponse:
        """
        Archive (for a character) and index a chat upload.

        Re-uploading a chat id replaces its previously indexed fragments.
        """
        now = datetime.now(timezone.utc)
        title = request.title
        if not title:
            prefix = f"{character} chat" if character else "Chat"
            title = f"{prefix} {now.strftime('%Y-%m-%d %H:%M:%S')}"
        transcript = ChatTranscript(
            id=request.id or uuid.uuid4().hex,
            title=title,
            messages=request.messages,
        )
        return _response(self.ingestion.reindex_transcript(transcript, character))

    def search_chats(self, character: str, request: QueryRequest) -> QueryResponse:
        hits = self.queries.query(
            request.query,
            limit=self._limit(request),
            predicate=all_of(is_chat(), belongs_to_character(character)),
            min_score=self.config.min_score,
        )
        return QueryResponse(query=request.query, results=hits)

    def list_chats(self, character: str) -> list[ChatInfo]:
        return self.archive.list_chats(character)

    def get_chat(self, character: str, chat_id: str) -> ChatTranscript:
        return self.archive.get(character, chat_id)

    def list_characters(self) -> set[str]:
        return self.archive.list_characters()

    def delete_chat(self, character: str, chat_id: str) -> int:
        """Delete an archived chat and all of its indexed fragments."""
        self.archive.delete(character, chat_id)
        removed = self.ingestion.remove_transcript(chat_id, character)
        logger.info(f"Deleted chat {character}/{chat_id} and {removed} fragments")
        return removed

    def list_plain_chats(self) -> list[ChatSummary]:
        """Summarise indexed plain chats from their first fragments, in upload order."""
        summaries: dict[str, ChatSummary] = {}
        plain_chat = all_of(is_chat(), from_source(CHAT_SOURCE))
        for doc in self.store.list():
            if doc.metadata.chunk_index != 0 or not plain_chat(doc):
                continue
            custom = doc.metadata.custom
            chat_id = custom.get("chat_id")
            if not chat_id or chat_id in summaries:
                continue
            summaries[chat_id] = ChatSummary(
                id=chat_id,
                title=doc.metadata.title,
                message_count=int(custom.get("message_count") or 0),
                upload_time=custom.get("upload_time", ""),
            )
        return list(summaries.values())

    def delete_plain_chat(self, chat_id: str) -> int:
        """
        Delete every indexed fragment of a plain chat.

        Raises:
            NotFoundError: If no fragment belongs to this chat.
        """
        removed = self.ingestion.remove_transcript(chat_id)
        if not removed:
            raise NotFoundError("chat", chat_id)
        logger.info(f"Deleted chat {chat_id} and {removed} fragments")
        return removed

    def _limit(self, request: QueryRequest) -> int:
        return request.limit if request.limit > 0 else self.config.default_limit


def _response(result: IngestResult) -> IngestResponse:
    return IngestResponse(document_ids=result.document_ids, chunks=result.chunk_count)

"""
Ingestion Pipeline - raw text or chat transcripts into stored fragments

Flow per call:
1. Transcripts are archived verbatim first (when an archive is attached),
   then rendered into one role-prefixed text blob
2. The text is chunked with the configured size and overlap
3. Each fragment, in order, gets a fresh id, is embedded and added to the
   vector store

Ingestion is not transactional across fragments: a failure on fragment k > 0
stops the call and raises PartialIngestError carrying the ids committed
so far, so the caller can decide whether to retry or clean up. A failure on
the first fragment commits nothing and propagates the underlying error.

Usage:
    pipeline = IngestionPipeline(store, embedder, TextChunker(), archive)
    result = pipeline.ingest_text(text, SourceMetadata(source="notes", title="Notes"))
"""

import logging
import uuid
from typing import Optional

from chat_archive.archive import ChatArchive
from chat_archive.models import ChatTranscript
from chat_archive.render import chat_metadata, render_transcript
from chunking.chunker import TextChunker
from core.exceptions import (
    InvalidInputError,
    PartialIngestError,
    ProviderFaultError,
    RAGError,
)
from vector_store.embedder import Embedder
from vector_store.models import Document, DocumentMetadata
from vector_store.predicates import (
    all_of,
    belongs_to_character,
    chat_id_is,
    from_source,
    is_chat,
)
from vector_store.store import VectorStore

from .models import IngestResult, SourceMetadata

logger = logging.getLogger(__name__)

CHAT_SOURCE = "chat"
CHARACTER_CHAT_SOURCE = "character_chat"


class IngestionPipeline:
    """Chunks, embeds and stores text; archives transcripts before indexing."""

    def __init__(
        self,
        store: VectorStore,
        embedder: Embedder,
        chunker: Optional[TextChunker] = None,
        archive: Optional[ChatArchive] = None,
    ):
        self.store = store
        self.embedder = embedder
        self.chunker = chunker or TextChunker()
        self.archive = archive

    def ingest_text(self, content: str, metadata: SourceMetadata) -> IngestResult:
        """
        Chunk, embed and store a text.

        Raises:
            InvalidInputError: If the text yields no fragments.
            ProviderFaultError, StorageFaultError: If the first fragment
                fails; nothing has been committed.
            PartialIngestError: If a later fragment fails after earlier ones
                were committed.
        """
        fragments = self.chunker.chunk(content)
        if not fragments:
            raise InvalidInputError("Nothing to ingest: content is empty")

        total = len(fragments)
        committed: list[str] = []
        for index, fragment in enumerate(fragments):
            doc_id = uuid.uuid4().hex
            try:
                vector = self._embed(fragment)
                document = Document(
                    id=doc_id,
                    content=fragment,
                    metadata=DocumentMetadata(
                        source=metadata.source,
                        title=metadata.title,
                        tags=set(metadata.tags),
                        custom=dict(metadata.custom),
                        chunk_index=index,
                        chunk_count=total,
                    ),
                )
                self.store.add(document, vector)
            except RAGError as e:
                logger.error(
                    f"Ingestion of '{metadata.title}' failed at fragment "
                    f"{index + 1}/{total}: {e}"
                )
                if not committed:
                    raise
                raise PartialIngestError(committed, index, total, e) from e
            committed.append(doc_id)

        logger.info(f"Ingested '{metadata.title}' as {total} fragments")
        return IngestResult(document_ids=committed, chunk_count=total)

    def ingest_transcript(
        self,
        transcript: ChatTranscript,
        character: Optional[str] = None,
    ) -> IngestResult:
        """
        Archive a transcript (when a character is given) and index its text.

        The archive write happens before any embedding, so the raw history
        is recoverable even if indexing fails.

        Raises:
            InvalidInputError: If the transcript has no messages, or a
                character is given but no archive is attached.
            ProviderFaultError: If the first fragment cannot be embedded.
            PartialIngestError: If indexing stops part way.
        """
        if not transcript.messages:
            raise InvalidInputError("Chat transcript has no messages")

        if character is not None:
            if self.archive is None:
                raise InvalidInputError("No chat archive configured for character chats")
            self.archive.save(character, transcript)
            metadata = SourceMetadata(
                source=CHARACTER_CHAT_SOURCE,
                title=transcript.title,
                tags={"chat", "character", character},
                custom=chat_metadata(transcript, character=character),
            )
        else:
            metadata = SourceMetadata(
                source=CHAT_SOURCE,
                title=transcript.title,
                tags={"chat", "conversation"},
                custom=chat_metadata(transcript),
            )

        return self.ingest_text(render_transcript(transcript), metadata)

    def reindex_transcript(
        self,
        transcript: ChatTranscript,
        character: Optional[str] = None,
    ) -> IngestResult:
        """
        Replace the indexed fragments of a transcript with a fresh ingest.

        The new fragments are committed before the old ones are removed, so
        a failed re-upload leaves the previous version searchable.
        """
        result = self.ingest_transcript(transcript, character)
        removed = self.remove_transcript(transcript.id, character, keep=set(result.document_ids))
        if removed:
            logger.info(f"Removed {removed} stale fragments of chat {transcript.id}")
        return result

    def remove_transcript(
        self,
        chat_id: str,
        character: Optional[str] = None,
        keep: Optional[set[str]] = None,
    ) -> int:
        """Delete every indexed fragment of one chat except `keep`; returns how many went."""
        conditions = [is_chat(), chat_id_is(chat_id)]
        if character is not None:
            conditions.append(belongs_to_character(character))
        else:
            conditions.append(from_source(CHAT_SOURCE))
        if keep:
            conditions.append(lambda doc: doc.id not in keep)
        return len(self.store.delete_where(all_of(*conditions)))

    def _embed(self, text: str) -> list[float]:
        try:
            vector = list(self.embedder.embed(text))
        except ProviderFaultError:
            raise
        except Exception as e:
            raise ProviderFaultError("Embedding provider failed", e) from e
        if len(vector) != self.store.dimension:
            raise ProviderFaultError(
                f"Embedding provider returned {len(vector)} components, "
                f"expected {self.store.dimension}"
            )
        return vector

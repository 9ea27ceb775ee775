"""
Vector Store - durable home for document fragments and their vectors

Manages the lifecycle of fragments and their embeddings:
- Add: upsert a document record and write its vector file
- Get: fetch a document or its vector by id
- Delete: remove one document, or every document matching a predicate
- Search: cosine-similarity ranking with optional predicate filtering

Design:
- Document records live in an embedded SQLite database used as a
  transactional key-value store, keyed by "doc:" + id, with an insertion
  sequence that makes listing and tie-breaking deterministic
- Vectors live in one flat file per id (dimension * 4 bytes, little-endian
  float32), outside transaction overhead: they are write-once/read-many
- Upsert semantics: re-adding an id overwrites record and vector in place
- Reader/writer lock: searches run concurrently, writes are exclusive, so
  a search never observes a half-written document/vector pair
- Per-item faults during search and list (unreadable vector file, corrupt
  record) skip that item instead of failing the whole query

Usage:
    from vector_store import StoreConfig, VectorStore

    with VectorStore(StoreConfig(persist_directory="data/vectors", dimension=768)) as store:
        store.add(document, vector)
        results = store.search(query_vector, limit=3)
"""

from __future__ import annotations

import json
import logging
import re
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Sequence

import numpy as np
from pydantic import ValidationError

from core.exceptions import (
    InvalidInputError,
    NotFoundError,
    StorageFaultError,
    StoreClosedError,
    VectorFileError,
)
from core.locks import ReadWriteLock

from .models import Document, SearchResult, StoreConfig
from .predicates import Predicate
from .vector_file import (
    VECTOR_SUFFIX,
    cosine_similarity,
    read_vector_file,
    write_vector_file,
)

logger = logging.getLogger(__name__)

DOC_PREFIX = "doc:"
# Exclusive upper bound of the "doc:" key range (":" + 1 == ";").
_DOC_PREFIX_END = DOC_PREFIX[:-1] + chr(ord(DOC_PREFIX[-1]) + 1)

DEFAULT_SEARCH_LIMIT = 5

_SAFE_ID_PATTERN = re.compile(r"[A-Za-z0-9_-][A-Za-z0-9._-]*")

_SCHEMA = """
    CREATE TABLE IF NOT EXISTS kv (
        key TEXT PRIMARY KEY,
        seq INTEGER NOT NULL,
        value TEXT NOT NULL
    )
"""

_UPSERT = """
    INSERT INTO kv (key, seq, value)
    VALUES (?, (SELECT COALESCE(MAX(seq), 0) + 1 FROM kv), ?)
    ON CONFLICT(key) DO UPDATE SET value = excluded.value
"""


class VectorStore:
    """
    Document and vector storage with cosine-similarity search.

    The store is constructed explicitly and opened/closed by whoever
    composes the application; every operation after close() raises
    StoreClosedError.
    """

    def __init__(self, config: Optional[StoreConfig] = None):
        """
        Initialize the store (does not touch the disk until open()).

        Args:
            config: Store configuration. Uses defaults if not provided.
        """
        self.config = config or StoreConfig()
        self.root = Path(self.config.persist_directory)
        self.vector_dir = self.root / "vectors"
        self.db_path = self.root / self.config.database_name
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = ReadWriteLock()

    @property
    def dimension(self) -> int:
        return self.config.dimension

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def open(self) -> "VectorStore":
        """Create the directories and open the document database."""
        with self._lock.write_locked():
            if self._conn is not None:
                return self
            try:
                self.vector_dir.mkdir(parents=True, exist_ok=True)
                conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
                with conn:
                    conn.execute(_SCHEMA)
            except (OSError, sqlite3.Error) as e:
                raise StorageFaultError(f"Cannot open vector store at {self.root}", e) from e
            self._conn = conn
        logger.info(f"Opened vector store at {self.root} (dimension={self.dimension})")
        return self

    def close(self) -> None:
        """Close the document database. Safe to call more than once."""
        with self._lock.write_locked():
            if self._conn is None:
                return
            try:
                self._conn.close()
            except sqlite3.Error as e:
                raise StorageFaultError("Failed to close vector store", e) from e
            finally:
                self._conn = None
        logger.info(f"Closed vector store at {self.root}")

    def __enter__(self) -> "VectorStore":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def add(self, document: Document, vector: Sequence[float]) -> None:
        """
        Store a document and its vector, overwriting any document with the same id.

        The record is committed only after the vector file is written; if the
        commit fails, the vector file is restored to its previous state.

        Raises:
            InvalidInputError: If the vector length differs from the store
                dimension or the id cannot be used as a file name.
            StorageFaultError: If the database or the vector file cannot be written.
        """
        self._check_id(document.id)
        if len(vector) != self.dimension:
            raise InvalidInputError(
                f"Vector has {len(vector)} components, store dimension is {self.dimension}",
                details=f"document {document.id}",
            )
        try:
            values = np.asarray(vector, dtype=np.float32)
        except (TypeError, ValueError) as e:
            raise InvalidInputError("Vector components must be numbers", str(e)) from e

        payload = json.dumps(document.to_dict(), ensure_ascii=False)
        path = self._vector_path(document.id)

        with self._lock.write_locked():
            conn = self._require_open()
            previous = path.read_bytes() if path.exists() else None

            try:
                write_vector_file(path, values)
            except OSError as e:
                raise StorageFaultError(f"Cannot write vector for {document.id}", e) from e

            try:
                with conn:
                    conn.execute(_UPSERT, (DOC_PREFIX + document.id, payload))
            except sqlite3.Error as e:
                self._restore_vector(path, previous)
                raise StorageFaultError(f"Cannot store document {document.id}", e) from e

        logger.debug(f"Stored document {document.id} ({len(document.content)} chars)")

    def delete(self, doc_id: str) -> None:
        """
        Delete a document and its vector.

        Raises:
            NotFoundError: If no document with this id exists.
            StorageFaultError: If the database or vector file cannot be removed.
        """
        with self._lock.write_locked():
            conn = self._require_open()
            with self._db_errors(f"delete document {doc_id}"):
                with conn:
                    cursor = conn.execute("DELETE FROM kv WHERE key = ?", (DOC_PREFIX + doc_id,))
                    if cursor.rowcount == 0:
                        raise NotFoundError("document", doc_id)
            self._remove_vector(doc_id)

        logger.debug(f"Deleted document {doc_id}")

    def delete_where(self, predicate: Predicate) -> list[str]:
        """
        Delete every document matching a predicate (e.g. all chunks of one chat).

        Returns:
            Ids of the deleted documents, in insertion order.
        """
        with self._lock.write_locked():
            conn = self._require_open()
            doomed = [doc.id for doc in self._iter_documents(conn) if predicate(doc)]
            if not doomed:
                return []
            with self._db_errors("bulk delete documents"):
                with conn:
                    conn.executemany(
                        "DELETE FROM kv WHERE key = ?",
                        [(DOC_PREFIX + doc_id,) for doc_id in doomed],
                    )
            for doc_id in doomed:
                self._remove_vector(doc_id)

        logger.info(f"Deleted {len(doomed)} documents")
        return doomed

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get(self, doc_id: str) -> Document:
        """
        Fetch a document by id.

        Raises:
            NotFoundError: If no document with this id exists.
        """
        with self._lock.read_locked():
            conn = self._require_open()
            with self._db_errors(f"read document {doc_id}"):
                row = conn.execute(
                    "SELECT value FROM kv WHERE key = ?", (DOC_PREFIX + doc_id,)
                ).fetchone()
        if row is None:
            raise NotFoundError("document", doc_id)
        return self._parse_record(doc_id, row[0])

    def get_vector(self, doc_id: str) -> list[float]:
        """
        Fetch the vector stored for a document id.

        Raises:
            NotFoundError: If the vector file does not exist.
            VectorFileError: If the vector file is corrupt.
            InvalidInputError: If the id cannot be a storage key.
        """
        self._check_id(doc_id)
        path = self._vector_path(doc_id)
        with self._lock.read_locked():
            self._require_open()
            if not path.exists():
                raise NotFoundError("vector", doc_id)
            vector = read_vector_file(path, self.dimension)
        return vector.tolist()

    def list(self) -> list[Document]:
        """List all documents (without vectors) in insertion order."""
        with self._lock.read_locked():
            conn = self._require_open()
            return list(self._iter_documents(conn))

    def count(self) -> int:
        """Return the number of stored documents."""
        with self._lock.read_locked():
            conn = self._require_open()
            with self._db_errors("count documents"):
                row = conn.execute(
                    "SELECT COUNT(*) FROM kv WHERE key >= ? AND key < ?",
                    (DOC_PREFIX, _DOC_PREFIX_END),
                ).fetchone()
        return int(row[0])

    def search(
        self,
        query_vector: Sequence[float],
        limit: int = DEFAULT_SEARCH_LIMIT,
        predicate: Optional[Predicate] = None,
    ) -> list[SearchResult]:
        """
        Rank stored documents by cosine similarity to a query vector.

        Args:
            query_vector: Vector of the store's dimension.
            limit: Maximum number of results; values <= 0 fall back to
                DEFAULT_SEARCH_LIMIT.
            predicate: Optional filter; only matching documents are scored.

        Returns:
            Up to `limit` SearchResults in descending score order. Equal
            scores keep insertion order. Documents whose vector cannot be
            read are skipped.

        Raises:
            InvalidInputError: If the query vector has the wrong length.
        """
        if limit <= 0:
            limit = DEFAULT_SEARCH_LIMIT
        if len(query_vector) != self.dimension:
            raise InvalidInputError(
                f"Query vector has {len(query_vector)} components, "
                f"store dimension is {self.dimension}"
            )
        query = np.asarray(query_vector, dtype=np.float32)

        scored: list[tuple[float, Document]] = []
        skipped = 0
        with self._lock.read_locked():
            conn = self._require_open()
            for document in self._iter_documents(conn):
                if predicate is not None and not predicate(document):
                    continue
                try:
                    vector = read_vector_file(self._vector_path(document.id), self.dimension)
                except VectorFileError as e:
                    logger.warning(f"Skipping document {document.id} in search: {e}")
                    skipped += 1
                    continue
                scored.append((cosine_similarity(query, vector), document))

        # list.sort is stable, also with reverse=True
        scored.sort(key=lambda item: item[0], reverse=True)

        logger.debug(
            f"Search scored {len(scored)} documents, skipped {skipped}, returning "
            f"{min(limit, len(scored))}"
        )
        return [SearchResult(document=doc, score=score) for score, doc in scored[:limit]]

    # -------------------------------------------------------------------------
    # Internal methods
    # -------------------------------------------------------------------------

    def _require_open(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreClosedError("vector store")
        return self._conn

    @contextmanager
    def _db_errors(self, action: str) -> Iterator[None]:
        try:
            yield
        except sqlite3.Error as e:
            raise StorageFaultError(f"Cannot {action}", e) from e

    def _iter_documents(self, conn: sqlite3.Connection) -> Iterator[Document]:
        """Prefix scan over "doc:" keys in insertion order, skipping corrupt records."""
        with self._db_errors("list documents"):
            rows = conn.execute(
                "SELECT key, value FROM kv WHERE key >= ? AND key < ? ORDER BY seq",
                (DOC_PREFIX, _DOC_PREFIX_END),
            ).fetchall()
        for key, value in rows:
            doc_id = key[len(DOC_PREFIX):]
            try:
                yield self._parse_record(doc_id, value)
            except StorageFaultError as e:
                logger.warning(f"Skipping corrupt record {doc_id}: {e}")

    @staticmethod
    def _parse_record(doc_id: str, value: str) -> Document:
        try:
            return Document.model_validate(json.loads(value))
        except (json.JSONDecodeError, ValidationError) as e:
            raise StorageFaultError(f"Corrupt document record {doc_id}", e) from e

    def _vector_path(self, doc_id: str) -> Path:
        return self.vector_dir / f"{doc_id}{VECTOR_SUFFIX}"

    def _remove_vector(self, doc_id: str) -> None:
        try:
            self._vector_path(doc_id).unlink(missing_ok=True)
        except OSError as e:
            raise StorageFaultError(f"Cannot delete vector for {doc_id}", e) from e

    def _restore_vector(self, path: Path, previous: Optional[bytes]) -> None:
        try:
            if previous is None:
                path.unlink(missing_ok=True)
            else:
                path.write_bytes(previous)
        except OSError as e:
            logger.error(f"Could not roll back vector file {path}: {e}")

    @staticmethod
    def _check_id(doc_id: str) -> None:
        if not _SAFE_ID_PATTERN.fullmatch(doc_id or ""):
            raise InvalidInputError(
                f"Document id {doc_id!r} is not usable as a storage key",
                details="allowed characters: letters, digits, '.', '_', '-'",
            )

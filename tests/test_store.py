"""Tests for vector_store.store — VectorStore."""

import threading

import pytest

from chunking import chunk_text
from core.exceptions import (
    InvalidInputError,
    NotFoundError,
    StorageFaultError,
    StoreClosedError,
    VectorFileError,
)
from vector_store.models import Document, DocumentMetadata
from vector_store.predicates import has_tag
from vector_store.store import DEFAULT_SEARCH_LIMIT, VectorStore


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

DIM = 8


def _unit(index: int) -> list[float]:
    vector = [0.0] * DIM
    vector[index] = 1.0
    return vector


def _make_doc(doc_id: str, content: str = "", tags=(), **meta) -> Document:
    return Document(
        id=doc_id,
        content=content or f"Content of {doc_id}",
        metadata=DocumentMetadata(source="test", title="Test", tags=set(tags), **meta),
    )


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

class TestLifecycle:
    def test_open_creates_layout(self, store_config):
        store = VectorStore(store_config).open()
        try:
            assert store.is_open
            assert store.vector_dir.is_dir()
            assert store.db_path.exists()
        finally:
            store.close()

    def test_close_is_idempotent(self, store):
        store.close()
        store.close()
        assert not store.is_open

    def test_operations_after_close_raise(self, store, sample_document):
        store.close()
        with pytest.raises(StoreClosedError):
            store.add(sample_document, _unit(0))
        with pytest.raises(StoreClosedError):
            store.get(sample_document.id)
        with pytest.raises(StoreClosedError):
            store.list()
        with pytest.raises(StoreClosedError):
            store.search(_unit(0))

    def test_closed_error_is_storage_fault(self, store):
        store.close()
        with pytest.raises(StorageFaultError):
            store.count()

    def test_persists_across_reopen(self, store_config, sample_document):
        with VectorStore(store_config) as store:
            store.add(sample_document, _unit(2))

        with VectorStore(store_config) as reopened:
            assert reopened.get(sample_document.id) == sample_document
            assert reopened.get_vector(sample_document.id) == _unit(2)


class TestAdd:
    def test_round_trip(self, store, sample_document):
        store.add(sample_document, _unit(0))
        assert store.get(sample_document.id) == sample_document

    def test_vector_round_trip(self, store, sample_document):
        vector = [0.5, -0.25, 0.125, 1.0, 0.0, -1.0, 2.0, 3.5]
        store.add(sample_document, vector)
        assert store.get_vector(sample_document.id) == vector

    def test_vector_file_size(self, store, sample_document):
        store.add(sample_document, _unit(0))
        path = store.vector_dir / f"{sample_document.id}.vec"
        assert path.stat().st_size == DIM * 4

    def test_wrong_dimension_persists_nothing(self, store, sample_document):
        with pytest.raises(InvalidInputError):
            store.add(sample_document, [1.0] * (DIM + 1))
        assert store.count() == 0
        assert list(store.vector_dir.iterdir()) == []
        with pytest.raises(NotFoundError):
            store.get(sample_document.id)

    def test_non_numeric_vector_rejected(self, store, sample_document):
        with pytest.raises(InvalidInputError):
            store.add(sample_document, ["a"] * DIM)
        assert store.count() == 0

    @pytest.mark.parametrize("doc_id", ["../escape", "a/b", ".hidden", "with space", "abc\n", "abc\n\n"])
    def test_unsafe_id_rejected(self, store, doc_id):
        with pytest.raises(InvalidInputError):
            store.add(_make_doc("ok").model_copy(update={"id": doc_id}), _unit(0))

    def test_upsert_overwrites_and_keeps_position(self, store):
        store.add(_make_doc("a", "first"), _unit(0))
        store.add(_make_doc("b"), _unit(1))
        store.add(_make_doc("a", "second"), _unit(2))

        assert store.count() == 2
        assert [d.id for d in store.list()] == ["a", "b"]
        assert store.get("a").content == "second"
        assert store.get_vector("a") == _unit(2)


class TestGetDelete:
    def test_get_missing(self, store):
        with pytest.raises(NotFoundError, match="Document not found: nope"):
            store.get("nope")

    def test_get_vector_missing(self, store):
        with pytest.raises(NotFoundError):
            store.get_vector("nope")

    def test_get_vector_corrupt(self, store, sample_document):
        store.add(sample_document, _unit(0))
        (store.vector_dir / f"{sample_document.id}.vec").write_bytes(b"\x00" * 5)
        with pytest.raises(VectorFileError):
            store.get_vector(sample_document.id)

    def test_delete(self, store, sample_document):
        store.add(sample_document, _unit(0))
        store.delete(sample_document.id)

        with pytest.raises(NotFoundError):
            store.get(sample_document.id)
        with pytest.raises(NotFoundError):
            store.get_vector(sample_document.id)
        assert store.list() == []
        assert store.search(_unit(0)) == []

    def test_double_delete_reported(self, store, sample_document):
        store.add(sample_document, _unit(0))
        store.delete(sample_document.id)
        with pytest.raises(NotFoundError):
            store.delete(sample_document.id)

    def test_delete_where(self, store):
        store.add(_make_doc("a", tags=["chat"]), _unit(0))
        store.add(_make_doc("b"), _unit(1))
        store.add(_make_doc("c", tags=["chat"]), _unit(2))

        deleted = store.delete_where(has_tag("chat"))

        assert deleted == ["a", "c"]
        assert [d.id for d in store.list()] == ["b"]
        assert not (store.vector_dir / "a.vec").exists()

    def test_delete_where_no_match(self, store):
        store.add(_make_doc("a"), _unit(0))
        assert store.delete_where(has_tag("chat")) == []
        assert store.count() == 1


class TestSearch:
    def test_alpha_beta_scenario(self, store):
        chunks = chunk_text("Alpha.\n\nBeta.", 1000, 0)
        assert chunks == ["Alpha.\n\nBeta."]
        store.add(_make_doc("alpha", chunks[0]), _unit(0))

        results = store.search(_unit(0), limit=1)

        assert len(results) == 1
        assert results[0].document.content == "Alpha.\n\nBeta."
        assert results[0].score == 1.0

    def test_ranked_descending(self, store):
        store.add(_make_doc("far"), [0.0, 1.0, 0, 0, 0, 0, 0, 0])
        store.add(_make_doc("near"), [1.0, 0.1, 0, 0, 0, 0, 0, 0])
        store.add(_make_doc("mid"), [1.0, 1.0, 0, 0, 0, 0, 0, 0])

        results = store.search(_unit(0), limit=3)

        assert [r.document.id for r in results] == ["near", "mid", "far"]
        scores = [r.score for r in results]
        assert scores == sorted(scores, reverse=True)

    def test_limit(self, store):
        for i in range(DIM):
            store.add(_make_doc(f"d{i}"), _unit(i))
        assert len(store.search(_unit(0), limit=3)) == 3

    def test_non_positive_limit_uses_default(self, store):
        for i in range(DIM):
            store.add(_make_doc(f"d{i}"), _unit(i))
        assert len(store.search(_unit(0), limit=0)) == DEFAULT_SEARCH_LIMIT
        assert len(store.search(_unit(0), limit=-3)) == DEFAULT_SEARCH_LIMIT

    def test_ties_keep_insertion_order(self, store):
        for doc_id in ["c", "a", "b"]:
            store.add(_make_doc(doc_id), _unit(0))
        for _ in range(3):
            assert [r.document.id for r in store.search(_unit(0))] == ["c", "a", "b"]

    def test_predicate_filters(self, store):
        store.add(_make_doc("chat", tags=["chat"]), _unit(0))
        store.add(_make_doc("doc"), _unit(0))

        filtered = store.search(_unit(0), predicate=has_tag("chat"))
        unfiltered = store.search(_unit(0))

        assert [r.document.id for r in filtered] == ["chat"]
        assert len(unfiltered) == 2

    def test_zero_query_vector_scores_zero(self, store):
        store.add(_make_doc("a"), _unit(0))
        results = store.search([0.0] * DIM)
        assert results[0].score == 0.0

    def test_wrong_query_length(self, store):
        with pytest.raises(InvalidInputError):
            store.search([1.0] * (DIM - 1))

    def test_empty_store(self, store):
        assert store.search(_unit(0)) == []

    def test_skips_corrupt_vector(self, store):
        store.add(_make_doc("good"), _unit(0))
        store.add(_make_doc("bad"), _unit(0))
        (store.vector_dir / "bad.vec").write_bytes(b"\x01\x02\x03")

        results = store.search(_unit(0))

        assert [r.document.id for r in results] == ["good"]

    def test_skips_missing_vector(self, store):
        store.add(_make_doc("good"), _unit(0))
        store.add(_make_doc("gone"), _unit(0))
        (store.vector_dir / "gone.vec").unlink()

        assert [r.document.id for r in store.search(_unit(0))] == ["good"]


class TestConcurrency:
    def test_parallel_adds_and_searches(self, store):
        errors = []

        def writer(worker: int):
            try:
                for i in range(10):
                    store.add(_make_doc(f"w{worker}-{i}"), _unit((worker + i) % DIM))
            except Exception as e:  # pragma: no cover - surfaced below
                errors.append(e)

        def reader():
            try:
                for _ in range(10):
                    for result in store.search(_unit(0), limit=5):
                        assert len(store.get_vector(result.document.id)) == DIM
            except Exception as e:  # pragma: no cover - surfaced below
                errors.append(e)

        threads = [threading.Thread(target=writer, args=(w,)) for w in range(4)]
        threads += [threading.Thread(target=reader) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)

        assert errors == []
        assert store.count() == 40

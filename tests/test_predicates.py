"""Tests for vector_store.predicates."""

from vector_store.models import Document, DocumentMetadata
from vector_store.predicates import (
    all_of,
    any_of,
    belongs_to_character,
    chat_id_is,
    from_source,
    has_tag,
    is_chat,
)


def _make_doc(source="notes", tags=(), **custom) -> Document:
    return Document(
        id="d1",
        content="text",
        metadata=DocumentMetadata(source=source, tags=set(tags), custom=custom),
    )


class TestPredicates:
    def test_has_tag(self):
        doc = _make_doc(tags=["databank", "notes"])
        assert has_tag("databank")(doc)
        assert not has_tag("chat")(doc)

    def test_from_source(self):
        assert from_source("notes")(_make_doc())
        assert not from_source("chat")(_make_doc())

    def test_is_chat(self):
        assert is_chat()(_make_doc(tags=["chat", "conversation"]))
        assert not is_chat()(_make_doc(tags=["databank"]))

    def test_belongs_to_character(self):
        doc = _make_doc(character="Aria")
        assert belongs_to_character("Aria")(doc)
        assert not belongs_to_character("Bob")(doc)
        assert not belongs_to_character("Aria")(_make_doc())

    def test_chat_id_is(self):
        assert chat_id_is("c1")(_make_doc(chat_id="c1"))
        assert not chat_id_is("c2")(_make_doc(chat_id="c1"))


class TestCombinators:
    def test_all_of(self):
        doc = _make_doc(tags=["chat"], character="Aria")
        assert all_of(is_chat(), belongs_to_character("Aria"))(doc)
        assert not all_of(is_chat(), belongs_to_character("Bob"))(doc)

    def test_any_of(self):
        doc = _make_doc(tags=["databank"])
        assert any_of(is_chat(), has_tag("databank"))(doc)
        assert not any_of(is_chat(), from_source("chat"))(doc)

    def test_empty_combinators(self):
        doc = _make_doc()
        assert all_of()(doc)
        assert not any_of()(doc)

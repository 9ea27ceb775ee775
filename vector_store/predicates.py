"""
Typed search predicates.

A predicate is any callable taking a Document and returning a bool. The
store only ever calls it; the vocabulary of tags and custom keys used by
higher layers (chat documents, characters) lives here, not in the store.

Usage:
    from vector_store.predicates import all_of, belongs_to_character, is_chat

    hits = store.search(vector, 5, all_of(is_chat(), belongs_to_character("Aria")))
"""

from typing import Callable

from .models import Document

Predicate = Callable[[Document], bool]

CHAT_TAG = "chat"
CHARACTER_KEY = "character"
CHAT_ID_KEY = "chat_id"


def has_tag(tag: str) -> Predicate:
    return lambda doc: tag in doc.metadata.tags


def from_source(source: str) -> Predicate:
    return lambda doc: doc.metadata.source == source


def is_chat() -> Predicate:
    """Match fragments produced from chat transcripts."""
    return has_tag(CHAT_TAG)


def belongs_to_character(character: str) -> Predicate:
    return lambda doc: doc.metadata.custom.get(CHARACTER_KEY) == character


def chat_id_is(chat_id: str) -> Predicate:
    return lambda doc: doc.metadata.custom.get(CHAT_ID_KEY) == chat_id


def all_of(*predicates: Predicate) -> Predicate:
    return lambda doc: all(p(doc) for p in predicates)


def any_of(*predicates: Predicate) -> Predicate:
    return lambda doc: any(p(doc) for p in predicates)

"""
Sentence Splitter for the Chunking Pipeline

Punctuation-based sentence boundary detection used when a single paragraph
is too long to fit into one chunk. Handles Latin and CJK sentence endings
without requiring external NLP libraries.

Design:
- Split directly after sentence-ending punctuation: . ! ? 。 ！ ？ ；
- A run of delimiters ("Wait..." / "Really?!") stays with its sentence
- The delimiter is kept at the end of the sentence it terminates
- No external dependencies (no spaCy, no NLTK)

Usage:
    from chunking.sentence_splitter import split_sentences

    sentences = split_sentences("First sentence. Second one!")
    # ["First sentence.", "Second one!"]
"""

import re

SENTENCE_DELIMITERS = ".!?。！？；"

# Zero-width split point: after a delimiter, unless another delimiter follows.
_BOUNDARY_PATTERN = re.compile(
    rf"(?<=[{re.escape(SENTENCE_DELIMITERS)}])(?![{re.escape(SENTENCE_DELIMITERS)}])"
)


def split_sentences(text: str) -> list[str]:
    """
    Split text into sentences at punctuation boundaries.

    Args:
        text: Input text to split into sentences.

    Returns:
        List of sentence strings in their original order. Empty/whitespace
        input returns an empty list. Each sentence is stripped of
        leading/trailing whitespace; a trailing fragment without a
        delimiter is returned as the last sentence.
    """
    if not text or not text.strip():
        return []

    sentences = []
    for part in _BOUNDARY_PATTERN.split(text):
        part = part.strip()
        if part:
            sentences.append(part)
    return sentences

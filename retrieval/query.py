"""
Query Pipeline - natural-language query to ranked fragments

Embeds the query text, delegates ranking to the vector store and maps the
results to the caller-facing QueryHit shape. An empty result is a valid
outcome, not an error.
"""

import logging
from typing import Optional

from core.exceptions import InvalidInputError, ProviderFaultError
from vector_store.embedder import Embedder
from vector_store.predicates import Predicate
from vector_store.store import DEFAULT_SEARCH_LIMIT, VectorStore

from .models import QueryHit

logger = logging.getLogger(__name__)


class QueryPipeline:
    """Answers queries against a vector store."""

    def __init__(self, store: VectorStore, embedder: Embedder):
        self.store = store
        self.embedder = embedder

    def query(
        self,
        text: str,
        limit: int = DEFAULT_SEARCH_LIMIT,
        predicate: Optional[Predicate] = None,
        min_score: Optional[float] = None,
    ) -> list[QueryHit]:
        """
        Find the fragments most similar to a query text.

        Args:
            text: Query text.
            limit: Maximum number of hits (<= 0 uses the store default).
            predicate: Optional document filter.
            min_score: Drop hits scoring below this similarity.

        Raises:
            InvalidInputError: If the query is empty.
            ProviderFaultError: If the query cannot be embedded.
        """
        if not text or not text.strip():
            raise InvalidInputError("Query must not be empty")

        try:
            vector = list(self.embedder.embed(text))
        except ProviderFaultError:
            raise
        except Exception as e:
            raise ProviderFaultError("Embedding provider failed for query", e) from e
        if len(vector) != self.store.dimension:
            raise ProviderFaultError(
                f"Embedding provider returned {len(vector)} components, "
                f"expected {self.store.dimension}"
            )

        results = self.store.search(vector, limit, predicate)
        hits = [
            QueryHit(
                id=result.document.id,
                content=result.document.content,
                title=result.document.metadata.title,
                source=result.document.metadata.source,
                score=result.score,
            )
            for result in results
            if min_score is None or result.score >= min_score
        ]
        logger.debug(f"Query returned {len(hits)} of {len(results)} hits")
        return hits


def build_context(hits: list[QueryHit], separator: str = "---") -> str:
    """Join hit contents into one prompt context, best hit first."""
    if not hits:
        return ""
    parts: list[str] = []
    for i, hit in enumerate(hits, start=1):
        if parts:
            parts.append(separator)
        parts.append(f"[{i}] {hit.title}\n{hit.content}" if hit.title else f"[{i}] {hit.content}")
    return "\n\n".join(parts)

"""Semantic retriever: query embedding, vector search, and context assembly.

This module is the **primary public interface** for retrieval.  It owns
the isolation boundary of the RAG path: every failure while embedding
the query or searching the store is logged here and converted to an
empty context, so an unavailable index never blocks ordinary chat.

Usage::

    from rag_chat.retrieval.retriever import SemanticRetriever

    retriever = SemanticRetriever(embedder, store)
    context   = retriever.retrieve("What does the contract say about renewal?")
    print(context.context_text, context.sources)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rag_chat.errors import ConfigError, RetrievalUnavailable
from rag_chat.retrieval.base import VectorStoreBase
from rag_chat.retrieval.models import RetrievalResult, RetrievedContext

if TYPE_CHECKING:
    from rag_chat.ingestion.embedder import EmbeddingClient

logger = logging.getLogger(__name__)

CONTEXT_DELIMITER = "\n\n---\n\n"


def format_result(result: RetrievalResult) -> str:
    """Tag a passage with its provenance for inclusion in a prompt."""
    return f"[Source: {result.filename}, page {result.page_index}]\n{result.content}"


def build_context(results: list[RetrievalResult], delimiter: str = CONTEXT_DELIMITER) -> RetrievedContext:
    """Concatenate *results* in order; ``sources`` mirrors that order."""
    return RetrievedContext(
        context_text=delimiter.join(format_result(r) for r in results),
        sources=[r.source for r in results],
    )


class SemanticRetriever:
    """High-level retriever over an embedder and any :class:`VectorStoreBase`.

    Parameters
    ----------
    embedder:
        Client used to embed the query (must match the ingest-time model).
    store:
        A concrete vector-store backend.
    default_k:
        Default number of passages returned.
    """

    def __init__(
        self,
        embedder: EmbeddingClient,
        store: VectorStoreBase,
        *,
        default_k: int = 3,
    ) -> None:
        self._embedder = embedder
        self._store = store
        self.default_k = default_k

    # -- public API -----------------------------------------------------------

    def search(self, query: str, *, k: int | None = None) -> list[RetrievalResult]:
        """Embed *query* and return the top-*k* passages.

        Raises
        ------
        RetrievalUnavailable
            When the query cannot be embedded or the store cannot be searched.
        """
        k = self.default_k if k is None else k
        try:
            embedding = self._embedder.embed_query(query)
        except Exception as exc:
            raise RetrievalUnavailable(f"Query embedding failed: {exc}") from exc

        try:
            return self._store.search(embedding, k=k)
        except Exception as exc:
            raise RetrievalUnavailable(f"Vector search failed: {exc}") from exc

    def retrieve(self, query: str, *, k: int | None = None) -> RetrievedContext:
        """Return prompt context for *query*, or an empty context.

        Never raises: failures are logged and reported through
        :attr:`RetrievedContext.unavailable_reason`.
        """
        if not query.strip():
            return RetrievedContext()

        try:
            results = self.search(query, k=k)
        except RetrievalUnavailable as exc:
            if isinstance(exc.__cause__, ConfigError):
                logger.error("Retrieval misconfigured, answering without context: %s", exc)
            else:
                logger.warning("Retrieval unavailable, answering without context: %s", exc)
            return RetrievedContext(unavailable_reason=str(exc))

        if not results:
            logger.info("No matching chunks for query; answering without context")
            return RetrievedContext()

        logger.info("Retrieved %d chunks from %s", len(results), sorted({r.filename for r in results}))
        return build_context(results)

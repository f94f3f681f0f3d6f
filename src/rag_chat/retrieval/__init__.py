"""
Retrieval: vector storage, similarity search, and context assembly.

This module wraps the vector store behind a clean interface so that
the chat layer never needs to know which DB is backing retrieval.

Public surface
--------------
- :class:`SemanticRetriever`: query → context with sources, never raises.
- :class:`VectorStoreBase`: abstract backend (subclass for Pinecone, etc.).
- :class:`ChromaVectorStore`: default Chroma backend.
- :class:`DocumentChunk`, :class:`RetrievalResult`, :class:`RetrievedContext`,
  :class:`Source`: data models.
"""

from rag_chat.retrieval.base import VectorStoreBase
from rag_chat.retrieval.models import DocumentChunk, RetrievalResult, RetrievedContext, Source
from rag_chat.retrieval.retriever import SemanticRetriever

__all__ = [
    "ChromaVectorStore",
    "DocumentChunk",
    "RetrievalResult",
    "RetrievedContext",
    "SemanticRetriever",
    "Source",
    "VectorStoreBase",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import ChromaVectorStore to avoid pulling in chromadb at import time."""
    if name == "ChromaVectorStore":
        from rag_chat.retrieval.chroma_store import ChromaVectorStore

        return ChromaVectorStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

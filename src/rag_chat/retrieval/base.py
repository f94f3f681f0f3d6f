"""Abstract base class for vector-store backends.

Adding a new backend (Pinecone, Qdrant, MongoDB Atlas …) only requires
subclassing :class:`VectorStoreBase` and implementing the abstract
methods.  The rest of the retrieval stack is backend-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from rag_chat.retrieval.models import DocumentChunk, RetrievalResult


class VectorStoreBase(ABC):
    """Backend-agnostic vector-store interface.

    Implementations must tolerate concurrent callers: distinct requests
    share one store instance.

    Parameters
    ----------
    collection_name:
        Logical name of the collection / index / namespace.
    """

    def __init__(self, collection_name: str) -> None:
        self.collection_name = collection_name

    # -- required overrides ---------------------------------------------------

    @abstractmethod
    def put(self, chunks: Sequence[DocumentChunk]) -> int:
        """Append embedded *chunks* and return how many were inserted.

        Inserts are never deduplicated; re-uploading a file adds a second
        copy of its chunks.
        """
        ...

    @abstractmethod
    def search(self, query_embedding: list[float], *, k: int = 3) -> list[RetrievalResult]:
        """Return at most *k* results ordered by descending score.

        The result is deterministic for an identical embedding and index
        state.
        """
        ...

    @abstractmethod
    def list_documents(self) -> set[str]:
        """Return the distinct filenames currently stored."""
        ...

    @abstractmethod
    def delete_by_filename(self, filename: str) -> int:
        """Remove every chunk of *filename*; return the removed count.

        Idempotent: unknown filenames return ``0``.
        """
        ...

    # -- optional overrides ---------------------------------------------------

    def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable and ready."""
        return True

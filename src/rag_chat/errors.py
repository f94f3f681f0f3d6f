"""Exception taxonomy shared by every layer.

Each class carries the HTTP status the serving layer reports for it.
"""

from __future__ import annotations


class RAGError(Exception):
    """Base class for all errors raised by ``rag_chat``."""

    status_code: int = 500


class ConfigError(RAGError):
    """A required setting is missing or invalid. Never retried."""


class EmbeddingDimensionError(ConfigError):
    """Query-time and ingest-time embeddings have different lengths."""


class FormatError(RAGError):
    """The uploaded bytes are not a readable document of the declared type."""

    status_code = 400


class ProviderError(RAGError):
    """A remote embedding or chat-completion call failed.

    Parameters
    ----------
    message:
        Human-readable description, including the provider's diagnostic.
    provider:
        Name of the remote backend (``"OpenAI"``, ``"HuggingFace"`` …).
    upstream_status:
        HTTP status returned by the provider, when one was received.
    """

    def __init__(self, message: str, *, provider: str = "", upstream_status: int | None = None) -> None:
        super().__init__(message)
        self.provider = provider
        self.upstream_status = upstream_status


class RetrievalUnavailable(RAGError):
    """Query embedding or vector search failed inside the retrieval path."""

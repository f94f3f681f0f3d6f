"""Domain models for chunks, retrieval results, and provenance tracking."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Source(BaseModel):
    """Provenance pair identifying where a chunk or result came from.

    Serialised with the camelCase ``pageIndex`` key that clients expect.
    """

    model_config = ConfigDict(populate_by_name=True)

    filename: str
    page_index: int = Field(ge=1, alias="pageIndex")


class DocumentChunk(BaseModel):
    """A bounded, overlapping slice of one document page.

    Attributes
    ----------
    text:
        The chunk text (50–1000 characters).
    filename:
        Name of the uploaded document; acts as the document identity.
    page_index:
        1-based page the chunk was cut from.
    chunk_index:
        0-based position of the chunk within the whole document.
    embedding:
        Dense vector, ``None`` until the chunk has been embedded.
    created_at:
        UTC timestamp of when the chunk was produced.
    """

    text: str
    filename: str
    page_index: int = Field(ge=1)
    chunk_index: int = Field(ge=0)
    embedding: list[float] | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def with_embedding(self, embedding: list[float]) -> DocumentChunk:
        return self.model_copy(update={"embedding": list(embedding)})

    def to_metadata(self) -> dict[str, Any]:
        """Flat metadata dict suitable for a vector-store record."""
        return {
            "filename": self.filename,
            "page_index": self.page_index,
            "chunk_index": self.chunk_index,
            "created_at": self.created_at.isoformat(),
        }

    @property
    def source(self) -> Source:
        return Source(filename=self.filename, page_index=self.page_index)


class RetrievalResult(BaseModel):
    """A single retrieved passage with its similarity score. Never persisted."""

    chunk_id: str
    content: str
    score: float
    filename: str
    page_index: int
    chunk_index: int | None = None

    @property
    def source(self) -> Source:
        return Source(filename=self.filename, page_index=self.page_index)


class RetrievedContext(BaseModel):
    """Outcome of one retrieval: prompt context plus the sources behind it.

    ``unavailable_reason`` records why retrieval degraded to no context.
    It is for logging and tests only and is never serialised.
    """

    context_text: str = ""
    sources: list[Source] = Field(default_factory=list)
    unavailable_reason: str | None = Field(default=None, exclude=True)

    @property
    def is_empty(self) -> bool:
        return not self.context_text

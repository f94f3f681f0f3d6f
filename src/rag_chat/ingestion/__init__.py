"""
Ingestion: PDF loading, chunking, and embedding into the vector store.

This module turns uploaded bytes into page-aware overlapping chunks and
persists them, embedded, in a vector database.

Public surface
--------------
- :func:`ingest`: bytes → unembedded :class:`DocumentChunk` list.
- :func:`index_document`: ingest, embed, and store in one call.
- :class:`EmbeddingClient`: remote batch embedding.
"""

from __future__ import annotations

import logging

from rag_chat.config import settings
from rag_chat.ingestion.chunker import chunk_pages
from rag_chat.ingestion.embedder import EmbeddingClient, embed_and_store
from rag_chat.ingestion.loader import load_pdf_pages
from rag_chat.retrieval.base import VectorStoreBase
from rag_chat.retrieval.models import DocumentChunk

__all__ = [
    "EmbeddingClient",
    "embed_and_store",
    "index_document",
    "ingest",
]

logger = logging.getLogger(__name__)


def ingest(
    raw: bytes,
    filename: str,
    *,
    chunk_size: int = settings.chunk_size,
    chunk_overlap: int = settings.chunk_overlap,
) -> list[DocumentChunk]:
    """Decode a PDF and split it into unembedded chunks.

    Raises :class:`~rag_chat.errors.FormatError` when *raw* is not a PDF.
    """
    pages = load_pdf_pages(raw, filename)
    return list(chunk_pages(pages, filename, chunk_size=chunk_size, chunk_overlap=chunk_overlap))


def index_document(
    raw: bytes,
    filename: str,
    embedder: EmbeddingClient,
    store: VectorStoreBase,
) -> int:
    """Ingest *raw*, embed every chunk, and append them to *store*.

    Returns the number of chunks stored.
    """
    chunks = ingest(raw, filename)
    logger.info("Split %s into %d chunks", filename, len(chunks))
    return embed_and_store(chunks, embedder, store)

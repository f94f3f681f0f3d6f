"""Page-aware sliding-window chunking."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING

from rag_chat.retrieval.models import DocumentChunk

if TYPE_CHECKING:
    from langchain_core.documents import Document

MIN_PAGE_CHARS = 10
MIN_CHUNK_CHARS = 50


def chunk_pages(
    pages: Iterable[Document],
    filename: str,
    chunk_size: int = 1000,
    chunk_overlap: int = 200,
) -> Iterator[DocumentChunk]:
    """Split *pages* into overlapping, provenance-tagged chunks.

    Parameters
    ----------
    pages:
        One document per page, in page order.
    filename:
        Document identity stamped on every chunk.
    chunk_size:
        Window width in characters.
    chunk_overlap:
        Characters shared by consecutive windows on the same page.

    Yields
    ------
    DocumentChunk
        Unembedded chunks.  ``page_index`` is the page's 1-based position;
        ``chunk_index`` counts across the whole document, not per page.
    """
    if chunk_overlap >= chunk_size:
        raise ValueError(f"chunk_overlap ({chunk_overlap}) must be smaller than chunk_size ({chunk_size})")
    stride = chunk_size - chunk_overlap

    chunk_index = 0
    for page_index, page in enumerate(pages, start=1):
        text = page.page_content.strip()
        if len(text) < MIN_PAGE_CHARS:
            continue

        for start in range(0, len(text), stride):
            window = text[start : start + chunk_size]
            if len(window.strip()) < MIN_CHUNK_CHARS:
                continue
            yield DocumentChunk(
                text=window,
                filename=filename,
                page_index=page_index,
                chunk_index=chunk_index,
            )
            chunk_index += 1

"""Unit tests for the chunker module."""

import pytest
from langchain_core.documents import Document

from rag_chat.ingestion.chunker import chunk_pages


def _pages(*texts: str) -> list[Document]:
    return [Document(page_content=t, metadata={"page": i}) for i, t in enumerate(texts, start=1)]


def test_long_page_and_tiny_page() -> None:
    """1200 chars on page 1 give a full window plus an overlap remainder; 5 chars on page 2 give nothing."""
    page_one = "".join(chr(ord("a") + i % 26) for i in range(1200))
    chunks = list(chunk_pages(_pages(page_one, "tiny!"), "report.pdf"))

    assert [c.page_index for c in chunks] == [1, 1]
    assert len(chunks[0].text) == 1000
    assert chunks[0].text == page_one[:1000]
    # Second window starts at the stride (1000 - 200) and shares 200 chars.
    assert chunks[1].text == page_one[800:]
    assert len(chunks[1].text) >= 50


def test_chunk_index_is_global_and_gapless() -> None:
    """chunk_index keeps counting across pages; page_index never decreases."""
    pages = _pages("x" * 2500, "short", "y" * 900, "z" * 1700)
    chunks = list(chunk_pages(pages, "doc.pdf"))

    assert [c.chunk_index for c in chunks] == list(range(len(chunks)))
    page_indexes = [c.page_index for c in chunks]
    assert page_indexes == sorted(page_indexes)
    assert 2 not in page_indexes
    assert {1, 3, 4} == set(page_indexes)


def test_chunk_lengths_within_bounds() -> None:
    pages = _pages("lorem ipsum dolor sit amet " * 200)
    chunks = list(chunk_pages(pages, "lorem.pdf"))
    assert chunks
    assert all(50 <= len(c.text) <= 1000 for c in chunks)


def test_short_trailing_window_dropped() -> None:
    """A remainder under 50 chars after the last full window is discarded."""
    chunks = list(chunk_pages(_pages("a" * 1030), "a.pdf"))
    # Window at 800 holds 230 chars; nothing starts past 1030.
    assert len(chunks) == 2
    chunks = list(chunk_pages(_pages("a" * 1000 + " " * 40), "a.pdf"))
    assert len(chunks) == 2  # page is trimmed to 1000 chars first


def test_whitespace_is_trimmed_before_windowing() -> None:
    chunks = list(chunk_pages(_pages("   \n" + "b" * 60 + "\n   "), "b.pdf"))
    assert len(chunks) == 1
    assert chunks[0].text == "b" * 60


def test_filename_stamped_on_every_chunk() -> None:
    chunks = list(chunk_pages(_pages("c" * 3000), "contract.pdf"))
    assert all(c.filename == "contract.pdf" for c in chunks)
    assert all(c.embedding is None for c in chunks)


def test_custom_window() -> None:
    chunks = list(chunk_pages(_pages("d" * 300), "d.pdf", chunk_size=100, chunk_overlap=50))
    assert [len(c.text) for c in chunks] == [100, 100, 100, 100, 100, 50]


def test_overlap_must_be_smaller_than_size() -> None:
    with pytest.raises(ValueError, match="chunk_overlap"):
        list(chunk_pages(_pages("e" * 100), "e.pdf", chunk_size=100, chunk_overlap=100))


def test_empty_input() -> None:
    """An empty page list yields no chunks."""
    assert list(chunk_pages([], "none.pdf")) == []

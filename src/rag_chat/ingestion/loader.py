"""PDF loading: decode uploaded bytes into one document per page."""

from __future__ import annotations

import io
import logging

from langchain_core.documents import Document
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from rag_chat.errors import FormatError

logger = logging.getLogger(__name__)

PDF_MEDIA_TYPE = "application/pdf"


def load_pdf_pages(raw: bytes, filename: str = "") -> list[Document]:
    """Extract per-page text from an in-memory PDF.

    Parameters
    ----------
    raw:
        The uploaded file contents.
    filename:
        Recorded as ``metadata["source"]`` on every page.

    Returns
    -------
    list[Document]
        One ``Document`` per page in order, with a 1-based
        ``metadata["page"]``.  Pages without extractable text are kept
        (with empty content) so page numbers stay aligned.

    Raises
    ------
    FormatError
        When *raw* is empty, not a PDF, or encrypted.
    """
    if not raw:
        raise FormatError("Uploaded file is empty")

    try:
        reader = PdfReader(io.BytesIO(raw))
        if reader.is_encrypted:
            raise FormatError("Encrypted PDFs are not supported")
        pages = [
            Document(
                page_content=page.extract_text() or "",
                metadata={"source": filename, "page": number},
            )
            for number, page in enumerate(reader.pages, start=1)
        ]
    except FormatError:
        raise
    except (PyPdfError, ValueError, KeyError, TypeError) as exc:
        raise FormatError(f"Could not parse PDF: {exc}") from exc

    logger.info("Loaded %d pages from %s", len(pages), filename or "<upload>")
    return pages

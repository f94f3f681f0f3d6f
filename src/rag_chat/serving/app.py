"""FastAPI application exposing RAG chat and document management."""

from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, File, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from rag_chat.chat.messages import ConversationMessage
from rag_chat.chat.pipeline import ChatPipeline
from rag_chat.config import configure_logging, settings
from rag_chat.errors import FormatError, RAGError
from rag_chat.ingestion import EmbeddingClient, index_document
from rag_chat.ingestion.loader import PDF_MEDIA_TYPE
from rag_chat.retrieval.base import VectorStoreBase
from rag_chat.retrieval.models import Source
from rag_chat.serving.dependencies import get_embedder, get_pipeline, get_store

logger = logging.getLogger(__name__)

app = FastAPI(
    title="RAG Chat API",
    version="0.1.0",
    description="Chat with uploaded PDFs through a pluggable LLM backend.",
)


# ── Request / Response schemas ────────────────────────────────────────
class ChatRequest(BaseModel):
    """Conversation so far; the last user turn is answered."""

    messages: list[ConversationMessage] = Field(min_length=1)


class ChatResponse(BaseModel):
    """Assistant reply plus the passages it was grounded on."""

    response: ConversationMessage
    sources: list[Source] | None = None


class UploadResponse(BaseModel):
    message: str
    filename: str
    chunks: int


class DocumentsResponse(BaseModel):
    documents: list[str]


class DeleteRequest(BaseModel):
    filename: str | None = None


class DeleteResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    deleted_count: int = Field(alias="deletedCount")


# ── Error handling ────────────────────────────────────────────────────
@app.exception_handler(RAGError)
async def handle_rag_error(request: Request, exc: RAGError) -> JSONResponse:
    logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# ── Routes ────────────────────────────────────────────────────────────
@app.get("/health")
def health(store: VectorStoreBase = Depends(get_store)) -> dict[str, str]:
    """Liveness check; also reports whether the vector store answers.

    Always 200: chat keeps working without the store.
    """
    return {"status": "ok", "vectorStore": "ok" if store.health_check() else "unavailable"}


@app.post("/chat", response_model=ChatResponse, response_model_exclude_none=True)
def chat(request: ChatRequest, pipeline: ChatPipeline = Depends(get_pipeline)) -> ChatResponse:
    """Answer the latest user message, grounded on uploaded documents when possible."""
    reply = pipeline.run(request.messages)
    return ChatResponse(response=reply, sources=reply.sources)


@app.post("/documents/upload", response_model=UploadResponse)
def upload_document(
    file: UploadFile | None = File(default=None),
    embedder: EmbeddingClient = Depends(get_embedder),
    store: VectorStoreBase = Depends(get_store),
):
    """Chunk, embed, and index an uploaded PDF."""
    if file is None or not file.filename:
        return JSONResponse(status_code=400, content={"error": "No file uploaded"})
    if file.content_type != PDF_MEDIA_TYPE:
        return JSONResponse(status_code=400, content={"error": "Only PDF files are supported"})

    raw = file.file.read()
    try:
        count = index_document(raw, file.filename, embedder, store)
    except FormatError as exc:
        logger.warning("Rejected upload %s: %s", file.filename, exc)
        return JSONResponse(status_code=400, content={"error": "Failed to process PDF", "details": str(exc)})
    except Exception as exc:
        logger.exception("Upload of %s failed", file.filename)
        return JSONResponse(status_code=500, content={"error": "Failed to process PDF", "details": str(exc)})

    return UploadResponse(
        message="File processed and indexed successfully",
        filename=file.filename,
        chunks=count,
    )


@app.get("/documents", response_model=DocumentsResponse)
def list_documents(store: VectorStoreBase = Depends(get_store)):
    """List the filenames currently indexed."""
    try:
        documents = store.list_documents()
    except Exception:
        logger.exception("Listing documents failed")
        return JSONResponse(status_code=500, content={"error": "Failed to list documents"})
    return DocumentsResponse(documents=sorted(documents))


@app.post("/documents/delete", response_model=DeleteResponse)
def delete_document(request: DeleteRequest | None = None, store: VectorStoreBase = Depends(get_store)):
    """Delete every chunk of one document."""
    filename = (request.filename or "").strip() if request else ""
    if not filename:
        return JSONResponse(status_code=400, content={"error": "Filename is required"})

    try:
        deleted = store.delete_by_filename(filename)
    except Exception:
        logger.exception("Deleting %s failed", filename)
        return JSONResponse(status_code=500, content={"error": "Failed to delete document"})
    return DeleteResponse(message=f"Document '{filename}' deleted successfully", deleted_count=deleted)


def serve() -> None:
    """Run the API with uvicorn (console script ``rag-chat-serve``)."""
    import uvicorn

    configure_logging()
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    serve()

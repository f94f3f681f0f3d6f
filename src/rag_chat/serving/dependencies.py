"""Lazily-built, process-wide collaborators for the API routes.

Every provider is cached after its first successful call.  A failure
(e.g. a missing chat credential) is not cached, so it is reported on
each request that needs the component and never on routes that don't.
Tests replace these through ``app.dependency_overrides``.
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from rag_chat.chat.llm import ChatModelBase, get_chat_model
from rag_chat.chat.pipeline import ChatPipeline
from rag_chat.config import settings
from rag_chat.ingestion.embedder import EmbeddingClient
from rag_chat.retrieval.base import VectorStoreBase
from rag_chat.retrieval.chroma_store import ChromaVectorStore
from rag_chat.retrieval.retriever import SemanticRetriever


@lru_cache
def get_store() -> VectorStoreBase:
    return ChromaVectorStore.from_settings(settings)


@lru_cache
def get_embedder() -> EmbeddingClient:
    return EmbeddingClient.from_settings(settings)


@lru_cache
def get_chat_backend() -> ChatModelBase:
    return get_chat_model(settings)


def get_retriever(
    embedder: EmbeddingClient = Depends(get_embedder),
    store: VectorStoreBase = Depends(get_store),
) -> SemanticRetriever:
    return SemanticRetriever(embedder, store, default_k=settings.retrieval_top_k)


def get_pipeline(
    chat_model: ChatModelBase = Depends(get_chat_backend),
    retriever: SemanticRetriever = Depends(get_retriever),
) -> ChatPipeline:
    return ChatPipeline(chat_model, retriever, top_k=settings.retrieval_top_k)

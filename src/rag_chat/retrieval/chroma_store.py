"""Chroma implementation of the vector-store abstraction."""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from typing import Any
from uuid import uuid4

import chromadb

from rag_chat.config import Settings, settings
from rag_chat.errors import EmbeddingDimensionError
from rag_chat.retrieval.base import VectorStoreBase
from rag_chat.retrieval.models import DocumentChunk, RetrievalResult

logger = logging.getLogger(__name__)

_COLLECTION_METADATA = {"hnsw:space": "cosine"}


def make_chroma_client(cfg: Settings = settings) -> Any:
    """Return an embedded persistent client or an HTTP client, per *cfg*."""
    if cfg.chroma_persist_dir:
        logger.info("Using embedded Chroma at %s", cfg.chroma_persist_dir)
        return chromadb.PersistentClient(path=cfg.chroma_persist_dir)
    logger.info("Using Chroma server at %s:%s", cfg.chroma_host, cfg.chroma_port)
    return chromadb.HttpClient(host=cfg.chroma_host, port=cfg.chroma_port)


def _vector_length(embeddings: Any) -> int | None:
    # Chroma may hand back numpy arrays, so avoid truthiness checks.
    if embeddings is None or len(embeddings) == 0:
        return None
    return len(embeddings[0])


class ChromaVectorStore(VectorStoreBase):
    """Chroma-backed vector store using cosine distance.

    The client and collection handle are resolved lazily on each
    operation, so an unreachable server or missing collection fails that
    call alone instead of the whole store.

    Parameters
    ----------
    collection_name:
        Name of the Chroma collection.
    client:
        A ready Chroma client.  When *None* one is built from *cfg* on
        first use.
    cfg:
        Settings used to build the client.
    """

    def __init__(
        self,
        collection_name: str = settings.chroma_collection,
        *,
        client: Any = None,
        cfg: Settings = settings,
    ) -> None:
        super().__init__(collection_name)
        self._cfg = cfg
        self._client = client
        self._collection: Any = None
        self._dimension: int | None = None
        self._lock = threading.RLock()

    @classmethod
    def from_settings(cls, cfg: Settings = settings) -> ChromaVectorStore:
        return cls(cfg.chroma_collection, cfg=cfg)

    # -- VectorStoreBase overrides --------------------------------------------

    def put(self, chunks: Sequence[DocumentChunk]) -> int:
        if not chunks:
            return 0

        embeddings: list[list[float]] = []
        for chunk in chunks:
            if chunk.embedding is None:
                raise ValueError(f"Chunk {chunk.filename}#{chunk.chunk_index} has no embedding")
            embeddings.append(chunk.embedding)

        dims = {len(e) for e in embeddings}
        if len(dims) != 1:
            raise EmbeddingDimensionError(f"Mixed embedding dimensions in one batch: {sorted(dims)}")
        self._check_dimension(dims.pop())

        collection = self._get_collection()
        collection.add(
            ids=[uuid4().hex for _ in chunks],
            embeddings=embeddings,
            documents=[c.text for c in chunks],
            metadatas=[c.to_metadata() for c in chunks],
        )
        logger.info("Stored %d chunks in collection '%s'", len(chunks), self.collection_name)
        return len(chunks)

    def search(self, query_embedding: list[float], *, k: int = 3) -> list[RetrievalResult]:
        collection = self._get_collection()
        count = collection.count()
        if count == 0 or k <= 0:
            return []
        self._check_dimension(len(query_embedding))

        results = collection.query(
            query_embeddings=[query_embedding],
            n_results=min(k, count),
            include=["documents", "metadatas", "distances"],
        )

        hits: list[RetrievalResult] = []
        ids = results.get("ids", [[]])[0]
        docs = results.get("documents", [[]])[0]
        metas = results.get("metadatas", [[]])[0]
        distances = results.get("distances", [[]])[0]

        for chunk_id, content, meta, dist in zip(ids, docs, metas, distances):
            meta = meta or {}
            hits.append(
                RetrievalResult(
                    chunk_id=chunk_id,
                    content=content or "",
                    # Cosine space: distance = 1 - cosine similarity.
                    score=1.0 - float(dist),
                    filename=meta.get("filename", "unknown"),
                    page_index=int(meta.get("page_index", 1)),
                    chunk_index=meta.get("chunk_index"),
                )
            )
        hits.sort(key=lambda h: (-h.score, h.filename, h.chunk_index or 0, h.chunk_id))
        return hits[:k]

    def list_documents(self) -> set[str]:
        records = self._get_collection().get(include=["metadatas"])
        return {meta["filename"] for meta in records.get("metadatas") or [] if meta and "filename" in meta}

    def delete_by_filename(self, filename: str) -> int:
        collection = self._get_collection()
        ids = collection.get(where={"filename": filename}, include=["metadatas"]).get("ids") or []
        if ids:
            collection.delete(ids=ids)
        logger.info("Deleted %d chunks for '%s'", len(ids), filename)
        return len(ids)

    def health_check(self) -> bool:
        try:
            self._get_client().heartbeat()
            return True
        except Exception:
            logger.warning("Chroma health-check failed", exc_info=True)
            return False

    # -- internals ------------------------------------------------------------

    def _get_client(self) -> Any:
        with self._lock:
            if self._client is None:
                self._client = make_chroma_client(self._cfg)
            return self._client

    def _get_collection(self) -> Any:
        with self._lock:
            if self._collection is None:
                self._collection = self._get_client().get_or_create_collection(
                    self.collection_name, metadata=_COLLECTION_METADATA
                )
            return self._collection

    def _stored_dimension(self) -> int | None:
        with self._lock:
            if self._dimension is not None:
                return self._dimension
        sample = self._get_collection().get(limit=1, include=["embeddings"])
        dimension = _vector_length(sample.get("embeddings"))
        with self._lock:
            if self._dimension is None:
                self._dimension = dimension
            return self._dimension

    def _check_dimension(self, dimension: int) -> None:
        stored = self._stored_dimension()
        if stored is None:
            with self._lock:
                self._dimension = dimension
            return
        if stored != dimension:
            raise EmbeddingDimensionError(
                f"Embedding dimension {dimension} does not match stored dimension {stored} "
                f"in collection '{self.collection_name}'"
            )

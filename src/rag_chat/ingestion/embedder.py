"""Remote embedding client and vector-store persistence."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from numbers import Real
from typing import Any

import httpx

from rag_chat.config import Settings, settings
from rag_chat.errors import ConfigError, ProviderError
from rag_chat.retrieval.base import VectorStoreBase
from rag_chat.retrieval.models import DocumentChunk

logger = logging.getLogger(__name__)

_PROVIDER = "HuggingFace"


class EmbeddingClient:
    """Turn an ordered batch of texts into an ordered batch of vectors.

    Calls the Hugging Face inference router's feature-extraction task.
    Credentials are checked on the first :meth:`embed` call rather than
    at construction, so a missing token only disables the code paths
    that actually need embeddings.

    Parameters
    ----------
    api_key:
        Hugging Face access token.
    model:
        Embedding model id, e.g. ``"BAAI/bge-small-en-v1.5"``.
    base_url:
        Router prefix; the model id is appended to it.
    batch_size:
        Max texts per request.  ``0`` sends everything in a single call.
    dimension:
        Expected vector length.  ``0`` disables the check.
    timeout:
        Per-request timeout in seconds.
    http_client:
        Optional pre-built client (tests inject an ``httpx.MockTransport``).
    """

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        base_url: str = settings.hf_embedding_url,
        batch_size: int = 0,
        dimension: int = 0,
        timeout: float = settings.request_timeout,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.batch_size = batch_size
        self.dimension = dimension
        self._http = http_client or httpx.Client(timeout=timeout)

    @classmethod
    def from_settings(cls, cfg: Settings = settings, *, http_client: httpx.Client | None = None) -> EmbeddingClient:
        return cls(
            api_key=cfg.hf_api_key,
            model=cfg.hf_embedding_model,
            base_url=cfg.hf_embedding_url,
            batch_size=cfg.embedding_batch_size,
            dimension=cfg.embedding_dimension,
            timeout=cfg.request_timeout,
            http_client=http_client,
        )

    # -- public API -----------------------------------------------------------

    def embed(self, texts: Sequence[str]) -> list[list[float]]:
        """Embed *texts*; the result has the same length and order.

        Raises
        ------
        ConfigError
            When the token or model id is unset.
        ProviderError
            On transport failure, non-success status, or a malformed body.
        """
        texts = list(texts)
        if not texts:
            return []
        self._require_config()

        vectors: list[list[float]] = []
        for batch in self._batches(texts):
            vectors.extend(self._embed_batch(batch))

        if len({len(v) for v in vectors}) > 1:
            raise ProviderError("Embedding provider returned vectors of differing lengths", provider=_PROVIDER)
        return vectors

    def embed_query(self, text: str) -> list[float]:
        """Embed a single query string."""
        [vector] = self.embed([text])
        return vector

    # -- internals ------------------------------------------------------------

    def _require_config(self) -> None:
        if not self.api_key:
            raise ConfigError("HuggingFace API key (HF_API_KEY) is not set")
        if not self.model:
            raise ConfigError("Embedding model (HF_EMBEDDING_MODEL) is not set")

    def _batches(self, texts: list[str]) -> Iterator[list[str]]:
        if self.batch_size <= 0:
            yield texts
            return
        for start in range(0, len(texts), self.batch_size):
            yield texts[start : start + self.batch_size]

    def _embed_batch(self, texts: list[str]) -> list[list[float]]:
        url = f"{self.base_url}/{self.model}"
        try:
            response = self._http.post(
                url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={"inputs": texts},
            )
        except httpx.HTTPError as exc:
            logger.error("Embedding request to %s failed: %s", url, exc)
            raise ProviderError(f"HuggingFace Embeddings API unreachable: {exc}", provider=_PROVIDER) from exc

        if response.is_error:
            raise ProviderError(
                f"HuggingFace Embeddings API error: {response.status_code} {response.text}",
                provider=_PROVIDER,
                upstream_status=response.status_code,
            )
        try:
            data = response.json()
        except ValueError as exc:
            raise ProviderError("HuggingFace Embeddings API returned non-JSON body", provider=_PROVIDER) from exc

        vectors = _parse_vectors(data)
        if len(vectors) != len(texts):
            raise ProviderError(
                f"Expected {len(texts)} embeddings, got {len(vectors)}",
                provider=_PROVIDER,
            )
        if self.dimension:
            wrong = next((v for v in vectors if len(v) != self.dimension), None)
            if wrong is not None:
                raise ProviderError(
                    f"Expected {self.dimension}-dimensional embeddings, got {len(wrong)}",
                    provider=_PROVIDER,
                )
        logger.debug("Embedded %d texts with %s", len(texts), self.model)
        return vectors


def _is_number(value: Any) -> bool:
    # bool is a Real subclass but never a vector component.
    return isinstance(value, Real) and not isinstance(value, bool)


def _parse_vectors(data: Any) -> list[list[float]]:
    if not isinstance(data, list):
        raise ProviderError(f"Malformed embedding response: {str(data)[:200]}", provider=_PROVIDER)
    vectors: list[list[float]] = []
    for row in data:
        if not isinstance(row, list) or not row or not all(_is_number(x) for x in row):
            raise ProviderError("Malformed embedding response: expected a list of numeric vectors", provider=_PROVIDER)
        vectors.append([float(x) for x in row])
    return vectors


def embed_and_store(
    chunks: Sequence[DocumentChunk],
    embedder: EmbeddingClient,
    store: VectorStoreBase,
) -> int:
    """Embed *chunks* and append them to *store*.

    All chunks are embedded before anything is written, so a failed
    embedding call leaves the store untouched.
    """
    if not chunks:
        return 0
    embeddings = embedder.embed([c.text for c in chunks])
    embedded = [chunk.with_embedding(vector) for chunk, vector in zip(chunks, embeddings)]
    return store.put(embedded)

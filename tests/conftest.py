"""Shared pytest configuration, fakes, and fixtures."""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from typing import Any

import httpx
import pytest

from rag_chat.chat.llm import ChatModelBase
from rag_chat.chat.messages import ConversationMessage
from rag_chat.config import Settings
from rag_chat.ingestion.embedder import EmbeddingClient
from rag_chat.retrieval.base import VectorStoreBase
from rag_chat.retrieval.models import DocumentChunk, RetrievalResult


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


# ── Fakes ───────────────────────────────────────────────────────────────


def _refuse(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"unexpected network call to {request.url}")


def offline_client() -> httpx.Client:
    """An httpx client whose transport fails the test on any request."""
    return httpx.Client(transport=httpx.MockTransport(_refuse))


class FakeEmbedder(EmbeddingClient):
    """Deterministic letter-frequency embeddings; no network."""

    DIMENSION = 26

    def __init__(self, *, fail: Exception | None = None) -> None:
        super().__init__(api_key="test", model="fake", http_client=offline_client())
        self.fail = fail
        self.calls: list[list[str]] = []

    def embed(self, texts: Sequence[str]) -> list[list[float]]:
        texts = list(texts)
        self.calls.append(texts)
        if self.fail is not None:
            raise self.fail
        return [self.vector(t) for t in texts]

    @classmethod
    def vector(cls, text: str) -> list[float]:
        counts = [0.0] * cls.DIMENSION
        for ch in text.lower():
            if "a" <= ch <= "z":
                counts[ord(ch) - ord("a")] += 1.0
        if not any(counts):
            counts[0] = 1.0
        return counts


class InMemoryVectorStore(VectorStoreBase):
    """Brute-force cosine store for tests."""

    def __init__(self, *, fail_search: Exception | None = None) -> None:
        super().__init__("memory")
        self.chunks: list[DocumentChunk] = []
        self.fail_search = fail_search
        self.healthy = True

    def put(self, chunks: Sequence[DocumentChunk]) -> int:
        self.chunks.extend(chunks)
        return len(chunks)

    def search(self, query_embedding: list[float], *, k: int = 3) -> list[RetrievalResult]:
        if self.fail_search is not None:
            raise self.fail_search
        scored = [
            RetrievalResult(
                chunk_id=f"{c.filename}:{c.chunk_index}",
                content=c.text,
                score=_cosine(query_embedding, c.embedding or []),
                filename=c.filename,
                page_index=c.page_index,
                chunk_index=c.chunk_index,
            )
            for c in self.chunks
        ]
        scored.sort(key=lambda r: (-r.score, r.chunk_id))
        return scored[:k]

    def list_documents(self) -> set[str]:
        return {c.filename for c in self.chunks}

    def delete_by_filename(self, filename: str) -> int:
        before = len(self.chunks)
        self.chunks = [c for c in self.chunks if c.filename != filename]
        return before - len(self.chunks)

    def health_check(self) -> bool:
        return self.healthy


def _cosine(a: list[float], b: list[float]) -> float:
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    if not norm:
        return 0.0
    return sum(x * y for x, y in zip(a, b)) / norm


class StubChatModel(ChatModelBase):
    """Records every transcript it receives and answers with a fixed reply."""

    label = "Stub"
    api_key_env = "STUB_API_KEY"
    model_env = "STUB_MODEL"

    def __init__(self, reply: str = "stub answer") -> None:
        super().__init__(api_key="test", model="stub", base_url="http://stub", http_client=offline_client())
        self.reply = reply
        self.received: list[list[ConversationMessage]] = []

    @classmethod
    def from_settings(cls, cfg: Settings, *, http_client: httpx.Client | None = None) -> StubChatModel:
        return cls()

    def chat(self, messages: list[ConversationMessage]) -> ConversationMessage:
        self.received.append(list(messages))
        return ConversationMessage(role="assistant", content=self.reply)

    def _endpoint(self) -> str:
        return self.base_url

    def _build_payload(self, messages: list[ConversationMessage]) -> dict[str, Any]:
        return {}

    def _extract_completion(self, data: Any) -> str | None:
        return None


# ── PDF builder ─────────────────────────────────────────────────────────


def build_pdf(page_texts: list[str]) -> bytes:
    """Return a minimal valid PDF with one Helvetica text line per page."""
    n = len(page_texts)
    kids = " ".join(f"{4 + 2 * i} 0 R" for i in range(n))
    objects: list[bytes] = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        f"<< /Type /Pages /Kids [{kids}] /Count {n} >>".encode(),
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    for i, text in enumerate(page_texts):
        objects.append(
            (
                "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
                f"/Resources << /Font << /F1 3 0 R >> >> /Contents {5 + 2 * i} 0 R >>"
            ).encode()
        )
        escaped = text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")
        stream = f"BT /F1 10 Tf 20 700 Td ({escaped}) Tj ET".encode("latin-1")
        objects.append(b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream")

    out = bytearray(b"%PDF-1.4\n")
    offsets: list[int] = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += f"{number} 0 obj\n".encode() + body + b"\nendobj\n"
    xref_at = len(out)
    out += f"xref\n0 {len(objects) + 1}\n".encode()
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += f"{offset:010d} 00000 n \n".encode()
    out += f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\nstartxref\n{xref_at}\n%%EOF\n".encode()
    return bytes(out)


# ── Fixtures ────────────────────────────────────────────────────────────


@pytest.fixture()
def fake_embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture()
def memory_store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture()
def stub_chat_model() -> StubChatModel:
    return StubChatModel()


@pytest.fixture()
def pdf_factory() -> Callable[[list[str]], bytes]:
    return build_pdf


@pytest.fixture()
def test_settings() -> Settings:
    """Settings isolated from the developer's environment and .env file."""
    return Settings(
        _env_file=None,
        llm_provider="openai",
        openai_api_key="sk-test",
        openai_model="gpt-test",
        groq_api_key="gsk-test",
        groq_model="llama-test",
        hf_api_key="hf-test",
        hf_model="hf-chat-model",
        request_timeout=5.0,
    )

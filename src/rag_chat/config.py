"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

import logging
from enum import Enum

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from rag_chat.errors import ConfigError


class ChatProvider(str, Enum):
    OPENAI = "openai"
    GROQ = "groq"
    HUGGINGFACE = "huggingface"

    @classmethod
    def parse(cls, value: str) -> ChatProvider:
        try:
            return cls(value.strip().lower())
        except ValueError:
            valid = ", ".join(p.value for p in cls)
            raise ConfigError(f"Invalid LLM provider {value!r}; expected one of: {valid}") from None


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # Chat provider
    llm_provider: ChatProvider = Field(
        default=ChatProvider.OPENAI,
        description="Chat backend: one of 'openai', 'groq', 'huggingface'",
    )

    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_base_url: str = "https://api.openai.com/v1"

    groq_api_key: str = ""
    groq_model: str = "llama-3.1-8b-instant"
    groq_base_url: str = "https://api.groq.com/openai/v1"

    hf_api_key: str = Field(default="", description="Hugging Face token, shared by chat and embeddings")
    hf_model: str = ""
    hf_inference_url: str = "https://api-inference.huggingface.co/models"
    hf_max_new_tokens: int = 512

    # Embedding
    hf_embedding_model: str = "BAAI/bge-small-en-v1.5"
    hf_embedding_url: str = "https://router.huggingface.co/hf-inference/models"
    embedding_batch_size: int = Field(
        default=0,
        description="Max texts per embedding call; 0 sends the whole batch in one call",
    )
    embedding_dimension: int = Field(
        default=0,
        description="Expected vector length; 0 accepts whatever the provider returns",
    )

    # Vector store
    chroma_host: str = "localhost"
    chroma_port: int = 8000
    chroma_collection: str = "vectors"
    chroma_persist_dir: str = Field(
        default="",
        description="Use an embedded persistent Chroma at this path instead of the HTTP server",
    )

    # Pipeline
    request_timeout: float = Field(default=60.0, description="Per-call timeout (seconds) for remote APIs")
    retrieval_top_k: int = 3
    chunk_size: int = 1000
    chunk_overlap: int = 200

    # Serving
    api_host: str = "0.0.0.0"
    api_port: int = 8080

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @field_validator("llm_provider", mode="before")
    @classmethod
    def _parse_provider(cls, value: object) -> object:
        # ConfigError is not a ValueError, so it surfaces unwrapped.
        return ChatProvider.parse(value) if isinstance(value, str) else value


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for the serving process."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Singleton: import `settings` wherever needed.
settings = Settings()

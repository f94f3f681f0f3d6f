"""Chat-completion gateway: single place to swap providers.

Supports three backends, selected by ``settings.llm_provider``:

1. **openai**: OpenAI ``/v1/chat/completions``.
2. **groq**: Groq's OpenAI-compatible endpoint.
3. **huggingface**: Hugging Face text-generation inference; the
   transcript is flattened into a single prompt.

The provider name is checked when settings are parsed. Credentials are
checked when the client is built, before any network call.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar

import httpx

from rag_chat.chat.messages import ConversationMessage
from rag_chat.config import ChatProvider, Settings, settings
from rag_chat.errors import ConfigError, ProviderError

logger = logging.getLogger(__name__)


class ChatModelBase(ABC):
    """A remote chat-completion backend.

    Subclasses translate the two-role transcript into their wire format
    and extract the completion from the response body.

    Parameters
    ----------
    api_key:
        Provider credential.
    model:
        Model identifier.
    base_url:
        Endpoint prefix.
    timeout:
        Per-request timeout in seconds.
    http_client:
        Optional pre-built client (tests inject an ``httpx.MockTransport``).
    """

    label: ClassVar[str]
    api_key_env: ClassVar[str]
    model_env: ClassVar[str]

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        base_url: str,
        timeout: float = settings.request_timeout,
        http_client: httpx.Client | None = None,
    ) -> None:
        if not api_key:
            raise ConfigError(f"{self.label} API key ({self.api_key_env}) is not set")
        if not model:
            raise ConfigError(f"{self.label} model ({self.model_env}) is not set")
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self._http = http_client or httpx.Client(timeout=timeout)

    @classmethod
    @abstractmethod
    def from_settings(cls, cfg: Settings, *, http_client: httpx.Client | None = None) -> ChatModelBase:
        ...

    # -- wire mapping ---------------------------------------------------------

    @abstractmethod
    def _endpoint(self) -> str:
        ...

    @abstractmethod
    def _build_payload(self, messages: list[ConversationMessage]) -> dict[str, Any]:
        ...

    @abstractmethod
    def _extract_completion(self, data: Any) -> str | None:
        """Return the completion text, or ``None`` when the body has none.

        Raise :class:`ProviderError` when the completion field is absent.
        """
        ...

    # -- public API -----------------------------------------------------------

    @property
    def fallback_reply(self) -> str:
        return f"No response from {self.label}"

    def chat(self, messages: list[ConversationMessage]) -> ConversationMessage:
        """Send *messages* and return the assistant reply.

        Raises
        ------
        ProviderError
            When the provider is unreachable, returns a non-success status,
            or answers with a body that lacks the completion field.
        """
        data = self._post(self._build_payload(messages))
        content = self._extract_completion(data)
        if not content:
            logger.warning("%s returned an empty completion", self.label)
            content = self.fallback_reply
        return ConversationMessage(role="assistant", content=content)

    def _post(self, payload: dict[str, Any]) -> Any:
        url = self._endpoint()
        try:
            response = self._http.post(
                url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json=payload,
            )
        except httpx.HTTPError as exc:
            logger.error("%s request to %s failed: %s", self.label, url, exc)
            raise ProviderError(f"{self.label} API unreachable: {exc}", provider=self.label) from exc

        if response.is_error:
            raise ProviderError(
                f"{self.label} API error: {response.status_code} {response.text}",
                provider=self.label,
                upstream_status=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise ProviderError(f"{self.label} API returned non-JSON body", provider=self.label) from exc


class _OpenAICompatibleChatModel(ChatModelBase):
    """Shared mapping for ``/chat/completions`` style APIs."""

    def _endpoint(self) -> str:
        return f"{self.base_url}/chat/completions"

    def _build_payload(self, messages: list[ConversationMessage]) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
        }

    def _extract_completion(self, data: Any) -> str | None:
        if not isinstance(data, dict) or not isinstance(data.get("choices"), list):
            raise ProviderError(f"{self.label} response has no 'choices' field", provider=self.label)
        choices = data["choices"]
        if not choices:
            return None
        first = choices[0]
        if not isinstance(first, dict) or not isinstance(first.get("message"), dict):
            raise ProviderError(f"{self.label} response choice has no 'message' object", provider=self.label)
        return first["message"].get("content")


class OpenAIChatModel(_OpenAICompatibleChatModel):
    label = "OpenAI"
    api_key_env = "OPENAI_API_KEY"
    model_env = "OPENAI_MODEL"

    @classmethod
    def from_settings(cls, cfg: Settings, *, http_client: httpx.Client | None = None) -> OpenAIChatModel:
        return cls(
            api_key=cfg.openai_api_key,
            model=cfg.openai_model,
            base_url=cfg.openai_base_url,
            timeout=cfg.request_timeout,
            http_client=http_client,
        )


class GroqChatModel(_OpenAICompatibleChatModel):
    label = "Groq"
    api_key_env = "GROQ_API_KEY"
    model_env = "GROQ_MODEL"

    @classmethod
    def from_settings(cls, cfg: Settings, *, http_client: httpx.Client | None = None) -> GroqChatModel:
        return cls(
            api_key=cfg.groq_api_key,
            model=cfg.groq_model,
            base_url=cfg.groq_base_url,
            timeout=cfg.request_timeout,
            http_client=http_client,
        )


class HuggingFaceChatModel(ChatModelBase):
    """Text-generation inference; the transcript becomes one prompt."""

    label = "HuggingFace"
    api_key_env = "HF_API_KEY"
    model_env = "HF_MODEL"

    def __init__(self, *, max_new_tokens: int = 512, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.max_new_tokens = max_new_tokens

    @classmethod
    def from_settings(cls, cfg: Settings, *, http_client: httpx.Client | None = None) -> HuggingFaceChatModel:
        return cls(
            api_key=cfg.hf_api_key,
            model=cfg.hf_model,
            base_url=cfg.hf_inference_url,
            timeout=cfg.request_timeout,
            max_new_tokens=cfg.hf_max_new_tokens,
            http_client=http_client,
        )

    def _endpoint(self) -> str:
        return f"{self.base_url}/{self.model}"

    def _build_payload(self, messages: list[ConversationMessage]) -> dict[str, Any]:
        return {
            "inputs": render_transcript(messages),
            "parameters": {"max_new_tokens": self.max_new_tokens, "return_full_text": False},
        }

    def _extract_completion(self, data: Any) -> str | None:
        if isinstance(data, dict):
            if "error" in data:
                raise ProviderError(f"HuggingFace API error: {data['error']}", provider=self.label)
            data = [data]
        if not isinstance(data, list):
            raise ProviderError("HuggingFace response is not a list", provider=self.label)
        if not data:
            return None
        first = data[0]
        if not isinstance(first, dict) or "generated_text" not in first:
            raise ProviderError("HuggingFace response has no 'generated_text' field", provider=self.label)
        text = first["generated_text"]
        return text.strip() if isinstance(text, str) else None


def render_transcript(messages: list[ConversationMessage]) -> str:
    """Flatten a two-role transcript for plain text-generation models."""
    names = {"user": "User", "assistant": "Assistant"}
    lines = [f"{names[m.role]}: {m.content}" for m in messages]
    lines.append("Assistant:")
    return "\n\n".join(lines)


_REGISTRY: dict[ChatProvider, type[ChatModelBase]] = {
    ChatProvider.OPENAI: OpenAIChatModel,
    ChatProvider.GROQ: GroqChatModel,
    ChatProvider.HUGGINGFACE: HuggingFaceChatModel,
}


def get_chat_model(cfg: Settings = settings, *, http_client: httpx.Client | None = None) -> ChatModelBase:
    """Return the chat backend named by ``cfg.llm_provider``.

    Raises :class:`ConfigError` for an unknown provider or a missing
    credential / model id, before any network call is made.
    """
    provider = ChatProvider.parse(cfg.llm_provider)
    model = _REGISTRY[provider].from_settings(cfg, http_client=http_client)
    logger.info("Using %s chat model %s", model.label, model.model)
    return model

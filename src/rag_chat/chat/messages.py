"""Conversation message model shared by the gateway, augmenter, and API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

from rag_chat.retrieval.models import Source

Role = Literal["user", "assistant"]


class ConversationMessage(BaseModel):
    """One turn of a chat transcript.

    ``sources`` is only set on assistant replies produced through the
    retrieval path.
    """

    role: Role
    content: str
    sources: list[Source] | None = None


def latest_user_index(messages: list[ConversationMessage]) -> int | None:
    """Position of the most recent user message, or ``None``."""
    for index in range(len(messages) - 1, -1, -1):
        if messages[index].role == "user":
            return index
    return None

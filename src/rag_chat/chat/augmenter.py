"""Merge retrieved context into the conversation before dispatch."""

from __future__ import annotations

from rag_chat.chat.messages import ConversationMessage, latest_user_index
from rag_chat.chat.prompts import build_rag_prompt
from rag_chat.retrieval.models import RetrievedContext


def augment_history(
    history: list[ConversationMessage],
    retrieval: RetrievedContext,
) -> list[ConversationMessage]:
    """Return *history* with the latest user turn wrapped in the RAG prompt.

    The result has the same length as *history*, which is never mutated.
    With an empty context the messages pass through unchanged.
    """
    augmented = list(history)
    if retrieval.is_empty:
        return augmented

    index = latest_user_index(augmented)
    if index is None:
        return augmented

    question = augmented[index]
    augmented[index] = question.model_copy(
        update={"content": build_rag_prompt(question.content, retrieval.context_text)}
    )
    return augmented


def annotate_reply(reply: ConversationMessage, retrieval: RetrievedContext) -> ConversationMessage:
    """Attach the retrieval sources to the assistant *reply*."""
    if not retrieval.sources:
        return reply
    return reply.model_copy(update={"sources": list(retrieval.sources)})

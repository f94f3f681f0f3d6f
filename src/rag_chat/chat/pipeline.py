"""One chat turn as an explicit pipeline of typed stages.

    query ──► retrieve ──► augment ──► complete ──► annotate

Each stage is a separate method so tests can exercise them with
substituted collaborators (a fake store, a stub chat model).
"""

from __future__ import annotations

import logging

from rag_chat.chat.augmenter import annotate_reply, augment_history
from rag_chat.chat.llm import ChatModelBase
from rag_chat.chat.messages import ConversationMessage, latest_user_index
from rag_chat.retrieval.models import RetrievedContext
from rag_chat.retrieval.retriever import SemanticRetriever

logger = logging.getLogger(__name__)


class ChatPipeline:
    """Retrieval-augmented chat over any :class:`ChatModelBase`.

    Parameters
    ----------
    chat_model:
        The configured chat backend.
    retriever:
        Optional retriever; without one every turn is plain chat.
    top_k:
        Number of passages retrieved per turn.
    """

    def __init__(
        self,
        chat_model: ChatModelBase,
        retriever: SemanticRetriever | None = None,
        *,
        top_k: int = 3,
    ) -> None:
        self.chat_model = chat_model
        self.retriever = retriever
        self.top_k = top_k

    def run(self, messages: list[ConversationMessage]) -> ConversationMessage:
        """Answer the latest user turn of *messages*."""
        retrieval = self.retrieve(messages)
        augmented = augment_history(messages, retrieval)
        reply = self.chat_model.chat(augmented)
        return annotate_reply(reply, retrieval)

    def retrieve(self, messages: list[ConversationMessage]) -> RetrievedContext:
        index = latest_user_index(messages)
        if self.retriever is None or index is None:
            return RetrievedContext()
        return self.retriever.retrieve(messages[index].content, k=self.top_k)

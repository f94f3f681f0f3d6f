"""
Chat: provider gateway and retrieval-augmented conversation flow.

Public API
----------
- :func:`get_chat_model`: build the configured provider client.
- :class:`ChatPipeline`: retrieve, augment, complete, annotate.
- :class:`ConversationMessage`: the message model used everywhere.
"""

from rag_chat.chat.augmenter import annotate_reply, augment_history
from rag_chat.chat.llm import ChatModelBase, ChatProvider, get_chat_model
from rag_chat.chat.messages import ConversationMessage
from rag_chat.chat.pipeline import ChatPipeline

__all__ = [
    "ChatModelBase",
    "ChatPipeline",
    "ChatProvider",
    "ConversationMessage",
    "annotate_reply",
    "augment_history",
    "get_chat_model",
]

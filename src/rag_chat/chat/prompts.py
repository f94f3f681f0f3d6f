"""Prompt templates for the RAG chat path.

Keeping prompts in one place makes them easy to audit, version, and A/B
test.
"""

from __future__ import annotations

RAG_PROMPT_TEMPLATE = """\
Use the following context from the uploaded documents to answer the question.
If the context does not contain the answer, say so and answer from general knowledge.

Context:
{context}

Question: {question}"""


def build_rag_prompt(question: str, context: str) -> str:
    """Embed *question* verbatim together with the retrieved *context*."""
    return RAG_PROMPT_TEMPLATE.format(context=context, question=question)

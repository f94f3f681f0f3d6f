"""rag_chat: retrieval-augmented chat over uploaded PDF documents."""

__version__ = "0.1.0"

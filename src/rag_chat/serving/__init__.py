"""
Serving: FastAPI application exposing chat and document management.

Routes are thin: they validate input, pull collaborators from
:mod:`rag_chat.serving.dependencies`, and map the error taxonomy to
HTTP statuses.
"""

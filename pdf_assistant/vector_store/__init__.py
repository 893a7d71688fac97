"""
Vector store abstractions and factories.
"""

from pdf_assistant.config import settings
from pdf_assistant.vector_store.base import QueryResult, VectorRecord, VectorStore
from pdf_assistant.vector_store.chroma_store import ChromaVectorStore
from pdf_assistant.vector_store.upstash_store import UpstashVectorStore

DEFAULT_VECTOR_STORE_BACKEND = settings.vector_store_backend


def get_vector_store(backend: str | None = None) -> VectorStore:
    """
    Factory to obtain configured VectorStore instance.
    Supports the hosted Upstash backend and a local Chroma backend.
    """
    backend = (backend or DEFAULT_VECTOR_STORE_BACKEND).lower()
    if backend == "upstash":
        if not settings.vector_store_url or not settings.vector_store_token:
            raise ValueError("UPSTASH_VECTOR_REST_URL and UPSTASH_VECTOR_REST_TOKEN must be set")
        return UpstashVectorStore(settings.vector_store_url, settings.vector_store_token.get_secret_value())
    if backend == "chroma":
        return ChromaVectorStore()
    raise ValueError(f"Unsupported vector store backend: {backend}")


__all__ = [
    "DEFAULT_VECTOR_STORE_BACKEND",
    "get_vector_store",
    "ChromaVectorStore",
    "UpstashVectorStore",
    "QueryResult",
    "VectorRecord",
    "VectorStore",
]

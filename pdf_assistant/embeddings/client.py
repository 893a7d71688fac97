"""
OpenAI embeddings client.
"""

from __future__ import annotations

from typing import List

from openai import OpenAI, OpenAIError

from pdf_assistant.config import openai_api_key, settings
from pdf_assistant.errors import EmbeddingError

DEFAULT_EMBEDDING_MODEL = settings.embedding_model_name
DEFAULT_EMBEDDING_DIMENSIONS = settings.embedding_dimensions


class EmbeddingsClient:
    def __init__(
        self,
        model: str = DEFAULT_EMBEDDING_MODEL,
        dimensions: int = DEFAULT_EMBEDDING_DIMENSIONS,
        client: OpenAI | None = None,
    ) -> None:
        self.model = model
        self.dimensions = dimensions
        self.client = client or OpenAI(api_key=openai_api_key())

    def embed_text(self, text: str) -> List[float]:
        try:
            response = self.client.embeddings.create(
                model=self.model,
                input=[text],
                dimensions=self.dimensions,
            )
        except OpenAIError as exc:
            raise EmbeddingError(f"Embedding request failed: {exc}") from exc

        if not response.data or not response.data[0].embedding:
            raise EmbeddingError("No embedding values returned")
        return response.data[0].embedding

    def close(self) -> None:
        self.client.close()


__all__ = ["EmbeddingsClient", "DEFAULT_EMBEDDING_MODEL", "DEFAULT_EMBEDDING_DIMENSIONS"]

"""
RAG pipeline: normalize question, retrieve session context, stream a grounded LLM answer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Sequence, Union

from pdf_assistant.config import settings
from pdf_assistant.embeddings.client import EmbeddingsClient
from pdf_assistant.errors import LLMError
from pdf_assistant.llm.client import LLMClient
from pdf_assistant.models.schemas import CitationsEvent, ErrorEvent, TextEvent
from pdf_assistant.vector_store.base import QueryResult, VectorStore

logger = logging.getLogger(__name__)

DEFAULT_REFUSAL = "I cannot answer this based on the provided document."
ELLIPSIS = "…"

StreamEvent = Union[CitationsEvent, TextEvent, ErrorEvent]


def make_snippet(text: str, max_chars: int = settings.citation_snippet_chars) -> str:
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + ELLIPSIS


@dataclass
class RetrievalResult:
    context_chunks: List[str] = field(default_factory=list)
    citations: List[str] = field(default_factory=list)
    matches: List[QueryResult] = field(default_factory=list)


class RAGService:
    """Answers questions about one session's uploaded document."""

    def __init__(
        self,
        vector_store: VectorStore,
        embeddings_client: EmbeddingsClient,
        llm_client: LLMClient,
        top_k: int = settings.retrieval_top_k,
        snippet_chars: int = settings.citation_snippet_chars,
        logger_: logging.Logger | None = None,
    ) -> None:
        self.vector_store = vector_store
        self.embeddings_client = embeddings_client
        self.llm_client = llm_client
        self.top_k = top_k
        self.snippet_chars = snippet_chars
        self.logger = logger_ or logging.getLogger(__name__)

    # --- Public API ---
    def answer_stream(self, session_id: str, question: str) -> Iterator[StreamEvent]:
        """Retrieve eagerly, then return the lazily streamed answer events."""
        normalized = self.normalize_question(question)
        retrieval = self.retrieve(session_id, normalized)
        return self.stream_answer(normalized, retrieval)

    # --- Steps ---
    @staticmethod
    def normalize_question(text: str) -> str:
        return " ".join(text.strip().split())

    def retrieve(self, session_id: str, question: str) -> RetrievalResult:
        embedding = self.embeddings_client.embed_text(question)
        matches = self.vector_store.query(embedding, top_k=self.top_k, session_id=session_id, include_metadata=True)

        retrieval = RetrievalResult(matches=matches)
        for match in matches:
            text = match.metadata.get("chunk_text")
            if not isinstance(text, str):
                continue
            retrieval.context_chunks.append(text)
            retrieval.citations.append(make_snippet(text, self.snippet_chars))

        self.logger.info(
            "Retrieved chunks",
            extra={
                "session_id": session_id,
                "requested": self.top_k,
                "returned": len(matches),
                "usable": len(retrieval.context_chunks),
                "top_score": round(matches[0].score, 3) if matches else None,
            },
        )
        return retrieval

    @staticmethod
    def build_messages(question: str, context_chunks: Sequence[str]) -> List[dict]:
        system_message = {
            "role": "system",
            "content": (
                "You are a helpful AI assistant. Answer the user's question based ONLY on the "
                "provided context retrieved from a document. Do not use outside knowledge. "
                f'If the answer is not in the context, reply exactly: "{DEFAULT_REFUSAL}"'
            ),
        }
        user_message = {
            "role": "user",
            "content": "\n\n".join(
                [
                    "Context:",
                    "\n\n".join(context_chunks),
                    "Question:",
                    question,
                ]
            ),
        }
        return [system_message, user_message]

    def stream_answer(self, question: str, retrieval: RetrievalResult) -> Iterator[StreamEvent]:
        yield CitationsEvent(citations=list(retrieval.citations))

        if not retrieval.context_chunks:
            self.logger.info("No context retrieved, refusing before LLM")
            yield TextEvent(text=DEFAULT_REFUSAL)
            return

        messages = self.build_messages(question, retrieval.context_chunks)
        fragments = self.llm_client.stream_chat(messages)
        try:
            for fragment in fragments:
                yield TextEvent(text=fragment)
        except LLMError as exc:
            self.logger.warning("Answer stream failed: %s", exc.message)
            yield ErrorEvent(error=exc.message)
        finally:
            fragments.close()

    def close(self) -> None:
        self.llm_client.close()
        self.embeddings_client.close()
        self.vector_store.close()


__all__ = ["RAGService", "RetrievalResult", "DEFAULT_REFUSAL", "make_snippet"]

"""
Smoke test of the streaming RAG answer.

Example:
    python -m scripts.chat_smoke --session-id demo -q "What is the refund policy?"
"""

from __future__ import annotations

import argparse
import logging
import sys

from pdf_assistant.config import settings, setup_logging
from pdf_assistant.embeddings.client import EmbeddingsClient
from pdf_assistant.errors import AssistantError
from pdf_assistant.llm.client import LLMClient
from pdf_assistant.models.schemas import CitationsEvent, ErrorEvent, TextEvent
from pdf_assistant.rag.pipeline import RAGService
from pdf_assistant.vector_store import get_vector_store


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ask a question about an indexed session.")
    parser.add_argument("--session-id", "-s", required=True, help="Session the document was indexed under")
    parser.add_argument("--question", "-q", required=True, help="Question to ask")
    return parser.parse_args()


def main() -> None:
    setup_logging()
    logger = logging.getLogger(__name__)
    args = parse_args()

    service = RAGService(
        vector_store=get_vector_store(),
        embeddings_client=EmbeddingsClient(),
        llm_client=LLMClient(temperature=settings.answer_temperature),
        logger_=logger,
    )

    try:
        for event in service.answer_stream(args.session_id, args.question):
            if isinstance(event, CitationsEvent):
                print("=== Citations ===")
                for idx, citation in enumerate(event.citations, start=1):
                    print(f"#{idx} {citation}")
                print("\n=== Answer ===")
            elif isinstance(event, TextEvent):
                print(event.text, end="", flush=True)
            elif isinstance(event, ErrorEvent):
                print(f"\n[error] {event.error}")
        print()
    except AssistantError as exc:
        logger.error("Chat smoke failed: %s", exc.message)
        sys.exit(1)
    finally:
        service.close()


if __name__ == "__main__":
    main()

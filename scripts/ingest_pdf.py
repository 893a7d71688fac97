"""
CLI to index a local PDF into a session.

Example:
    python -m scripts.ingest_pdf --session-id demo ./docs/handbook.pdf
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pdf_assistant.config import settings, setup_logging
from pdf_assistant.embeddings.client import EmbeddingsClient
from pdf_assistant.errors import AssistantError
from pdf_assistant.indexing.pipeline import IngestionService
from pdf_assistant.indexing.sanitizer import PIISanitizer
from pdf_assistant.llm.client import LLMClient
from pdf_assistant.vector_store import get_vector_store


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Index a local PDF for a session.")
    parser.add_argument("path", type=Path, help="PDF file to index")
    parser.add_argument("--session-id", "-s", required=True, help="Session to tag the chunks with")
    parser.add_argument(
        "--workers",
        type=int,
        default=settings.ingest_workers,
        help="Number of concurrent sanitize/embed workers.",
    )
    return parser.parse_args()


def main() -> None:
    setup_logging()
    logger = logging.getLogger(__name__)
    args = parse_args()

    service = IngestionService(
        get_vector_store(),
        PIISanitizer(LLMClient(model=settings.sanitizer_model_name, temperature=0.0)),
        EmbeddingsClient(),
        workers=args.workers,
        logger_=logger,
    )

    try:
        summary = service.ingest_pdf(args.path.read_bytes(), args.session_id, show_progress=True)
    except AssistantError as exc:
        logger.error("Ingestion failed: %s", exc.message)
        sys.exit(1)
    finally:
        service.close()

    print(
        f"Indexed chunks: {summary.indexed_chunks} "
        f"(failed {summary.failed_chunks}, elapsed {summary.elapsed_sec:.2f}s)"
    )


if __name__ == "__main__":
    main()

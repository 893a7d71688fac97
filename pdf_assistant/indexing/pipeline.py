"""
Ingestion pipeline: extract, chunk, sanitize and embed concurrently, upsert into vector store.
"""

from __future__ import annotations

import logging
import time
import uuid
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import List, Sequence

from tqdm import tqdm

from pdf_assistant.config import settings
from pdf_assistant.embeddings.client import EmbeddingsClient
from pdf_assistant.errors import EmbeddingError, ExtractionError, IngestionError, SanitizationError
from pdf_assistant.indexing.chunker import chunk_words
from pdf_assistant.indexing.parser import extract_text
from pdf_assistant.indexing.sanitizer import PIISanitizer
from pdf_assistant.vector_store.base import VectorRecord, VectorStore

logger = logging.getLogger(__name__)


@dataclass
class Chunk:
    index: int
    raw_text: str
    sanitized_text: str = ""
    vector: List[float] = field(default_factory=list)


@dataclass
class WorkerResult:
    chunk_index: int
    vector: List[float] = field(default_factory=list)
    sanitized_text: str = ""
    error: Exception | None = None


@dataclass
class IngestSummary:
    indexed_chunks: int
    failed_chunks: int
    elapsed_sec: float


class IngestionService:
    """Turns one uploaded PDF into session-tagged records in the vector store."""

    def __init__(
        self,
        vector_store: VectorStore,
        sanitizer: PIISanitizer,
        embeddings_client: EmbeddingsClient,
        workers: int = settings.ingest_workers,
        chunk_size: int = settings.chunk_size_words,
        overlap: int = settings.chunk_overlap_words,
        logger_: logging.Logger | None = None,
    ) -> None:
        self.vector_store = vector_store
        self.sanitizer = sanitizer
        self.embeddings_client = embeddings_client
        self.workers = workers
        self.chunk_size = chunk_size
        self.overlap = overlap
        self.logger = logger_ or logging.getLogger(__name__)

    def ingest_pdf(self, data: bytes, session_id: str, show_progress: bool = False) -> IngestSummary:
        started = time.time()
        text = extract_text(data)
        chunks = chunk_words(text, chunk_size=self.chunk_size, overlap=self.overlap)
        if not chunks:
            raise ExtractionError("No text found in PDF")

        self.logger.info("Chunked document", extra={"session_id": session_id, "chunks": len(chunks)})
        return self.ingest_chunks(chunks, session_id, show_progress=show_progress, started=started)

    def ingest_chunks(
        self,
        chunks: Sequence[str],
        session_id: str,
        show_progress: bool = False,
        started: float | None = None,
    ) -> IngestSummary:
        started = started or time.time()
        results = self.process_chunks(chunks, show_progress=show_progress)

        failed = [r for r in results if r.error is not None]
        for result in failed:
            self.logger.warning(
                "Error processing chunk %d: %s",
                result.chunk_index,
                result.error,
                extra={"session_id": session_id},
            )

        records = self.build_records([r for r in results if r.error is None], session_id)
        if not records:
            raise IngestionError(f"None of the {len(chunks)} chunks could be sanitized and embedded")

        self.vector_store.upsert(records)

        elapsed = time.time() - started
        self.logger.info(
            "Ingestion completed",
            extra={
                "session_id": session_id,
                "indexed_chunks": len(records),
                "failed_chunks": len(failed),
                "elapsed_sec": round(elapsed, 2),
            },
        )
        return IngestSummary(indexed_chunks=len(records), failed_chunks=len(failed), elapsed_sec=elapsed)

    def process_chunks(self, chunks: Sequence[str], show_progress: bool = False) -> List[WorkerResult]:
        """Sanitize and embed every chunk on a fixed worker pool; wait for all of them."""
        results: List[WorkerResult] = []
        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="ingest") as pool:
            futures = [pool.submit(self._process_chunk, Chunk(index=i, raw_text=text)) for i, text in enumerate(chunks)]
            for future in tqdm(
                as_completed(futures),
                total=len(futures),
                desc="Indexing",
                unit="chunks",
                disable=not show_progress,
            ):
                results.append(future.result())

        results.sort(key=lambda r: r.chunk_index)
        return results

    def _process_chunk(self, chunk: Chunk) -> WorkerResult:
        try:
            chunk.sanitized_text = self.sanitizer.sanitize(chunk.raw_text)
            chunk.vector = self.embeddings_client.embed_text(chunk.sanitized_text)
        except (SanitizationError, EmbeddingError) as exc:
            return WorkerResult(chunk_index=chunk.index, error=exc)
        except Exception as exc:
            # Any failure stays with its chunk; the rest of the batch goes on.
            self.logger.exception("Unexpected error processing chunk %d", chunk.index)
            return WorkerResult(chunk_index=chunk.index, error=exc)
        return WorkerResult(chunk_index=chunk.index, vector=chunk.vector, sanitized_text=chunk.sanitized_text)

    def close(self) -> None:
        self.sanitizer.close()
        self.embeddings_client.close()
        self.vector_store.close()

    @staticmethod
    def build_records(results: Sequence[WorkerResult], session_id: str) -> List[VectorRecord]:
        timestamp = int(time.time())
        return [
            VectorRecord(
                id=str(uuid.uuid4()),
                vector=result.vector,
                metadata={
                    "session_id": session_id,
                    "chunk_text": result.sanitized_text,
                    "timestamp": timestamp,
                },
            )
            for result in results
        ]


__all__ = ["IngestionService", "IngestSummary", "WorkerResult", "Chunk"]

from __future__ import annotations

import logging
from typing import Callable, Iterator

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile
from fastapi.responses import StreamingResponse

from pdf_assistant.config import settings
from pdf_assistant.embeddings.client import EmbeddingsClient
from pdf_assistant.errors import UploadTooLargeError, ValidationError
from pdf_assistant.indexing.pipeline import IngestionService
from pdf_assistant.indexing.sanitizer import PIISanitizer
from pdf_assistant.llm.client import LLMClient
from pdf_assistant.models.schemas import ChatRequest, IngestResponse, WipeRequest, WipeResponse
from pdf_assistant.rag.pipeline import RAGService, StreamEvent
from pdf_assistant.vector_store import VectorStore, get_vector_store

router = APIRouter(prefix="/api")
logger = logging.getLogger(__name__)

DONE_SENTINEL = "[DONE]"


# --- Per-request dependencies ---
def vector_store_dependency() -> VectorStore:
    return get_vector_store()


def ingestion_service_dependency() -> IngestionService:
    sanitizer = PIISanitizer(LLMClient(model=settings.sanitizer_model_name, temperature=0.0))
    return IngestionService(get_vector_store(), sanitizer, EmbeddingsClient())


def build_rag_service() -> RAGService:
    return RAGService(
        vector_store=get_vector_store(),
        embeddings_client=EmbeddingsClient(),
        llm_client=LLMClient(temperature=settings.answer_temperature),
    )


def rag_service_dependency() -> Callable[[], RAGService]:
    # The chat stream outlives the request scope, so the handler builds and owns the service.
    return build_rag_service


def _open_vector_store(store: VectorStore = Depends(vector_store_dependency)) -> Iterator[VectorStore]:
    # Teardown also runs when request validation fails before the handler is called.
    try:
        yield store
    finally:
        store.close()


def _open_ingestion_service(
    service: IngestionService = Depends(ingestion_service_dependency),
) -> Iterator[IngestionService]:
    try:
        yield service
    finally:
        service.close()


def _required(value: str | None, name: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{name} required")
    return value


def _read_upload(file: UploadFile, limit: int) -> bytes:
    data = file.file.read(limit + 1)
    if len(data) > limit:
        raise UploadTooLargeError(f"File exceeds the {limit} byte upload limit")
    return data


def _sse(data: str) -> str:
    return f"data: {data}\n\n"


def _event_stream(events: Iterator[StreamEvent], service: RAGService) -> Iterator[str]:
    try:
        for event in events:
            yield _sse(event.model_dump_json())
        yield _sse(DONE_SENTINEL)
    finally:
        # Runs on exhaustion and when the client disconnects mid-stream.
        events.close()
        service.close()


# --- Endpoints ---
@router.post("/upload", response_model=IngestResponse, summary="Index an uploaded PDF for a session")
def upload(
    session_id: str = Form(...),
    file: UploadFile = File(...),
    service: IngestionService = Depends(_open_ingestion_service),
) -> IngestResponse:
    session_id = _required(session_id, "session_id")
    data = _read_upload(file, settings.max_upload_bytes)
    logger.info("Upload request", extra={"session_id": session_id, "bytes": len(data)})

    summary = service.ingest_pdf(data, session_id)
    return IngestResponse(success=True, chunks=summary.indexed_chunks)


@router.post("/chat", summary="Stream an answer grounded in the session's document")
def chat(
    request: ChatRequest,
    build_service: Callable[[], RAGService] = Depends(rag_service_dependency),
) -> StreamingResponse:
    session_id = _required(request.session_id, "session_id")
    message = _required(request.message, "message")
    logger.info("Chat request", extra={"session_id": session_id, "len": len(message)})

    service = build_service()
    try:
        events = service.answer_stream(session_id, message)
    except Exception:
        service.close()
        raise

    return StreamingResponse(
        _event_stream(events, service),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )


@router.post("/wipe", response_model=WipeResponse, summary="Delete every chunk of a session")
def wipe(request: WipeRequest, store: VectorStore = Depends(_open_vector_store)) -> WipeResponse:
    session_id = _required(request.session_id, "session_id")
    deleted = store.delete_by_session(session_id)
    logger.info("Session wiped", extra={"session_id": session_id, "deleted": deleted})
    return WipeResponse(success=True, message="Session data wiped", deleted=deleted)


@router.options("/upload", include_in_schema=False)
@router.options("/chat", include_in_schema=False)
@router.options("/wipe", include_in_schema=False)
def preflight() -> Response:
    """Bare OPTIONS requests; CORS preflights are answered by the middleware first."""
    return Response(status_code=200)


__all__ = [
    "router",
    "vector_store_dependency",
    "ingestion_service_dependency",
    "rag_service_dependency",
    "build_rag_service",
    "DONE_SENTINEL",
]

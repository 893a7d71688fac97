"""
Error taxonomy shared by the ingestion, retrieval and API layers.

Every error carries the HTTP status the API responds with when it escapes a
request handler.
"""

from __future__ import annotations


class AssistantError(Exception):
    """Base class for expected, user-visible failures."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AssistantError):
    """A required request field is missing or blank."""

    status_code = 400


class UploadTooLargeError(ValidationError):
    status_code = 413


class ExtractionError(AssistantError):
    """The upload is not a readable PDF or has no text layer."""

    status_code = 400


class SanitizationError(AssistantError):
    pass


class EmbeddingError(AssistantError):
    pass


class LLMError(AssistantError):
    pass


class IngestionError(AssistantError):
    """Every chunk of an upload failed, so nothing could be indexed."""

    status_code = 502


class StoreError(AssistantError):
    """The vector store answered with a non-success status or was unreachable."""

    def __init__(self, status_code: int | None, body: str) -> None:
        label = f"status {status_code}" if status_code is not None else "transport failure"
        super().__init__(f"Vector store error ({label}): {body}")
        self.upstream_status = status_code
        self.body = body


__all__ = [
    "AssistantError",
    "ValidationError",
    "UploadTooLargeError",
    "ExtractionError",
    "SanitizationError",
    "EmbeddingError",
    "LLMError",
    "IngestionError",
    "StoreError",
]

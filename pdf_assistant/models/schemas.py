from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, Field


# Ingest
class IngestResponse(BaseModel):
    """Result of indexing one uploaded PDF."""

    success: bool = True
    chunks: int = Field(..., ge=0, description="How many chunks were indexed")


# Chat
class ChatRequest(BaseModel):
    session_id: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1, description="User question")


class CitationsEvent(BaseModel):
    type: Literal["citations"] = "citations"
    citations: List[str]


class TextEvent(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ErrorEvent(BaseModel):
    type: Literal["error"] = "error"
    error: str


# Wipe
class WipeRequest(BaseModel):
    session_id: str = Field(..., min_length=1)


class WipeResponse(BaseModel):
    success: bool = True
    message: str
    deleted: int = Field(0, ge=0)


__all__ = [
    "IngestResponse",
    "ChatRequest",
    "CitationsEvent",
    "TextEvent",
    "ErrorEvent",
    "WipeRequest",
    "WipeResponse",
]

"""
PDF text extraction.
"""

from __future__ import annotations

import io
import logging
from typing import List

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from pdf_assistant.errors import ExtractionError

logger = logging.getLogger(__name__)


def normalize_whitespace(text: str) -> str:
    """Collapse every whitespace run, newlines included, to a single space."""
    return " ".join(text.split())


def extract_text(data: bytes) -> str:
    if not data:
        raise ExtractionError("Uploaded file is empty")

    try:
        reader = PdfReader(io.BytesIO(data))
        if reader.is_encrypted and not reader.decrypt(""):
            raise ExtractionError("PDF is encrypted")
        pages: List[str] = [page.extract_text() or "" for page in reader.pages]
    except (PyPdfError, ValueError, KeyError) as exc:
        raise ExtractionError(f"Error parsing PDF: {exc}") from exc

    text = normalize_whitespace(" ".join(pages))
    logger.info("Extracted PDF text", extra={"pages": len(pages), "chars": len(text)})
    if not text:
        raise ExtractionError("No text found in PDF")
    return text


__all__ = ["extract_text", "normalize_whitespace"]

"""
Text chunking utilities.
"""

from __future__ import annotations

from typing import List

from pdf_assistant.config import settings

CHUNK_SIZE_WORDS = settings.chunk_size_words
CHUNK_OVERLAP_WORDS = settings.chunk_overlap_words


def chunk_words(text: str, chunk_size: int = CHUNK_SIZE_WORDS, overlap: int = CHUNK_OVERLAP_WORDS) -> List[str]:
    """
    Split text into overlapping windows of `chunk_size` words.

    Each window starts `chunk_size - overlap` words after the previous one. The
    last window may be shorter and always ends on the final word.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    if overlap < 0 or overlap >= chunk_size:
        raise ValueError("overlap must be >= 0 and smaller than chunk_size")

    words = text.split()
    step = chunk_size - overlap
    chunks: List[str] = []
    start = 0

    while start < len(words):
        end = min(start + chunk_size, len(words))
        chunks.append(" ".join(words[start:end]))
        if end == len(words):
            break
        start += step

    return chunks


__all__ = ["chunk_words", "CHUNK_SIZE_WORDS", "CHUNK_OVERLAP_WORDS"]

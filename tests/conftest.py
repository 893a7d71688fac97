"""
Shared fakes and fixtures.

The fakes stand in for the OpenAI-backed clients and the vector store so the
pipelines and routes can be exercised without network access.
"""

import re
import threading
import time
from typing import Iterable, List, Optional, Sequence

import pytest

from pdf_assistant.errors import EmbeddingError, LLMError, SanitizationError, StoreError
from pdf_assistant.vector_store.base import QueryResult, VectorRecord


def build_pdf(pages: Sequence[str]) -> bytes:
    """Build a minimal PDF with one line of Helvetica text per page."""
    page_ids = [4 + 2 * i for i in range(len(pages))]
    kids = " ".join(f"{pid} 0 R" for pid in page_ids)
    objects: List[bytes] = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        f"<< /Type /Pages /Kids [{kids}] /Count {len(pages)} >>".encode(),
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    for page_id, text in zip(page_ids, pages):
        objects.append(
            (
                "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
                f"/Resources << /Font << /F1 3 0 R >> >> /Contents {page_id + 1} 0 R >>"
            ).encode()
        )
        escaped = text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")
        stream = f"BT /F1 12 Tf 72 720 Td ({escaped}) Tj ET".encode() if text else b""
        objects.append(b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream")

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += f"{number} 0 obj\n".encode() + body + b"\nendobj\n"

    xref_at = len(out)
    out += f"xref\n0 {len(objects) + 1}\n".encode()
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += f"{offset:010d} 00000 n \n".encode()
    out += f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\nstartxref\n{xref_at}\n%%EOF\n".encode()
    return bytes(out)


class FakeVectorStore:
    """In-memory store that mimics session filtering and query-then-delete."""

    def __init__(self, query_error: Optional[StoreError] = None):
        self.records: List[VectorRecord] = []
        self.upsert_calls: List[List[VectorRecord]] = []
        self.delete_calls: List[List[str]] = []
        self.query_error = query_error
        self.closed = False

    def upsert(self, records):
        if not records:
            return
        self.upsert_calls.append(list(records))
        by_id = {r.id: r for r in self.records}
        for record in records:
            by_id[record.id] = record
        self.records = list(by_id.values())

    def query(self, vector, top_k, session_id=None, include_metadata=True):
        if self.query_error is not None:
            raise self.query_error
        matching = [r for r in self.records if session_id is None or r.metadata.get("session_id") == session_id]
        return [
            QueryResult(id=r.id, score=1.0 - idx * 0.01, metadata=dict(r.metadata) if include_metadata else {})
            for idx, r in enumerate(matching[:top_k])
        ]

    def delete_by_session(self, session_id):
        ids = [m.id for m in self.query([0.0], top_k=1000, session_id=session_id, include_metadata=False)]
        if not ids:
            return 0
        self.delete_calls.append(ids)
        self.records = [r for r in self.records if r.id not in ids]
        return len(ids)

    def close(self):
        self.closed = True


class FakeSanitizer:
    def __init__(self, fail_on: Iterable[str] = ()):
        self.fail_on = set(fail_on)
        self.closed = False

    def sanitize(self, text):
        if any(marker in text for marker in self.fail_on):
            raise SanitizationError("model unavailable")
        return re.sub(r"\S+@\S+", "[REDACTED EMAIL]", text)

    def close(self):
        self.closed = True


class FakeEmbeddings:
    """Deterministic embeddings; tracks peak concurrency of callers."""

    def __init__(self, fail_on: Iterable[str] = (), delay: float = 0.0):
        self.fail_on = set(fail_on)
        self.delay = delay
        self.closed = False
        self.calls = 0
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def embed_text(self, text):
        with self._lock:
            self.calls += 1
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                time.sleep(self.delay)
            if text in self.fail_on:
                raise EmbeddingError("embedding failed")
            return [float(len(text)), 1.0, 0.5]
        finally:
            with self._lock:
                self.active -= 1

    def close(self):
        self.closed = True


class FakeLLM:
    """Streams fixed fragments; optionally fails after them."""

    def __init__(self, fragments: Sequence[str] = ("Hello", " world"), fail_with: Optional[str] = None):
        self.fragments = list(fragments)
        self.fail_with = fail_with
        self.stream_calls: List[list] = []
        self.stream_closed = False
        self.closed = False

    def chat(self, messages):
        return "".join(self.fragments)

    def stream_chat(self, messages):
        self.stream_calls.append(messages)
        try:
            for fragment in self.fragments:
                yield fragment
            if self.fail_with:
                raise LLMError(self.fail_with)
        finally:
            self.stream_closed = True

    def close(self):
        self.closed = True


@pytest.fixture
def store():
    return FakeVectorStore()


@pytest.fixture
def sanitizer():
    return FakeSanitizer()


@pytest.fixture
def embeddings():
    return FakeEmbeddings()


@pytest.fixture
def llm():
    return FakeLLM()


@pytest.fixture
def text_pdf():
    words = " ".join(f"word{i}" for i in range(25))
    return build_pdf([words, "contact alice@example.com for details"])


@pytest.fixture
def blank_pdf():
    return build_pdf([""])

"""
Hosted (Upstash Vector REST API) VectorStore implementation.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, List, Sequence

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from pdf_assistant.config import settings
from pdf_assistant.errors import StoreError
from pdf_assistant.vector_store.base import QueryResult, VectorRecord, VectorStore

logger = logging.getLogger(__name__)


def session_filter(session_id: str) -> str:
    """Equality predicate on the session_id metadata field."""
    escaped = session_id.replace("\\", "\\\\").replace("'", "\\'")
    return f"session_id = '{escaped}'"


class UpstashVectorStore(VectorStore):
    def __init__(
        self,
        base_url: str,
        token: str,
        dimensions: int = settings.embedding_dimensions,
        wipe_limit: int = settings.wipe_query_limit,
        timeout: float = settings.vector_store_timeout_sec,
        client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.dimensions = dimensions
        self.wipe_limit = wipe_limit
        self.client = client or httpx.Client(timeout=httpx.Timeout(timeout))
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        logger.info("UpstashVectorStore initialised", extra={"base_url": self.base_url})

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        retry=retry_if_exception_type(httpx.TransportError),
        before_sleep=lambda retry_state: logger.warning(
            "Retrying vector store request after %s", retry_state.outcome.exception()
        ),
        reraise=True,
    )
    def _send(self, method: str, path: str, payload: Any) -> httpx.Response:
        return self.client.request(method, f"{self.base_url}/{path}", json=payload, headers=self._headers)

    def _request(self, method: str, path: str, payload: Any) -> Any:
        try:
            response = self._send(method, path, payload)
        except httpx.TransportError as exc:
            raise StoreError(None, str(exc)) from exc

        if response.status_code >= 400:
            logger.error(
                "Vector store request failed",
                extra={"path": path, "status_code": response.status_code},
            )
            raise StoreError(response.status_code, response.text)

        try:
            body = response.json()
        except ValueError as exc:
            raise StoreError(response.status_code, response.text) from exc
        if not isinstance(body, dict):
            raise StoreError(response.status_code, response.text)
        return body.get("result")

    def upsert(self, records: Sequence[VectorRecord]) -> None:
        if not records:
            return

        self._request("POST", "upsert", [asdict(record) for record in records])
        logger.info("Upserted records into Upstash", extra={"count": len(records)})

    def query(
        self,
        vector: Sequence[float],
        top_k: int,
        session_id: str | None = None,
        include_metadata: bool = True,
    ) -> List[QueryResult]:
        if top_k <= 0:
            return []

        payload: dict = {"vector": list(vector), "topK": top_k, "includeMetadata": include_metadata}
        if session_id is not None:
            payload["filter"] = session_filter(session_id)

        matches = self._request("POST", "query", payload) or []
        results = [
            QueryResult(id=str(m["id"]), score=float(m.get("score", 0.0)), metadata=m.get("metadata") or {})
            for m in matches
        ]
        results.sort(key=lambda r: r.score, reverse=True)
        return results

    def delete_by_session(self, session_id: str) -> int:
        # No native delete-by-metadata: collect ids with a zero-vector query, then delete them.
        matches = self.query(
            [0.0] * self.dimensions,
            top_k=self.wipe_limit,
            session_id=session_id,
            include_metadata=False,
        )
        if not matches:
            logger.info("No records to delete for session", extra={"session_id": session_id})
            return 0

        ids = [m.id for m in matches]
        result = self._request("DELETE", "delete", ids)
        deleted = result.get("deleted", len(ids)) if isinstance(result, dict) else len(ids)
        logger.info("Deleted session records", extra={"session_id": session_id, "count": deleted})
        return deleted

    def close(self) -> None:
        self.client.close()


__all__ = ["UpstashVectorStore", "session_filter"]

"""
Chroma-based VectorStore implementation for local development.
"""

from __future__ import annotations

import logging
from typing import Any, List, Sequence

import chromadb

from pdf_assistant.config import settings
from pdf_assistant.vector_store.base import QueryResult, VectorRecord, VectorStore

CHROMA_COLLECTION = settings.vector_store_collection
CHROMA_PERSIST_DIR = settings.vector_store_path

logger = logging.getLogger(__name__)


class ChromaVectorStore(VectorStore):
    def __init__(
        self,
        persist_directory: str | None = None,
        collection_name: str = CHROMA_COLLECTION,
        wipe_limit: int = settings.wipe_query_limit,
        client: Any | None = None,
    ) -> None:
        self.persist_directory = persist_directory or CHROMA_PERSIST_DIR
        self.collection_name = collection_name
        self.wipe_limit = wipe_limit
        self.client = client or chromadb.PersistentClient(path=self.persist_directory)
        self.collection = self.client.get_or_create_collection(
            self.collection_name, metadata={"hnsw:space": "cosine"}
        )
        logger.info(
            "ChromaVectorStore initialised",
            extra={"persist_directory": self.persist_directory, "collection": self.collection_name},
        )

    def upsert(self, records: Sequence[VectorRecord]) -> None:
        if not records:
            return

        self.collection.upsert(
            ids=[record.id for record in records],
            embeddings=[record.vector for record in records],
            metadatas=[record.metadata for record in records],
        )
        logger.info("Upserted records into Chroma", extra={"count": len(records), "collection": self.collection_name})

    def query(
        self,
        vector: Sequence[float],
        top_k: int,
        session_id: str | None = None,
        include_metadata: bool = True,
    ) -> List[QueryResult]:
        if top_k <= 0:
            return []

        result = self.collection.query(
            query_embeddings=[list(vector)],
            n_results=top_k,
            where={"session_id": session_id} if session_id is not None else None,
            include=["metadatas", "distances"],
        )

        ids = (result.get("ids") or [[]])[0] or []
        metadatas = (result.get("metadatas") or [[]])[0] or []
        distances = (result.get("distances") or [[]])[0] or []

        matches: List[QueryResult] = []
        for record_id, metadata, distance in zip(ids, metadatas, distances):
            # Chroma returns a cosine distance; lower is closer.
            score = 1.0 - float(distance)
            matches.append(
                QueryResult(id=record_id, score=score, metadata=dict(metadata or {}) if include_metadata else {})
            )

        matches.sort(key=lambda m: m.score, reverse=True)
        return matches

    def delete_by_session(self, session_id: str) -> int:
        found = self.collection.get(where={"session_id": session_id}, limit=self.wipe_limit, include=[])
        ids = found.get("ids") or []
        if not ids:
            logger.info("No records to delete for session", extra={"session_id": session_id})
            return 0

        self.collection.delete(ids=ids)
        logger.info("Deleted session records", extra={"session_id": session_id, "count": len(ids)})
        return len(ids)

    def close(self) -> None:
        # PersistentClient keeps no per-request connection.
        return None


__all__ = ["ChromaVectorStore", "CHROMA_COLLECTION", "CHROMA_PERSIST_DIR"]

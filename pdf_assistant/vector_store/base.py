"""
Vector store interface and shared types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol, Sequence


@dataclass
class VectorRecord:
    id: str
    vector: List[float]
    metadata: Dict[str, Any]


@dataclass
class QueryResult:
    id: str
    score: float
    metadata: Dict[str, Any] = field(default_factory=dict)


class VectorStore(Protocol):
    def upsert(self, records: Sequence[VectorRecord]) -> None:
        ...

    def query(
        self,
        vector: Sequence[float],
        top_k: int,
        session_id: str | None = None,
        include_metadata: bool = True,
    ) -> List[QueryResult]:
        ...

    def delete_by_session(self, session_id: str) -> int:
        ...

    def close(self) -> None:
        ...


__all__ = ["VectorRecord", "QueryResult", "VectorStore"]

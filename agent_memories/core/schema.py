"""
Memory records and search results exchanged with callers.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..vector.corpus import CorpusStats


@dataclass
class Memory:
    id: str
    content: str
    embedding: List[float]
    metadata: Dict[str, Any]
    created_at: datetime
    updated_at: datetime
    category: Optional[str] = None
    agent_id: Optional[str] = None
    importance: float = 1

    def to_attributes(self) -> Dict[str, Any]:
        """Index attributes for this memory (everything except the vector)."""
        return {
            "content": self.content,
            "metadata": dict(self.metadata),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "agent_id": self.agent_id,
            "category": self.category,
            "importance": self.importance,
        }

    @classmethod
    def from_attributes(cls, memory_id: str, vector, attributes: Dict[str, Any]) -> "Memory":
        return cls(
            id=memory_id,
            content=attributes.get("content", ""),
            embedding=[float(x) for x in vector] if vector is not None else [],
            metadata=dict(attributes.get("metadata") or {}),
            created_at=_parse_timestamp(attributes.get("created_at")),
            updated_at=_parse_timestamp(attributes.get("updated_at")),
            category=attributes.get("category") or None,
            agent_id=attributes.get("agent_id") or None,
            importance=attributes.get("importance") if attributes.get("importance") is not None else 1,
        )


@dataclass
class SearchResult:
    memory: Memory
    score: float  # (0, 1], higher is more similar
    distance: float


@dataclass
class SearchResponse:
    results: List[SearchResult] = field(default_factory=list)
    corpus: Optional[CorpusStats] = None


def _parse_timestamp(value) -> datetime:
    if isinstance(value, datetime):
        return value
    if value:
        return datetime.fromisoformat(value)
    return datetime.now()

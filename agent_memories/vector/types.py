"""
Records exchanged with a vector index.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np


@dataclass
class VectorRecord:
    """Represents a vector record with its attributes."""

    id: str
    """Unique identifier for the vector record"""

    vector: np.ndarray
    """The vector representation of the content"""

    attributes: Dict[str, Any]
    """Attributes stored alongside the vector (content, timestamps, category, ...)"""


@dataclass
class QueryResult:
    """Represents a nearest-neighbour hit from a vector index."""

    id: str
    """Identifier for the matching record"""

    distance: float
    """Euclidean distance from the query vector (>= 0)"""

    attributes: Dict[str, Any]
    """Attributes associated with the matched record"""

    vector: Optional[np.ndarray] = None
    """Stored vector, when the index returns it"""


@dataclass
class MemoryFilter:
    """Attribute filter applied by every index implementation."""

    agent_id: Optional[str] = None
    category: Optional[str] = None
    min_importance: Optional[float] = None

    def is_empty(self) -> bool:
        return self.agent_id is None and self.category is None and self.min_importance is None

    def matches(self, attributes: Dict[str, Any]) -> bool:
        if self.agent_id is not None and attributes.get("agent_id") != self.agent_id:
            return False
        if self.category is not None and attributes.get("category") != self.category:
            return False
        if self.min_importance is not None:
            importance = attributes.get("importance")
            if importance is None or importance < self.min_importance:
                return False
        return True

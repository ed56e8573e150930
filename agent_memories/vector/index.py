"""
Vector index contract and the in-process implementation.

Distances are Euclidean. Results come back nearest first; equal distances keep
insertion order.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import numpy as np

from ..core.errors import DimensionMismatch, StorageNotInitialized
from ..util.logging import logger
from .types import MemoryFilter, QueryResult, VectorRecord


class IVectorIndex(ABC):
    """Abstract interface for vector index operations."""

    def __init__(self, dimension: int):
        self.dimension = dimension
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def ensure_initialized(self) -> None:
        if not self._initialized:
            raise StorageNotInitialized()

    def check_dimension(self, vector: np.ndarray) -> np.ndarray:
        vector = np.asarray(vector, dtype=np.float64)
        if vector.ndim != 1 or len(vector) != self.dimension:
            raise DimensionMismatch(int(vector.size), self.dimension)
        return vector

    @abstractmethod
    async def initialize(self) -> None:
        """Open or create the underlying storage."""
        pass

    @abstractmethod
    async def insert(self, record: VectorRecord) -> None:
        """Add a single vector record to the index."""
        pass

    @abstractmethod
    async def delete(self, record_id: str) -> bool:
        """Delete a vector record by ID. Returns False if it was absent."""
        pass

    @abstractmethod
    async def get(self, record_id: str) -> Optional[VectorRecord]:
        """Fetch a single record by ID."""
        pass

    @abstractmethod
    async def query(self, vector: np.ndarray, k: int,
                    filter: Optional[MemoryFilter] = None) -> List[QueryResult]:
        """Return up to k nearest records matching the filter, nearest first."""
        pass

    @abstractmethod
    async def scan(self, filter: Optional[MemoryFilter] = None,
                   limit: Optional[int] = None) -> List[VectorRecord]:
        """List records in insertion order without similarity ranking."""
        pass

    async def upsert(self, record: VectorRecord) -> None:
        """Replace any existing record with the same ID."""
        await self.delete(record.id)
        await self.insert(record)

    async def batch_insert(self, records: List[VectorRecord]) -> None:
        """Add multiple vector records to the index."""
        for record in records:
            await self.insert(record)

    async def count(self) -> int:
        return len(await self.scan())


def rank_by_distance(query: np.ndarray, matrix: np.ndarray, k: int) -> List[tuple]:
    """(position, distance) pairs for the k rows of matrix nearest to query."""
    if matrix.shape[0] == 0 or k <= 0:
        return []
    distances = np.linalg.norm(matrix - query, axis=1)
    order = np.argsort(distances, kind="stable")[:k]
    return [(int(position), float(distances[position])) for position in order]


class InMemoryVectorIndex(IVectorIndex):
    """In-process IVectorIndex backed by dicts; nothing survives the process."""

    def __init__(self, dimension: int = 200):
        super().__init__(dimension)
        self._records: Dict[str, VectorRecord] = {}  # insertion ordered

    async def initialize(self) -> None:
        self._initialized = True

    async def insert(self, record: VectorRecord) -> None:
        self.ensure_initialized()
        vector = self.check_dimension(record.vector)

        # Re-inserting an id moves it to the end of the insertion order
        self._records.pop(record.id, None)
        self._records[record.id] = VectorRecord(id=record.id, vector=vector, attributes=dict(record.attributes))
        logger.log_vector_operation("insert", record.id)

    async def delete(self, record_id: str) -> bool:
        self.ensure_initialized()
        removed = self._records.pop(record_id, None) is not None
        if removed:
            logger.log_vector_operation("delete", record_id)
        return removed

    async def get(self, record_id: str) -> Optional[VectorRecord]:
        self.ensure_initialized()
        return self._records.get(record_id)

    async def query(self, vector: np.ndarray, k: int,
                    filter: Optional[MemoryFilter] = None) -> List[QueryResult]:
        self.ensure_initialized()
        query_vector = self.check_dimension(vector)

        candidates = [
            record for record in self._records.values()
            if filter is None or filter.matches(record.attributes)
        ]
        if not candidates:
            return []

        matrix = np.vstack([record.vector for record in candidates])
        ranked = rank_by_distance(query_vector, matrix, k)
        return [
            QueryResult(
                id=candidates[position].id,
                distance=distance,
                attributes=dict(candidates[position].attributes),
                vector=candidates[position].vector,
            )
            for position, distance in ranked
        ]

    async def scan(self, filter: Optional[MemoryFilter] = None,
                   limit: Optional[int] = None) -> List[VectorRecord]:
        self.ensure_initialized()
        records = [
            record for record in self._records.values()
            if filter is None or filter.matches(record.attributes)
        ]
        return records[:limit] if limit is not None else records

    async def count(self) -> int:
        self.ensure_initialized()
        return len(self._records)

    async def clear(self) -> None:
        """Clear all records from the index."""
        self._records.clear()

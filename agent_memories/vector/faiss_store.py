"""
FAISS-backed IVectorIndex using an exact L2 index wrapped in an ID map,
so records can be removed individually.
"""

from typing import Dict, List, Optional

import numpy as np

from ..util.logging import logger
from .index import IVectorIndex
from .types import MemoryFilter, QueryResult, VectorRecord


class FaissVectorIndex(IVectorIndex):
    """FAISS-backed implementation of IVectorIndex."""

    def __init__(self, dimension: int = 200):
        """
        Initialize FAISS vector index.

        Args:
            dimension: Dimension of the vectors (default: 200, the LSA embedding size)
        """
        super().__init__(dimension)
        try:
            import faiss
        except ImportError:
            raise ImportError("FAISS not installed. Please install faiss-cpu package.")

        self.faiss = faiss
        self.index = None

        # FAISS ids are int64; map them to record ids and back
        self.id_to_vector_index: Dict[str, int] = {}
        self.vector_id_map: Dict[int, str] = {}
        self.attributes: Dict[str, dict] = {}
        self.next_vector_index = 0

    async def initialize(self) -> None:
        if self.index is None:
            self.index = self.faiss.IndexIDMap2(self.faiss.IndexFlatL2(self.dimension))
        self._initialized = True

    async def insert(self, record: VectorRecord) -> None:
        """Add a single vector record to the FAISS index."""
        self.ensure_initialized()
        vector = self.check_dimension(record.vector)

        if record.id in self.id_to_vector_index:
            await self.delete(record.id)

        vector_index = self.next_vector_index
        self.next_vector_index += 1

        # FAISS expects float32 rows
        self.index.add_with_ids(
            np.array(vector, dtype=np.float32).reshape(1, -1),
            np.array([vector_index], dtype=np.int64),
        )
        self.id_to_vector_index[record.id] = vector_index
        self.vector_id_map[vector_index] = record.id
        self.attributes[record.id] = dict(record.attributes)
        logger.log_vector_operation("insert", record.id, {"backend": "faiss"})

    async def delete(self, record_id: str) -> bool:
        self.ensure_initialized()
        vector_index = self.id_to_vector_index.pop(record_id, None)
        if vector_index is None:
            return False

        self.index.remove_ids(np.array([vector_index], dtype=np.int64))
        del self.vector_id_map[vector_index]
        del self.attributes[record_id]
        logger.log_vector_operation("delete", record_id, {"backend": "faiss"})
        return True

    def _reconstruct(self, vector_index: int) -> np.ndarray:
        return np.asarray(self.index.reconstruct(int(vector_index)), dtype=np.float64)

    async def get(self, record_id: str) -> Optional[VectorRecord]:
        self.ensure_initialized()
        vector_index = self.id_to_vector_index.get(record_id)
        if vector_index is None:
            return None
        return VectorRecord(
            id=record_id,
            vector=self._reconstruct(vector_index),
            attributes=dict(self.attributes[record_id]),
        )

    async def query(self, vector: np.ndarray, k: int,
                    filter: Optional[MemoryFilter] = None) -> List[QueryResult]:
        """Search for nearest vectors; filters are applied before truncating to k."""
        self.ensure_initialized()
        query_vector = self.check_dimension(vector)
        if not self.index.ntotal or k <= 0:
            return []

        query_array = np.array(query_vector, dtype=np.float32).reshape(1, -1)
        squared, indices = self.index.search(query_array, self.index.ntotal)

        hits = []
        for squared_distance, vector_index in zip(squared[0], indices[0]):
            vector_index = int(vector_index)
            if vector_index < 0 or vector_index not in self.vector_id_map:
                continue
            record_id = self.vector_id_map[vector_index]
            attributes = self.attributes[record_id]
            if filter is not None and not filter.matches(attributes):
                continue
            # IndexFlatL2 reports squared L2
            hits.append((float(np.sqrt(max(float(squared_distance), 0.0))), vector_index, record_id))

        # Equal distances fall back to insertion order
        hits.sort(key=lambda hit: (hit[0], hit[1]))
        return [
            QueryResult(
                id=record_id,
                distance=distance,
                attributes=dict(self.attributes[record_id]),
                vector=self._reconstruct(vector_index),
            )
            for distance, vector_index, record_id in hits[:k]
        ]

    async def scan(self, filter: Optional[MemoryFilter] = None,
                   limit: Optional[int] = None) -> List[VectorRecord]:
        self.ensure_initialized()
        records = []
        for vector_index in sorted(self.vector_id_map):
            record_id = self.vector_id_map[vector_index]
            if filter is not None and not filter.matches(self.attributes[record_id]):
                continue
            records.append(VectorRecord(
                id=record_id,
                vector=self._reconstruct(vector_index),
                attributes=dict(self.attributes[record_id]),
            ))
            if limit is not None and len(records) >= limit:
                break
        return records

    async def count(self) -> int:
        self.ensure_initialized()
        return int(self.index.ntotal)

    async def clear(self) -> None:
        """Clear all records from the FAISS index."""
        self.index = self.faiss.IndexIDMap2(self.faiss.IndexFlatL2(self.dimension))
        self.id_to_vector_index.clear()
        self.vector_id_map.clear()
        self.attributes.clear()
        self.next_vector_index = 0

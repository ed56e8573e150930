"""
SQLite-backed IVectorIndex. Vectors are stored as float64 blobs next to the
memory attributes; similarity is computed in numpy over the filtered rows.
"""

import asyncio
import json
import sqlite3
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from ..core.db import get_db, init_db
from ..core.errors import IndexUnavailable
from ..util.logging import logger
from .embeddings import fit_to_dimension
from .index import IVectorIndex, rank_by_distance
from .types import MemoryFilter, QueryResult, VectorRecord

COLUMNS = "id, vector, dimension, content, metadata, created_at, updated_at, agent_id, category, importance"


def _where_clause(filter: Optional[MemoryFilter]) -> Tuple[str, list]:
    if filter is None or filter.is_empty():
        return "", []

    clauses = []
    params = []
    if filter.agent_id is not None:
        clauses.append("agent_id = ?")
        params.append(filter.agent_id)
    if filter.category is not None:
        clauses.append("category = ?")
        params.append(filter.category)
    if filter.min_importance is not None:
        clauses.append("importance >= ?")
        params.append(filter.min_importance)
    return " WHERE " + " AND ".join(clauses), params


class SqliteVectorIndex(IVectorIndex):
    """Durable IVectorIndex stored in a single SQLite file."""

    def __init__(self, db_path: str, dimension: int = 200):
        super().__init__(dimension)
        self.db_path = db_path

    async def _run(self, fn, *args):
        try:
            return await asyncio.to_thread(fn, *args)
        except sqlite3.Error as e:
            logger.error(f"SQLite vector index failure at {self.db_path}: {e}")
            raise IndexUnavailable(f"SQLite vector index unavailable: {e}") from e

    async def initialize(self) -> None:
        await self._run(init_db, self.db_path)
        self._initialized = True

    def _row_to_record(self, row: tuple) -> VectorRecord:
        (record_id, blob, dimension, content, metadata, created_at, updated_at,
         agent_id, category, importance) = row

        vector = np.frombuffer(blob, dtype=np.float64).copy()
        if dimension != self.dimension:
            # Written under a different EMBED_DIM; conform at read time
            logger.warning(
                f"Stored vector for {record_id} has dimension {dimension}, "
                f"conforming to {self.dimension}"
            )
            vector = fit_to_dimension(vector, self.dimension)

        attributes: Dict[str, Any] = {
            "content": content,
            "metadata": json.loads(metadata) if metadata else {},
            "created_at": created_at,
            "updated_at": updated_at,
            "agent_id": agent_id,
            "category": category,
            "importance": importance,
        }
        return VectorRecord(id=record_id, vector=vector, attributes=attributes)

    def _insert_sync(self, record: VectorRecord, vector: np.ndarray) -> None:
        attributes = record.attributes
        with get_db(self.db_path) as conn:
            conn.execute(
                f"INSERT OR REPLACE INTO memories ({COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    record.id,
                    vector.astype(np.float64).tobytes(),
                    len(vector),
                    attributes.get("content", ""),
                    json.dumps(attributes.get("metadata") or {}),
                    attributes.get("created_at"),
                    attributes.get("updated_at"),
                    attributes.get("agent_id"),
                    attributes.get("category"),
                    attributes.get("importance"),
                ),
            )
            conn.commit()

    def _delete_sync(self, record_id: str) -> bool:
        with get_db(self.db_path) as conn:
            cursor = conn.execute("DELETE FROM memories WHERE id = ?", (record_id,))
            conn.commit()
            return cursor.rowcount > 0

    def _select_sync(self, where: str, params: list, limit: Optional[int] = None) -> List[tuple]:
        sql = f"SELECT {COLUMNS} FROM memories{where} ORDER BY seq"
        if limit is not None:
            sql += " LIMIT ?"
            params = params + [limit]
        with get_db(self.db_path) as conn:
            return conn.execute(sql, params).fetchall()

    async def insert(self, record: VectorRecord) -> None:
        self.ensure_initialized()
        vector = self.check_dimension(record.vector)
        await self._run(self._insert_sync, record, vector)
        logger.log_vector_operation("insert", record.id, {"backend": "sqlite"})

    async def upsert(self, record: VectorRecord) -> None:
        # INSERT OR REPLACE swaps the row in one transaction; readers never see it missing
        self.ensure_initialized()
        vector = self.check_dimension(record.vector)
        await self._run(self._insert_sync, record, vector)
        logger.log_vector_operation("upsert", record.id, {"backend": "sqlite"})

    async def delete(self, record_id: str) -> bool:
        self.ensure_initialized()
        removed = await self._run(self._delete_sync, record_id)
        if removed:
            logger.log_vector_operation("delete", record_id, {"backend": "sqlite"})
        return removed

    async def get(self, record_id: str) -> Optional[VectorRecord]:
        self.ensure_initialized()
        rows = await self._run(self._select_sync, " WHERE id = ?", [record_id], 1)
        return self._row_to_record(rows[0]) if rows else None

    async def query(self, vector: np.ndarray, k: int,
                    filter: Optional[MemoryFilter] = None) -> List[QueryResult]:
        self.ensure_initialized()
        query_vector = self.check_dimension(vector)

        where, params = _where_clause(filter)
        rows = await self._run(self._select_sync, where, params)
        if not rows:
            return []

        records = [self._row_to_record(row) for row in rows]
        matrix = np.vstack([record.vector for record in records])
        return [
            QueryResult(
                id=records[position].id,
                distance=distance,
                attributes=records[position].attributes,
                vector=records[position].vector,
            )
            for position, distance in rank_by_distance(query_vector, matrix, k)
        ]

    async def scan(self, filter: Optional[MemoryFilter] = None,
                   limit: Optional[int] = None) -> List[VectorRecord]:
        self.ensure_initialized()
        where, params = _where_clause(filter)
        rows = await self._run(self._select_sync, where, params, limit)
        return [self._row_to_record(row) for row in rows]

    async def count(self) -> int:
        self.ensure_initialized()

        def _count():
            with get_db(self.db_path) as conn:
                return conn.execute("SELECT COUNT(*) FROM memories").fetchone()[0]

        return await self._run(_count)

"""
Memory repository: embeds, indexes and searches memory records.

All mutating and retrain-triggering operations run behind one asyncio.Lock,
so a single repository instance owns its corpus model exclusively.
Stored embeddings are never recomputed when the corpus retrains; only
reindex() re-embeds existing memories.
"""

import asyncio
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np

from .config import LIST_DEFAULT_LIMIT, MemoryConfig, debug_enabled, get_memory_config, get_vector_index
from .errors import DimensionMismatch, MemoryNotFound
from .schema import Memory, SearchResponse, SearchResult
from ..api.schemas import CreateMemoryInput, SearchMemoryInput, UpdateMemoryInput
from ..util.logging import logger
from ..vector.corpus import CorpusManager, CorpusStats, Document
from ..vector.embeddings import LsaEmbeddingService
from ..vector.index import IVectorIndex
from ..vector.projector import SvdProjector
from ..vector.scoring import SimilarityScorer
from ..vector.types import MemoryFilter, VectorRecord

Query = Union[str, Sequence[float], np.ndarray]


class MemoryRepository:
    """
    Façade over the corpus model, embedding service, scorer and vector index.

    Writes mark the corpus stale; the next embedding request (write or search)
    retrains it from the full set of stored memories.
    """

    def __init__(self, index: IVectorIndex = None, config: MemoryConfig = None,
                 corpus: CorpusManager = None, scorer: SimilarityScorer = None):
        self.config = config or get_memory_config()
        self.index = index if index is not None else get_vector_index(self.config)
        if self.index.dimension != self.config.embedding_dimension:
            raise DimensionMismatch(self.index.dimension, self.config.embedding_dimension)

        self.corpus = corpus or CorpusManager(projector=SvdProjector(self.config.svd_min_documents))
        self.embeddings = LsaEmbeddingService(
            self.corpus,
            dimension=self.config.embedding_dimension,
            auto_embedding=self.config.auto_embedding,
        )
        self.scorer = scorer or SimilarityScorer(self.config.decay_factor)
        self._lock = asyncio.Lock()
        logger.set_debug(debug_enabled())

    async def initialize(self) -> None:
        """Open the vector index. Must be awaited before any other operation."""
        await self.index.initialize()

    # ── corpus / embedding helpers ────────────────────────────────────

    async def _refresh_corpus(self) -> None:
        if not self.config.auto_embedding or not self.corpus.stale:
            return

        records = await self.index.scan()
        documents = [Document(id=r.id, text=r.attributes.get("content", "")) for r in records]
        if not documents:
            # Nothing stored yet; stay stale until there is something to train on
            return
        self.corpus.refresh_if_stale(documents)

    async def _embed(self, text: str) -> np.ndarray:
        await self._refresh_corpus()
        return self.embeddings.embed(text)

    def _check_vector(self, vector) -> np.ndarray:
        vector = np.asarray(vector, dtype=np.float64)
        if vector.ndim != 1 or len(vector) != self.config.embedding_dimension:
            raise DimensionMismatch(int(vector.size), self.config.embedding_dimension)
        return vector

    @staticmethod
    def _record_for(memory: Memory, vector: np.ndarray) -> VectorRecord:
        return VectorRecord(id=memory.id, vector=vector, attributes=memory.to_attributes())

    # ── writes ─────────────────────────────────────────────────────────

    async def create(self, content: str, metadata: Dict[str, Any] = None, category: str = None,
                     agent_id: str = None, importance: float = 1,
                     embedding: Sequence[float] = None) -> Memory:
        """
        Embed and index a new memory.

        A caller-supplied embedding is used only when auto-embedding is disabled;
        otherwise the content is always embedded against the current corpus model.
        """
        async with self._lock:
            self.index.ensure_initialized()

            if embedding is not None and not self.config.auto_embedding:
                vector = self._check_vector(embedding)
            else:
                vector = await self._embed(content)

            now = datetime.now()
            memory = Memory(
                id=str(uuid.uuid4()),
                content=content,
                embedding=vector.tolist(),
                metadata=dict(metadata or {}),
                created_at=now,
                updated_at=now,
                category=category,
                agent_id=agent_id,
                importance=importance,
            )
            await self.index.insert(self._record_for(memory, vector))
            self.corpus.mark_stale()

        logger.log_memory_operation("create", memory.id, {"category": category, "agent_id": agent_id})
        return memory

    async def update(self, memory_id: str, content: str = None, metadata: Dict[str, Any] = None,
                     category: str = None, agent_id: str = None,
                     importance: float = None) -> Optional[Memory]:
        """
        Update a memory in place. Returns None if it does not exist.

        The embedding is regenerated only when the content actually changes,
        using whatever corpus model is current at that moment.
        """
        async with self._lock:
            self.index.ensure_initialized()
            record = await self.index.get(memory_id)
            if record is None:
                return None

            memory = Memory.from_attributes(record.id, record.vector, record.attributes)
            vector = np.asarray(record.vector, dtype=np.float64)

            content_changed = content is not None and content != memory.content
            if content_changed:
                memory.content = content
                if self.config.auto_embedding:
                    vector = await self._embed(content)
                    memory.embedding = vector.tolist()

            if metadata is not None:
                memory.metadata = dict(metadata)
            if category is not None:
                memory.category = category
            if agent_id is not None:
                memory.agent_id = agent_id
            if importance is not None:
                memory.importance = importance
            memory.updated_at = datetime.now()

            await self.index.upsert(self._record_for(memory, vector))
            if content_changed:
                self.corpus.mark_stale()

        logger.log_memory_operation("update", memory_id, {"content_changed": content_changed})
        return memory

    async def delete(self, memory_id: str) -> bool:
        """Remove a memory from the index. Returns False if it did not exist."""
        async with self._lock:
            self.index.ensure_initialized()
            removed = await self.index.delete(memory_id)
            if removed:
                self.corpus.mark_stale()

        logger.log_memory_operation("delete", memory_id, status="success" if removed else "not_found")
        return removed

    async def delete_memories_by_agent(self, agent_id: str) -> int:
        """Delete every memory owned by agent_id. Returns the number deleted."""
        async with self._lock:
            self.index.ensure_initialized()
            records = await self.index.scan(MemoryFilter(agent_id=agent_id))
            for record in records:
                await self.index.delete(record.id)
            if records:
                self.corpus.mark_stale()

        logger.log_memory_operation("delete_by_agent", agent_id, {"deleted": len(records)})
        return len(records)

    async def reindex(self) -> int:
        """
        Re-embed every stored memory with the current corpus model.

        Returns the number of memories re-embedded (0 when auto-embedding is off).
        """
        async with self._lock:
            self.index.ensure_initialized()
            if not self.config.auto_embedding:
                logger.warning("Reindex skipped: auto-embedding is disabled")
                return 0

            await self._refresh_corpus()
            records = await self.index.scan()
            for record in records:
                vector = self.embeddings.embed(record.attributes.get("content", ""))
                await self.index.upsert(VectorRecord(id=record.id, vector=vector, attributes=record.attributes))

        logger.log_operation("memory.reindex", "success", {"reembedded": len(records)})
        return len(records)

    # ── reads ──────────────────────────────────────────────────────────

    async def get_memory(self, memory_id: str) -> Optional[Memory]:
        self.index.ensure_initialized()
        record = await self.index.get(memory_id)
        if record is None:
            return None
        return Memory.from_attributes(record.id, record.vector, record.attributes)

    async def require_memory(self, memory_id: str) -> Memory:
        memory = await self.get_memory(memory_id)
        if memory is None:
            raise MemoryNotFound(memory_id)
        return memory

    async def list_memories(self, agent_id: str = None, category: str = None,
                            limit: int = None) -> List[Memory]:
        self.index.ensure_initialized()
        records = await self.index.scan(
            MemoryFilter(agent_id=agent_id, category=category),
            limit or LIST_DEFAULT_LIMIT,
        )
        return [Memory.from_attributes(r.id, r.vector, r.attributes) for r in records]

    async def search(self, query: Query, limit: int = None, threshold: float = None,
                     filter: MemoryFilter = None) -> SearchResponse:
        """
        Rank stored memories against a text or vector query.

        Results below `threshold` are dropped; an empty result is not an error
        and still carries corpus statistics so callers can judge coverage.
        """
        limit = limit if limit is not None else self.config.default_limit
        threshold = threshold if threshold is not None else self.config.default_threshold

        async with self._lock:
            self.index.ensure_initialized()
            if isinstance(query, str):
                vector = await self._embed(query)
            else:
                vector = self._check_vector(query)
                await self._refresh_corpus()

            hits = await self.index.query(vector, limit, filter)

        results = [
            SearchResult(
                memory=Memory.from_attributes(hit.id, hit.vector, hit.attributes),
                score=self.scorer.to_score(hit.distance),
                distance=hit.distance,
            )
            for hit in hits
        ]
        results = self.scorer.rank(self.scorer.filter(results, threshold))

        stats = self.corpus.stats()
        logger.log_search(len(results), threshold, limit, stats.quality if not results else None)
        return SearchResponse(results=results, corpus=stats)

    # ── public surface for the tool layer ──────────────────────────────

    async def create_memory(self, content: str, **attributes) -> Memory:
        """Validate input and create a memory."""
        data = CreateMemoryInput(content=content, **attributes)
        return await self.create(**data.model_dump())

    async def update_memory(self, memory_id: str, **updates) -> Optional[Memory]:
        """Validate input and update a memory."""
        data = UpdateMemoryInput(**updates)
        return await self.update(memory_id, **data.model_dump())

    async def search_memories(self, input: Union[SearchMemoryInput, Dict[str, Any]]) -> List[SearchResult]:
        """Validate a search request and return ranked, thresholded results."""
        if not isinstance(input, SearchMemoryInput):
            input = SearchMemoryInput(**input)

        memory_filter = MemoryFilter(
            agent_id=input.agent_id,
            category=input.category,
            min_importance=input.min_importance,
        )
        response = await self.search(
            input.query,
            limit=input.limit,
            threshold=input.threshold,
            filter=None if memory_filter.is_empty() else memory_filter,
        )
        return response.results

    def get_corpus_statistics(self) -> CorpusStats:
        return self.corpus.stats()

    async def get_statistics(self) -> Dict[str, Any]:
        """Memory counts by agent and category, age range and corpus quality."""
        memories = await self.list_memories()
        corpus_stats = self.get_corpus_statistics()

        stats: Dict[str, Any] = {
            "total_memories": len(memories),
            "memories_by_agent": {},
            "memories_by_category": {},
            "oldest_memory": None,
            "newest_memory": None,
            "corpus": {
                "size": corpus_stats.corpus_size,
                "quality": corpus_stats.quality,
                "recommendation": corpus_stats.recommendation,
            },
        }
        if not memories:
            return stats

        for memory in memories:
            agent = memory.agent_id or "unknown"
            stats["memories_by_agent"][agent] = stats["memories_by_agent"].get(agent, 0) + 1
            category = memory.category or "uncategorized"
            stats["memories_by_category"][category] = stats["memories_by_category"].get(category, 0) + 1

        stats["oldest_memory"] = min(m.created_at for m in memories).isoformat()
        stats["newest_memory"] = max(m.created_at for m in memories).isoformat()
        return stats

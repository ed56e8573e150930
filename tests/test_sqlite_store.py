"""
SQLite vector index tests: durability, legacy dimensions and backend failures.
"""

import asyncio

import numpy as np
import pytest

from agent_memories.core.db import health_check
from agent_memories.core.errors import IndexUnavailable
from agent_memories.vector.sqlite_store import SqliteVectorIndex
from agent_memories.vector.types import VectorRecord


def record(record_id, values, **attributes):
    attributes.setdefault("content", f"content of {record_id}")
    return VectorRecord(id=record_id, vector=np.array(values, dtype=np.float64), attributes=attributes)


@pytest.mark.asyncio
async def test_initialize_creates_schema(tmp_path):
    db_path = str(tmp_path / "nested" / "memories.db")
    index = SqliteVectorIndex(db_path, 3)

    await index.initialize()

    assert index.is_initialized is True
    assert health_check(db_path) is True


@pytest.mark.asyncio
async def test_records_survive_a_new_index_instance(tmp_path):
    db_path = str(tmp_path / "memories.db")
    first = SqliteVectorIndex(db_path, 3)
    await first.initialize()
    await first.insert(record(
        "m1", [0.1, 0.2, 0.3],
        metadata={"source": "chat", "tags": ["a", "b"]},
        created_at="2024-01-01T10:00:00",
        updated_at="2024-01-02T10:00:00",
        agent_id="agent-1",
        category="notes",
        importance=2.5,
    ))

    second = SqliteVectorIndex(db_path, 3)
    await second.initialize()
    stored = await second.get("m1")

    assert np.allclose(stored.vector, [0.1, 0.2, 0.3])
    assert stored.attributes == {
        "content": "content of m1",
        "metadata": {"source": "chat", "tags": ["a", "b"]},
        "created_at": "2024-01-01T10:00:00",
        "updated_at": "2024-01-02T10:00:00",
        "agent_id": "agent-1",
        "category": "notes",
        "importance": 2.5,
    }


@pytest.mark.asyncio
async def test_vectors_keep_float64_precision(tmp_path):
    index = SqliteVectorIndex(str(tmp_path / "memories.db"), 2)
    await index.initialize()
    value = 1 / 3
    await index.insert(record("m1", [value, -value]))

    stored = await index.get("m1")

    assert stored.vector[0] == value
    assert stored.vector.dtype == np.float64


@pytest.mark.asyncio
async def test_legacy_dimension_is_padded_on_read(tmp_path):
    db_path = str(tmp_path / "memories.db")
    old = SqliteVectorIndex(db_path, 2)
    await old.initialize()
    await old.insert(record("m1", [1.0, 2.0]))

    current = SqliteVectorIndex(db_path, 4)
    await current.initialize()
    stored = await current.get("m1")

    assert np.array_equal(stored.vector, [1.0, 2.0, 0.0, 0.0])
    results = await current.query(np.array([1.0, 2.0, 0.0, 0.0]), 1)
    assert results[0].id == "m1"
    assert results[0].distance == pytest.approx(0.0)


@pytest.mark.asyncio
async def test_legacy_dimension_is_truncated_on_read(tmp_path):
    db_path = str(tmp_path / "memories.db")
    old = SqliteVectorIndex(db_path, 3)
    await old.initialize()
    await old.insert(record("m1", [1.0, 2.0, 3.0]))

    current = SqliteVectorIndex(db_path, 1)
    await current.initialize()

    assert np.array_equal((await current.get("m1")).vector, [1.0])


@pytest.mark.asyncio
async def test_reinserting_an_id_replaces_the_row(tmp_path):
    index = SqliteVectorIndex(str(tmp_path / "memories.db"), 2)
    await index.initialize()
    await index.insert(record("m1", [1.0, 0.0]))
    await index.insert(record("m2", [0.0, 1.0]))
    await index.insert(record("m1", [0.5, 0.5], content="second version"))

    assert await index.count() == 2
    assert [r.id for r in await index.scan()] == ["m2", "m1"]
    assert (await index.get("m1")).attributes["content"] == "second version"


@pytest.mark.asyncio
async def test_failed_upsert_keeps_previous_row(tmp_path):
    index = SqliteVectorIndex(str(tmp_path / "memories.db"), 2)
    await index.initialize()
    await index.insert(record("m1", [1.0, 0.0]))

    # Metadata that cannot be serialised fails the write
    with pytest.raises(TypeError):
        await index.upsert(record("m1", [0.0, 1.0], metadata={"bad": object()}))

    stored = await index.get("m1")
    assert stored is not None
    assert np.array_equal(stored.vector, [1.0, 0.0])


@pytest.mark.asyncio
async def test_upsert_is_never_observed_half_done(tmp_path):
    index = SqliteVectorIndex(str(tmp_path / "memories.db"), 2)
    await index.initialize()
    await index.insert(record("a", [1.0, 0.0]))
    missing = []

    async def read():
        for _ in range(100):
            missing.append(await index.get("a") is None)

    async def write():
        for i in range(30):
            await index.upsert(record("a", [float(i), 1.0]))

    await asyncio.gather(read(), write())

    assert not any(missing)
    assert await index.count() == 1
    assert np.array_equal((await index.get("a")).vector, [29.0, 1.0])


@pytest.mark.asyncio
async def test_unopenable_database_raises_index_unavailable(tmp_path):
    # A directory cannot be opened as a database file
    index = SqliteVectorIndex(str(tmp_path), 2)

    with pytest.raises(IndexUnavailable):
        await index.initialize()
    assert index.is_initialized is False


def test_health_check_without_schema(tmp_path):
    assert health_check(str(tmp_path / "empty.db")) is False


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

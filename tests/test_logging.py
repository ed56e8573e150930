"""
Structured logging tests: payload redaction and operation records.
"""

import logging

import numpy as np
import pytest

from agent_memories.util.logging import StructuredLogger, sanitize_payload
from agent_memories.vector.corpus import CorpusManager, Document
from agent_memories.vector.index import InMemoryVectorIndex
from agent_memories.vector.types import VectorRecord


def test_sanitize_redacts_sensitive_fields():
    payload = {"memory_id": "m1", "content": "secret note", "nested": {"query": "who am i"}}

    sanitized = sanitize_payload(payload)

    assert sanitized == {"memory_id": "m1", "content": "[REDACTED]", "nested": {"query": "[REDACTED]"}}
    assert sanitize_payload(payload, reveal_sensitive=True) == payload


def test_sanitize_truncates_long_strings():
    sanitized = sanitize_payload({"note": "x" * 150})
    assert sanitized["note"] == "x" * 100 + "..."


def test_memory_operation_log_omits_content(caplog):
    structured = StructuredLogger("agent_memories.test")
    caplog.set_level(logging.INFO, logger="agent_memories.test")

    structured.log_memory_operation("create", "m1", {"content": "private", "category": "work"})

    assert "memory.create" in caplog.text
    assert "private" not in caplog.text
    assert "work" in caplog.text


def test_retrain_is_logged(caplog):
    caplog.set_level(logging.INFO, logger="agent_memories")

    CorpusManager().initialize([Document(id="d1", text="alpha beta")])

    assert "corpus.retrain" in caplog.text
    assert "'corpus_size': 1" in caplog.text


@pytest.mark.asyncio
async def test_vector_operations_log_at_debug(caplog):
    index = InMemoryVectorIndex(2)
    await index.initialize()

    caplog.set_level(logging.INFO, logger="agent_memories")
    await index.insert(VectorRecord(id="quiet", vector=np.ones(2), attributes={}))
    assert "vector.insert" not in caplog.text

    caplog.set_level(logging.DEBUG, logger="agent_memories")
    await index.insert(VectorRecord(id="loud", vector=np.ones(2), attributes={}))
    assert "vector.insert" in caplog.text


def test_set_debug_toggles_level():
    structured = StructuredLogger("agent_memories.toggle")

    structured.set_debug(True)
    assert structured.logger.level == logging.DEBUG
    structured.set_debug(False)
    assert structured.logger.level == logging.INFO


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

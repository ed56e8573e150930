"""
Configuration tests: environment overrides, validation and backend selection.
"""

import pytest

from agent_memories.core.config import (
    MemoryConfig,
    debug_enabled,
    get_memory_config,
    get_vector_index,
    validate_memory_config,
)
from agent_memories.vector.index import InMemoryVectorIndex
from agent_memories.vector.sqlite_store import SqliteVectorIndex

ENV_VARS = [
    "EMBED_DIM",
    "SEARCH_DEFAULT_THRESHOLD",
    "SEARCH_DEFAULT_LIMIT",
    "AUTO_EMBEDDING",
    "SCORE_DECAY_FACTOR",
    "SVD_MIN_DOCUMENTS",
    "VECTOR_PROVIDER",
    "DB_PATH",
    "DEBUG",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = get_memory_config()

    assert config == MemoryConfig()
    assert config.embedding_dimension == 200
    assert config.default_threshold == 0.3
    assert config.default_limit == 10
    assert config.auto_embedding is True
    assert config.decay_factor == 1.0
    assert config.svd_min_documents == 50
    assert validate_memory_config() == []


def test_environment_overrides_are_read_at_call_time(monkeypatch):
    monkeypatch.setenv("EMBED_DIM", "64")
    monkeypatch.setenv("SEARCH_DEFAULT_THRESHOLD", "0.5")
    monkeypatch.setenv("SEARCH_DEFAULT_LIMIT", "25")
    monkeypatch.setenv("AUTO_EMBEDDING", "FALSE")
    monkeypatch.setenv("SCORE_DECAY_FACTOR", "2.5")
    monkeypatch.setenv("SVD_MIN_DOCUMENTS", "10")

    config = get_memory_config()

    assert config == MemoryConfig(
        embedding_dimension=64,
        default_threshold=0.5,
        default_limit=25,
        auto_embedding=False,
        decay_factor=2.5,
        svd_min_documents=10,
    )


@pytest.mark.parametrize("config,fragment", [
    (MemoryConfig(embedding_dimension=0), "EMBED_DIM"),
    (MemoryConfig(default_threshold=1.5), "SEARCH_DEFAULT_THRESHOLD"),
    (MemoryConfig(default_limit=0), "SEARCH_DEFAULT_LIMIT"),
    (MemoryConfig(decay_factor=0), "SCORE_DECAY_FACTOR"),
    (MemoryConfig(svd_min_documents=0), "SVD_MIN_DOCUMENTS"),
])
def test_validation_reports_bad_values(config, fragment):
    issues = validate_memory_config(config)

    assert len(issues) == 1
    assert fragment in issues[0]


def test_validation_reports_unknown_provider(monkeypatch):
    monkeypatch.setenv("VECTOR_PROVIDER", "redis")
    assert any("VECTOR_PROVIDER" in issue for issue in validate_memory_config())


def test_memory_provider_is_default():
    index = get_vector_index(MemoryConfig(embedding_dimension=32))

    assert isinstance(index, InMemoryVectorIndex)
    assert index.dimension == 32


def test_sqlite_provider_uses_db_path(monkeypatch, tmp_path):
    db_path = str(tmp_path / "memories.db")
    monkeypatch.setenv("VECTOR_PROVIDER", "sqlite")
    monkeypatch.setenv("DB_PATH", db_path)

    index = get_vector_index()

    assert isinstance(index, SqliteVectorIndex)
    assert index.db_path == db_path
    assert index.dimension == 200


def test_faiss_provider(monkeypatch):
    pytest.importorskip("faiss")
    from agent_memories.vector.faiss_store import FaissVectorIndex
    monkeypatch.setenv("VECTOR_PROVIDER", "FAISS")

    assert isinstance(get_vector_index(), FaissVectorIndex)


def test_invalid_provider_raises(monkeypatch):
    monkeypatch.setenv("VECTOR_PROVIDER", "redis")

    with pytest.raises(ValueError, match="Invalid VECTOR_PROVIDER"):
        get_vector_index()


def test_package_version_matches_config():
    import agent_memories
    from agent_memories.core.config import VERSION

    assert agent_memories.__version__ == VERSION == "1.0.0"


def test_debug_flag(monkeypatch):
    assert debug_enabled() is False
    monkeypatch.setenv("DEBUG", "true")
    assert debug_enabled() is True


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

"""
Memory store configuration.
All options come from the environment; accessor functions re-read it at call time.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List

# Embedding and search defaults
EMBED_DIM = int(os.getenv("EMBED_DIM", "200"))
SEARCH_DEFAULT_THRESHOLD = float(os.getenv("SEARCH_DEFAULT_THRESHOLD", "0.3"))
SEARCH_DEFAULT_LIMIT = int(os.getenv("SEARCH_DEFAULT_LIMIT", "10"))
AUTO_EMBEDDING = os.getenv("AUTO_EMBEDDING", "true").lower() == "true"

# Latent model tuning
SCORE_DECAY_FACTOR = float(os.getenv("SCORE_DECAY_FACTOR", "1.0"))
SVD_MIN_DOCUMENTS = int(os.getenv("SVD_MIN_DOCUMENTS", "50"))

# Vector index backend
VECTOR_PROVIDER = os.getenv("VECTOR_PROVIDER", "memory")  # memory|sqlite|faiss
DB_PATH = os.getenv("DB_PATH", "./data/memories.db")

# Debug flag
DEBUG = os.getenv("DEBUG", "false").lower() == "true"

# Upper bound for non-similarity listing
LIST_DEFAULT_LIMIT = 1000

VERSION = "1.0.0"


@dataclass
class MemoryConfig:
    """Options recognised by the memory repository and embedding service."""

    embedding_dimension: int = 200
    default_threshold: float = 0.3
    default_limit: int = 10
    auto_embedding: bool = True
    decay_factor: float = 1.0
    svd_min_documents: int = 50


def get_memory_config() -> MemoryConfig:
    """Build a MemoryConfig from the current environment."""
    return MemoryConfig(
        embedding_dimension=int(os.getenv("EMBED_DIM", str(EMBED_DIM))),
        default_threshold=float(os.getenv("SEARCH_DEFAULT_THRESHOLD", str(SEARCH_DEFAULT_THRESHOLD))),
        default_limit=int(os.getenv("SEARCH_DEFAULT_LIMIT", str(SEARCH_DEFAULT_LIMIT))),
        auto_embedding=os.getenv("AUTO_EMBEDDING", "true" if AUTO_EMBEDDING else "false").lower() == "true",
        decay_factor=float(os.getenv("SCORE_DECAY_FACTOR", str(SCORE_DECAY_FACTOR))),
        svd_min_documents=int(os.getenv("SVD_MIN_DOCUMENTS", str(SVD_MIN_DOCUMENTS))),
    )


def get_vector_provider() -> str:
    """Get configured vector index provider (memory|sqlite|faiss)."""
    return os.getenv("VECTOR_PROVIDER", VECTOR_PROVIDER).lower()


def get_db_path() -> str:
    """Get the SQLite path used by the sqlite index provider."""
    return os.getenv("DB_PATH", DB_PATH)


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "false").lower() == "true"


def ensure_db_directory(db_path: str = None):
    """Ensure the database directory exists."""
    Path(db_path or get_db_path()).parent.mkdir(parents=True, exist_ok=True)


def get_vector_index(config: MemoryConfig = None):
    """Get configured vector index implementation."""
    config = config or get_memory_config()
    provider = get_vector_provider()

    if provider == "memory":
        from ..vector.index import InMemoryVectorIndex
        return InMemoryVectorIndex(config.embedding_dimension)
    elif provider == "sqlite":
        from ..vector.sqlite_store import SqliteVectorIndex
        return SqliteVectorIndex(get_db_path(), config.embedding_dimension)
    elif provider == "faiss":
        from ..vector.faiss_store import FaissVectorIndex
        return FaissVectorIndex(config.embedding_dimension)
    else:
        raise ValueError(f"Invalid VECTOR_PROVIDER: {provider}")


def validate_memory_config(config: MemoryConfig = None) -> List[str]:
    """Validate memory configuration and return any issues."""
    config = config or get_memory_config()
    issues = []

    if config.embedding_dimension < 1:
        issues.append("EMBED_DIM must be >= 1")

    if not 0.0 <= config.default_threshold <= 1.0:
        issues.append(f"SEARCH_DEFAULT_THRESHOLD must be within [0, 1]: {config.default_threshold}")

    if config.default_limit < 1:
        issues.append("SEARCH_DEFAULT_LIMIT must be >= 1")

    if config.decay_factor <= 0:
        issues.append("SCORE_DECAY_FACTOR must be > 0")

    if config.svd_min_documents < 1:
        issues.append("SVD_MIN_DOCUMENTS must be >= 1")

    if get_vector_provider() not in ["memory", "sqlite", "faiss"]:
        issues.append(f"Invalid VECTOR_PROVIDER: {get_vector_provider()}")

    return issues

"""
Agent memories: a persistent memory store with TF-IDF + LSA semantic retrieval.
"""

from .core.config import VERSION, MemoryConfig, get_memory_config
from .core.errors import (
    DecompositionFailure,
    DimensionMismatch,
    EmptyCorpusError,
    IndexUnavailable,
    MemoryNotFound,
    MemoryStoreError,
    StorageNotInitialized,
)
from .core.repository import MemoryRepository
from .core.schema import Memory, SearchResponse, SearchResult

__version__ = VERSION

__all__ = [
    'MemoryConfig',
    'get_memory_config',
    'DecompositionFailure',
    'DimensionMismatch',
    'EmptyCorpusError',
    'IndexUnavailable',
    'MemoryNotFound',
    'MemoryStoreError',
    'StorageNotInitialized',
    'MemoryRepository',
    'Memory',
    'SearchResponse',
    'SearchResult'
]

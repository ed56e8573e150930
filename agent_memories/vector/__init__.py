"""
Semantic embedding and retrieval engine: TF-IDF, LSA projection, corpus
management, similarity scoring and vector index backends.
"""

from .corpus import CorpusManager, CorpusState, CorpusStats, Document
from .embeddings import IEmbeddingProvider, LsaEmbeddingService, PositionalHashEmbedding
from .faiss_store import FaissVectorIndex
from .index import InMemoryVectorIndex, IVectorIndex
from .projector import ILatentProjector, LatentBasis, SvdProjector
from .scoring import SimilarityScorer
from .sqlite_store import SqliteVectorIndex
from .tfidf import TfIdfModel, TfIdfVectorizer, tokenize
from .types import MemoryFilter, QueryResult, VectorRecord

__all__ = [
    'CorpusManager',
    'CorpusState',
    'CorpusStats',
    'Document',
    'IEmbeddingProvider',
    'LsaEmbeddingService',
    'PositionalHashEmbedding',
    'FaissVectorIndex',
    'InMemoryVectorIndex',
    'IVectorIndex',
    'ILatentProjector',
    'LatentBasis',
    'SvdProjector',
    'SimilarityScorer',
    'SqliteVectorIndex',
    'TfIdfModel',
    'TfIdfVectorizer',
    'tokenize',
    'MemoryFilter',
    'QueryResult',
    'VectorRecord'
]

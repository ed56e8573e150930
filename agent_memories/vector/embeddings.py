"""
Text embeddings: TF-IDF + LSA vectors over the live memory corpus.
Every vector leaves this module with exactly `dimension` entries and unit L2 norm
(or all zeros for text with no weight).
"""

from abc import ABC, abstractmethod

import numpy as np

from .corpus import CorpusManager, Document
from .tfidf import tokenize

BOOTSTRAP_DOCUMENT_ID = "__bootstrap__"


class IEmbeddingProvider(ABC):
    """Abstract interface for embedding providers."""

    @abstractmethod
    def embed_text(self, text: str) -> list[float]:
        """Generate embedding vector for given text."""
        pass

    @abstractmethod
    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        pass


def fit_to_dimension(vector: np.ndarray, dimension: int) -> np.ndarray:
    """Zero-pad or truncate to exactly `dimension` entries."""
    if len(vector) < dimension:
        return np.concatenate([vector, np.zeros(dimension - len(vector), dtype=np.float64)])
    return vector[:dimension]


def l2_normalize(vector: np.ndarray) -> np.ndarray:
    """Scale to unit length; a zero vector is returned unchanged."""
    norm = np.linalg.norm(vector)
    if norm == 0:
        return vector
    return vector / norm


class PositionalHashEmbedding(IEmbeddingProvider):
    """Bag-of-positions embedding used before any corpus exists.

    The i-th word adds 1.0 to slot i % dimension. Deterministic and
    model-free, so it can embed the very first memory.
    """

    def __init__(self, dimension: int = 200):
        self.dimension = dimension

    def embed(self, text: str) -> np.ndarray:
        vector = np.zeros(self.dimension, dtype=np.float64)
        for position, _ in enumerate(tokenize(text)):
            vector[position % self.dimension] += 1.0
        return l2_normalize(vector)

    def embed_text(self, text: str) -> list[float]:
        return self.embed(text).tolist()

    def get_dimension(self) -> int:
        return self.dimension


class LsaEmbeddingService(IEmbeddingProvider):
    """
    Embeds text against the corpus model held by a CorpusManager.

    The service never retrains on its own; callers refresh the corpus first.
    The only exception is the bootstrap path, which seeds an empty manager
    with the text being embedded and leaves it stale.
    """

    def __init__(self, corpus: CorpusManager = None, dimension: int = 200, auto_embedding: bool = True):
        """
        Args:
            corpus: Corpus model to embed against
            dimension: Output vector length (targetDim)
            auto_embedding: When False every embedding is the zero vector
        """
        self.corpus = corpus or CorpusManager()
        self.dimension = dimension
        self.auto_embedding = auto_embedding
        self.bootstrap = PositionalHashEmbedding(dimension)

    def zero_vector(self) -> np.ndarray:
        return np.zeros(self.dimension, dtype=np.float64)

    def embed(self, text: str) -> np.ndarray:
        """Generate one fixed-length unit vector for text."""
        if not self.auto_embedding:
            return self.zero_vector()

        if not self.corpus.is_initialized:
            self.corpus.initialize([Document(id=BOOTSTRAP_DOCUMENT_ID, text=text)])
            self.corpus.mark_stale()
            return self.bootstrap.embed(text)

        term_weights = self.corpus.vectorize(text)
        basis = self.corpus.basis
        if basis is not None:
            vector = basis.project(term_weights, self.dimension)
        else:
            vector = term_weights

        return l2_normalize(fit_to_dimension(vector, self.dimension))

    def embed_texts(self, texts: list[str]) -> np.ndarray:
        """
        Embed multiple texts into vectors.

        Returns:
            Numpy array of shape (len(texts), dimension)
        """
        if not texts:
            return np.zeros((0, self.dimension), dtype=np.float64)
        return np.vstack([self.embed(text) for text in texts])

    def embed_text(self, text: str) -> list[float]:
        return self.embed(text).tolist()

    def get_dimension(self) -> int:
        return self.dimension

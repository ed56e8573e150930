"""
Corpus model ownership: vocabulary, TF-IDF matrix, latent basis and staleness.

Retraining is lazy. Writers call mark_stale(); the next embedding request
calls refresh_if_stale() with the full current document set.
"""

import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np

from ..core.errors import EmptyCorpusError
from ..util.logging import logger
from .projector import ILatentProjector, LatentBasis, SvdProjector
from .tfidf import TfIdfModel, TfIdfVectorizer

# (upper bound exclusive, tier, recommendation)
QUALITY_TIERS = [
    (5, "minimal", "Add more memories (5+ recommended) for basic semantic understanding"),
    (10, "basic", "Add more memories (10+ recommended) for meaningful semantic relationships"),
    (20, "good", "Good corpus size. Consider adding more memories (20+) for optimal topic discovery"),
    (50, "optimal", "Excellent corpus size for semantic understanding"),
]
EXCELLENT_TIER = ("excellent", "Large corpus provides robust semantic understanding")


@dataclass
class Document:
    """Unit of corpus training: one memory's content."""

    id: str
    text: str


@dataclass
class CorpusState:
    """Trained model snapshot. Owned by exactly one CorpusManager."""

    documents: List[Document] = field(default_factory=list)
    model: Optional[TfIdfModel] = None
    basis: Optional[LatentBasis] = None
    stale: bool = True

    @property
    def is_initialized(self) -> bool:
        return self.model is not None


@dataclass
class CorpusStats:
    """Corpus size and a qualitative retrieval-quality tier."""

    corpus_size: int
    vocabulary_size: int
    is_initialized: bool
    has_latent_basis: bool
    stale: bool
    quality: str
    recommendation: str

    def to_dict(self) -> dict:
        return {
            "corpus_size": self.corpus_size,
            "vocabulary_size": self.vocabulary_size,
            "is_initialized": self.is_initialized,
            "has_latent_basis": self.has_latent_basis,
            "stale": self.stale,
            "quality": self.quality,
            "recommendation": self.recommendation,
        }


def assess_quality(corpus_size: int):
    """Map a corpus size onto (tier, recommendation)."""
    for upper, tier, recommendation in QUALITY_TIERS:
        if corpus_size < upper:
            return tier, recommendation
    return EXCELLENT_TIER


class CorpusManager:
    """
    Owns one CorpusState and rebuilds it from scratch on every retrain.

    Vocabulary and IDF values are never patched in place; a retrain always
    recomputes them from the full document set.
    """

    def __init__(self, vectorizer: TfIdfVectorizer = None, projector: ILatentProjector = None,
                 state: CorpusState = None):
        self.vectorizer = vectorizer or TfIdfVectorizer()
        self.projector = projector or SvdProjector()
        self.state = state or CorpusState()

    @property
    def is_initialized(self) -> bool:
        return self.state.is_initialized

    @property
    def stale(self) -> bool:
        return self.state.stale

    @property
    def basis(self) -> Optional[LatentBasis]:
        return self.state.basis

    def initialize(self, documents: Sequence[Document]) -> CorpusState:
        """
        Full rebuild of vocabulary, TF-IDF matrix and latent basis.

        Raises:
            EmptyCorpusError: if documents is empty
        """
        if not documents:
            raise EmptyCorpusError()

        started = time.perf_counter()
        documents = list(documents)
        model = self.vectorizer.compute([doc.text for doc in documents])
        basis = self.projector.project(model.matrix)

        self.state = CorpusState(documents=documents, model=model, basis=basis, stale=False)
        logger.log_corpus_retrain(
            corpus_size=len(documents),
            vocabulary_size=model.vocabulary_size,
            has_basis=basis is not None,
            duration_ms=(time.perf_counter() - started) * 1000,
        )
        return self.state

    def mark_stale(self) -> None:
        """Flag the model as out of date with the document set."""
        self.state.stale = True

    def refresh_if_stale(self, documents: Sequence[Document]) -> bool:
        """Retrain when stale. Returns True if a retrain happened."""
        if not self.state.stale:
            return False

        self.initialize(documents)
        return True

    def vectorize(self, text: str) -> np.ndarray:
        """TF-IDF weights for text against the current model (N + 1 semantics)."""
        if self.state.model is None:
            raise EmptyCorpusError("Corpus has not been initialized")
        return self.vectorizer.vectorize(text, self.state.model)

    def stats(self) -> CorpusStats:
        size = len(self.state.documents)
        quality, recommendation = assess_quality(size)
        return CorpusStats(
            corpus_size=size,
            vocabulary_size=self.state.model.vocabulary_size if self.state.model else 0,
            is_initialized=self.state.is_initialized,
            has_latent_basis=self.state.basis is not None,
            stale=self.state.stale,
            quality=quality,
            recommendation=recommendation,
        )

"""
Latent semantic projection (LSA) over a TF-IDF matrix.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..core.errors import DecompositionFailure
from ..util.logging import logger


@dataclass
class LatentBasis:
    """Left singular vectors of the transposed TF-IDF matrix."""

    u: np.ndarray
    """Projection basis, |vocabulary| x k"""

    singular_values: np.ndarray
    """Singular values in descending order, length k"""

    @property
    def vocabulary_size(self) -> int:
        return self.u.shape[0]

    @property
    def n_components(self) -> int:
        return self.u.shape[1]

    def project(self, term_weights: np.ndarray, target_dim: int) -> np.ndarray:
        """
        Project a term-weight vector into min(target_dim, k) latent coordinates.

        Entries past the basis' vocabulary (terms unseen at training time) are ignored.
        """
        n_components = min(target_dim, self.n_components)
        rows = min(len(term_weights), self.vocabulary_size)
        return term_weights[:rows] @ self.u[:rows, :n_components]


def flip_signs(u: np.ndarray) -> np.ndarray:
    """
    Make the largest-magnitude entry of every column positive.

    Singular vectors are only defined up to sign; fixing it keeps the same
    latent axis pointing the same way across retrains.
    """
    if u.size == 0:
        return u
    pivots = np.argmax(np.abs(u), axis=0)
    signs = np.sign(u[pivots, np.arange(u.shape[1])])
    signs[signs == 0] = 1.0
    return u * signs


class ILatentProjector(ABC):
    """Abstract interface for latent space projectors."""

    @abstractmethod
    def project(self, tfidf_matrix: np.ndarray) -> Optional[LatentBasis]:
        """Derive a basis from an N x |V| matrix, or None to fall back to raw TF-IDF."""
        pass


class SvdProjector(ILatentProjector):
    """Truncated-SVD projector with a raw TF-IDF fallback for thin corpora."""

    def __init__(self, min_documents: int = 50):
        """
        Args:
            min_documents: Cap on the document count required before decomposing.
                A matrix is decomposed only when N >= min(|V|, min_documents).
        """
        self.min_documents = min_documents

    def has_enough_data(self, tfidf_matrix: np.ndarray) -> bool:
        n_documents, vocabulary_size = tfidf_matrix.shape
        if n_documents == 0 or vocabulary_size == 0:
            return False
        return n_documents >= min(vocabulary_size, self.min_documents)

    def decompose(self, tfidf_matrix: np.ndarray) -> LatentBasis:
        """Run SVD on the transposed matrix. Raises DecompositionFailure."""
        try:
            u, s, _ = np.linalg.svd(tfidf_matrix.T, full_matrices=False)
        except (np.linalg.LinAlgError, ValueError) as e:
            raise DecompositionFailure(str(e)) from e

        if not (np.all(np.isfinite(u)) and np.all(np.isfinite(s))):
            raise DecompositionFailure("SVD produced non-finite values")

        return LatentBasis(u=flip_signs(u), singular_values=s)

    def project(self, tfidf_matrix: np.ndarray) -> Optional[LatentBasis]:
        if not self.has_enough_data(tfidf_matrix):
            return None

        try:
            return self.decompose(tfidf_matrix)
        except DecompositionFailure as e:
            rows, columns = tfidf_matrix.shape
            logger.log_decomposition_failure(rows, columns, e)
            return None

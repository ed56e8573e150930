"""
Distance to relevance conversion.
"""

import math
from typing import Callable, List, Sequence, TypeVar

T = TypeVar("T")


class SimilarityScorer:
    """Maps non-negative distances onto (0, 1] with score = exp(-distance * decay)."""

    def __init__(self, decay_factor: float = 1.0):
        if decay_factor <= 0:
            raise ValueError("decay_factor must be positive")
        self.decay_factor = decay_factor

    def to_score(self, distance: float) -> float:
        return math.exp(-max(distance, 0.0) * self.decay_factor)

    def filter(self, results: Sequence[T], threshold: float,
               score_of: Callable[[T], float] = lambda r: r.score) -> List[T]:
        """Keep results scoring at least `threshold`, preserving input order."""
        return [result for result in results if score_of(result) >= threshold]

    def rank(self, results: Sequence[T]) -> List[T]:
        """Descending score, then ascending distance; stable for full ties."""
        return sorted(results, key=lambda r: (-r.score, r.distance))

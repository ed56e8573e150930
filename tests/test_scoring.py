"""
Similarity scoring tests: distance to score mapping, threshold filter and ranking.
"""

import math
from dataclasses import dataclass

import pytest

from agent_memories.vector.scoring import SimilarityScorer


@dataclass
class Hit:
    name: str
    score: float
    distance: float


def test_zero_distance_scores_one():
    assert SimilarityScorer().to_score(0.0) == 1.0


@pytest.mark.parametrize("distance", [0.1, 0.5, 1.0, 1.4142, 2.0])
def test_score_is_exp_of_negative_distance(distance):
    assert SimilarityScorer().to_score(distance) == pytest.approx(math.exp(-distance))


def test_score_decreases_with_distance():
    scorer = SimilarityScorer()
    scores = [scorer.to_score(d) for d in (0.0, 0.3, 0.9, 1.5, 2.0)]

    assert scores == sorted(scores, reverse=True)
    assert all(0 < score <= 1 for score in scores)


def test_decay_factor_sharpens_scores():
    assert SimilarityScorer(decay_factor=2.0).to_score(1.0) == pytest.approx(math.exp(-2.0))


@pytest.mark.parametrize("decay", [0.0, -1.0])
def test_non_positive_decay_is_rejected(decay):
    with pytest.raises(ValueError):
        SimilarityScorer(decay_factor=decay)


def test_negative_distance_is_clamped():
    assert SimilarityScorer().to_score(-1e-9) == 1.0


def test_filter_keeps_scores_at_or_above_threshold():
    hits = [Hit("a", 0.9, 0.1), Hit("b", 0.3, 1.2), Hit("c", 0.29, 1.24)]

    kept = SimilarityScorer().filter(hits, 0.3)

    assert [hit.name for hit in kept] == ["a", "b"]


def test_filter_with_zero_threshold_keeps_everything():
    hits = [Hit("a", 0.01, 4.6), Hit("b", 0.5, 0.7)]
    assert SimilarityScorer().filter(hits, 0.0) == hits


def test_filter_accepts_custom_score_accessor():
    pairs = [("a", 0.8), ("b", 0.2)]
    kept = SimilarityScorer().filter(pairs, 0.5, score_of=lambda pair: pair[1])
    assert kept == [("a", 0.8)]


def test_rank_orders_by_score_then_distance():
    hits = [
        Hit("low", 0.2, 1.6),
        Hit("tie-far", 0.7, 0.4),
        Hit("high", 0.9, 0.1),
        Hit("tie-near", 0.7, 0.3),
    ]

    ranked = SimilarityScorer().rank(hits)

    assert [hit.name for hit in ranked] == ["high", "tie-near", "tie-far", "low"]


def test_rank_is_stable_for_full_ties():
    hits = [Hit("first", 0.5, 0.7), Hit("second", 0.5, 0.7), Hit("third", 0.5, 0.7)]
    assert [hit.name for hit in SimilarityScorer().rank(hits)] == ["first", "second", "third"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

# scoring package
"""Deterministic candidate-to-job scoring."""

from talentmatch.scoring.match_scorer import (
    MatchScorer,
    ScoringWeights,
    compute_matches,
    round_half_up,
)

__all__ = [
    "MatchScorer",
    "ScoringWeights",
    "compute_matches",
    "round_half_up",
]

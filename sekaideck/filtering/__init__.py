"""Candidate pool filtering before deck search."""

from sekaideck.filtering.candidate_pool import CandidatePoolMetrics, build_candidate_pool
from sekaideck.filtering.dominance import covers, dominates, drop_dominated_cards

__all__ = [
    "CandidatePoolMetrics",
    "build_candidate_pool",
    "covers",
    "dominates",
    "drop_dominated_cards",
]

"""Job/candidate matching, scoring and ranking.

RankingEngine and ApplicationScorer depend on the persistence layer and are
imported from their modules directly.
"""
from .aggregator import ScoreAggregator
from .filters import is_eligible
from .types import CandidateMatch, CandidateProfile, JobMatch, JobPosting, ScoreBreakdown
from .weights import MatchingConfig, ScoringWeights, load_matching_config

__all__ = [
    "ScoreAggregator",
    "is_eligible",
    "CandidateMatch",
    "CandidateProfile",
    "JobMatch",
    "JobPosting",
    "ScoreBreakdown",
    "MatchingConfig",
    "ScoringWeights",
    "load_matching_config",
]

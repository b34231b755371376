"""Weighted aggregation of the five sub-scores."""
from datetime import datetime
from typing import Optional

from src.matching.availability import availability_score
from src.matching.geo import location_score
from src.matching.scoring import candidate_years, experience_score, preferences_score, skills_score
from src.matching.types import CandidateProfile, JobPosting, ScoreBreakdown
from src.matching.utils import clamp_score, round_half_up
from src.matching.weights import ScoringWeights


class ScoreAggregator:
    """Score (job, candidate) pairs with a fixed weight vector.

    Stateless apart from the weights, so one instance can be shared across
    concurrent ranking calls.
    """

    def __init__(self, weights: Optional[ScoringWeights] = None):
        self.weights = weights or ScoringWeights()

    def total(
        self,
        skills: int,
        experience: int,
        location: int,
        availability: int,
        preferences: int,
    ) -> int:
        """Combine sub-scores into a 0-100 total, rounded half-up."""
        w = self.weights
        weighted = (
            skills * w.skills
            + experience * w.experience
            + location * w.location
            + availability * w.availability
            + preferences * w.preferences
        )
        return clamp_score(round_half_up(weighted))

    def score_pair(
        self,
        job: JobPosting,
        candidate: CandidateProfile,
        now: Optional[datetime] = None,
    ) -> ScoreBreakdown:
        """Run all five scorers for one pair and aggregate them."""
        skills = skills_score(candidate.skills, job.skills_required)
        experience = experience_score(candidate_years(candidate, now=now), job.experience_level)
        location = location_score(candidate.location, job.location, job.remote_option)
        availability = availability_score(candidate.availability, job.availability)
        preferences = preferences_score(candidate, job)

        return ScoreBreakdown(
            skills=skills,
            experience=experience,
            location=location,
            availability=availability,
            preferences=preferences,
            total=self.total(skills, experience, location, availability, preferences),
        )

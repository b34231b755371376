"""Skill, experience and preference sub-scores.

Every scorer returns an integer on 0-100. Missing data scores neutral (50)
or full credit where the job states no constraint; those values are product
decisions and are kept exactly as listed below.
"""
import logging
from datetime import date, datetime, time
from typing import Optional, Sequence

from dateutil import parser as dateutil_parser

from src.matching.exceptions import InvalidInputError
from src.matching.types import CandidateProfile, DateLike, ExperienceEntry, JobPosting
from src.matching.utils import normalize_term, normalized_set, round_half_up

logger = logging.getLogger(__name__)

# Years of experience required per job level; unknown levels count as entry
EXPERIENCE_LEVEL_YEARS = {
    "entry": 0,
    "mid": 2,
    "senior": 5,
}

NEUTRAL_SCORE = 50

# Salary part
SALARY_BELOW_RANGE_SCORE = 100
SALARY_IN_RANGE_SCORE = 90
SALARY_ABOVE_RANGE_SCORE = 0

# Industry part
INDUSTRY_MATCH_SCORE = 100

# Remote part (only used when the job is remote)
REMOTE_ACCEPTED_SCORE = 100
REMOTE_DECLINED_SCORE = 0
REMOTE_UNSPECIFIED_SCORE = 70


# =============================================================================
# SKILLS
# =============================================================================


def skills_score(
    candidate_skills: Sequence[str] | None,
    required_skills: Sequence[str] | None,
) -> int:
    """
    Score the share of required skills the candidate has.

    Args:
        candidate_skills: Candidate's skills (any case, surrounding spaces ignored)
        required_skills: Skills the job asks for

    Returns:
        100 when the job requires nothing, 0 when the candidate lists no
        skills, otherwise round(matched / required * 100)
    """
    if not required_skills:
        return 100
    if not candidate_skills:
        return 0

    candidate_set = normalized_set(candidate_skills)
    matched = sum(1 for skill in required_skills if normalize_term(skill) in candidate_set)
    return round_half_up(matched / len(required_skills) * 100)


# =============================================================================
# EXPERIENCE
# =============================================================================


def required_years(experience_level: Optional[str]) -> int:
    """Years of experience a job level asks for."""
    level = normalize_term(experience_level or "entry")
    return EXPERIENCE_LEVEL_YEARS.get(level, EXPERIENCE_LEVEL_YEARS["entry"])


def experience_score(candidate_years: float, experience_level: Optional[str]) -> int:
    """
    Linear ramp from 0 to the level's required years, capped at 100.

    Entry level (and unknown levels) require nothing and always score 100.
    Exceeding the requirement is not penalized.
    """
    threshold = required_years(experience_level)
    if threshold == 0:
        return 100
    return min(round_half_up((candidate_years or 0) / threshold * 100), 100)


def _parse_date(value: DateLike) -> datetime:
    """Coerce a stored date into a naive datetime.

    Raises:
        InvalidInputError: If the value cannot be read as a date
    """
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime.combine(value, time())
    if isinstance(value, str) and value.strip():
        try:
            return dateutil_parser.parse(value).replace(tzinfo=None)
        except (ValueError, OverflowError) as e:
            raise InvalidInputError(value, "unparseable date") from e
    raise InvalidInputError(value, "not a date")


def _months_between(start: datetime, end: datetime) -> int:
    return (end.year - start.year) * 12 + (end.month - start.month)


def total_experience_years(
    entries: Sequence[ExperienceEntry] | None,
    now: Optional[datetime] = None,
) -> float:
    """
    Sum whole-month spans of a work history, in years to one decimal.

    Open-ended entries run until ``now``. Entries with missing or
    unparseable dates, or that end before they start, contribute nothing.
    """
    if not entries:
        return 0.0

    now = (now or datetime.now()).replace(tzinfo=None)
    total_months = 0
    for entry in entries:
        try:
            start = _parse_date(entry.start_date)
            end = _parse_date(entry.end_date) if entry.end_date else now
        except InvalidInputError as e:
            logger.debug("Skipping experience entry %s: %s", entry, e)
            continue
        if end > start:
            total_months += _months_between(start, end)

    return round_half_up(total_months / 12, 1)


def candidate_years(candidate: CandidateProfile, now: Optional[datetime] = None) -> float:
    """Use the precomputed total when set, otherwise derive it from history."""
    if candidate.total_experience:
        return float(candidate.total_experience)
    return total_experience_years(candidate.experience, now=now)


# =============================================================================
# PREFERENCES
# =============================================================================


def salary_part(preferred_salary: Optional[float], min_salary: Optional[float], max_salary: Optional[float]) -> int:
    """Compare a salary expectation with the job's range.

    Asking below the range is best for the employer; above it is worst.
    """
    if min_salary is None and max_salary is None:
        return NEUTRAL_SCORE
    if preferred_salary is None:
        return NEUTRAL_SCORE

    effective_min = min_salary if min_salary is not None else max_salary
    effective_max = max_salary if max_salary is not None else min_salary

    if preferred_salary < effective_min:
        return SALARY_BELOW_RANGE_SCORE
    if preferred_salary > effective_max:
        return SALARY_ABOVE_RANGE_SCORE
    return SALARY_IN_RANGE_SCORE


def industry_part(preferred_industry: Optional[str], job_industry: Optional[str]) -> int:
    if preferred_industry and job_industry:
        if normalize_term(preferred_industry) == normalize_term(job_industry):
            return INDUSTRY_MATCH_SCORE
    return NEUTRAL_SCORE


def remote_part(accepts_remote: Optional[bool], remote_option: bool) -> int:
    if not remote_option:
        return NEUTRAL_SCORE
    if accepts_remote is True:
        return REMOTE_ACCEPTED_SCORE
    if accepts_remote is False:
        return REMOTE_DECLINED_SCORE
    return REMOTE_UNSPECIFIED_SCORE


def preferences_score(candidate: CandidateProfile, job: JobPosting) -> int:
    """Unweighted mean of the salary, industry and remote parts."""
    parts = [
        salary_part(candidate.preferred_salary, job.min_salary, job.max_salary),
        industry_part(candidate.preferred_industry, job.industry),
        remote_part(candidate.accepts_remote, job.remote_option),
    ]
    return round_half_up(sum(parts) / len(parts))

"""Hard eligibility filter applied before scoring."""
from src.matching.types import CandidateProfile, JobPosting
from src.matching.utils import normalize_term, normalized_set


def is_eligible(job: JobPosting, candidate: CandidateProfile) -> bool:
    """
    Cheap pre-check that prunes obviously unsuitable pairs.

    All of these must hold:
    - the candidate finished their profile
    - the candidate has at least one required skill (if any are required)
    - some education level contains the required education (if set)
    - the candidate declares availability when the job lists slots

    Distance is never filtered on; it is scored. Availability is a presence
    check only, so an eligible pair can still score 0 on availability.
    """
    if not candidate.profile_completed:
        return False

    if job.skills_required:
        candidate_skills = normalized_set(candidate.skills)
        if not any(normalize_term(s) in candidate_skills for s in job.skills_required):
            return False

    if job.education:
        required = normalize_term(job.education)
        if not any(required in normalize_term(e.level or "") for e in candidate.education):
            return False

    if job.availability and not candidate.availability:
        return False

    return True

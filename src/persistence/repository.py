"""Population readers that feed the ranking engine.

The engine only talks to the ``PopulationReader`` protocol, so it can rank
over the database or over in-memory fixtures. ``SqlPopulationReader``
streams rows with ``yield_per`` instead of loading a whole population.
"""
import logging
from typing import Iterator, Optional, Protocol, runtime_checkable

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from src.matching.types import (
    CandidateProfile,
    EducationEntry,
    ExperienceEntry,
    GeoPoint,
    JobPosting,
    TimeSlot,
)
from src.persistence.models import Job, User

logger = logging.getLogger(__name__)

JOBSEEKER_ROLE = "jobseeker"
ACTIVE_STATUS = "active"

_JOBSEEKER_FILTER = (User.role == JOBSEEKER_ROLE, User.profile_completed.is_(True))
# Older rows store "Active"
_ACTIVE_JOB_FILTER = func.lower(Job.status) == ACTIVE_STATUS


@runtime_checkable
class PopulationReader(Protocol):
    """Read access to the jobs and candidates being matched."""

    def get_job(self, job_id: str) -> Optional[JobPosting]:
        ...

    def get_candidate(self, candidate_id: str) -> Optional[CandidateProfile]:
        ...

    def iter_candidates(self) -> Iterator[CandidateProfile]:
        """Lazily yield jobseekers with completed profiles."""
        ...

    def iter_active_jobs(self) -> Iterator[JobPosting]:
        """Lazily yield jobs with status active."""
        ...

    def iter_candidate_ids(self) -> Iterator[str]:
        """Ids of the candidates iter_candidates would yield."""
        ...

    def iter_job_ids(self) -> Iterator[str]:
        """Ids of the jobs iter_active_jobs would yield."""
        ...


def _point(longitude: Optional[float], latitude: Optional[float]) -> Optional[GeoPoint]:
    if longitude is None or latitude is None:
        return None
    return GeoPoint(longitude=longitude, latitude=latitude)


def _slots(raw: Optional[list]) -> list[TimeSlot]:
    return [TimeSlot.from_dict(slot) for slot in raw or []]


def candidate_from_user(user: User) -> CandidateProfile:
    """Build a CandidateProfile from a jobseeker row."""
    return CandidateProfile(
        id=user.id,
        name=user.name,
        skills=list(user.skills or []),
        total_experience=user.total_experience or 0.0,
        experience=[
            ExperienceEntry(
                start_date=e.get("start_date") or e.get("startDate"),
                end_date=e.get("end_date") or e.get("endDate"),
                company=e.get("company"),
                position=e.get("position"),
            )
            for e in user.experience or []
        ],
        education=[
            EducationEntry(level=e.get("level") or "", institute=e.get("institute"))
            for e in user.education or []
        ],
        availability=_slots(user.availability),
        location=_point(user.longitude, user.latitude),
        preferred_salary=user.preferred_salary,
        preferred_industry=user.preferred_industry,
        accepts_remote=user.accepts_remote,
        profile_completed=bool(user.profile_completed),
    )


def job_from_row(job: Job) -> JobPosting:
    """Build a JobPosting from a job row."""
    return JobPosting(
        id=job.id,
        title=job.title or "",
        company_name=job.company_name,
        skills_required=list(job.skills_required or []),
        education=job.education,
        experience_level=job.experience_level or "entry",
        availability=_slots(job.availability),
        location=_point(job.longitude, job.latitude),
        remote_option=bool(job.remote_option),
        min_salary=job.min_salary,
        max_salary=job.max_salary,
        industry=job.industry,
        status=(job.status or "").lower(),
    )


class SqlPopulationReader:
    """PopulationReader backed by a SQLAlchemy session."""

    def __init__(self, session: Session, batch_size: int = 500):
        """
        Initialize reader.

        Args:
            session: Database session
            batch_size: Rows fetched per round trip while streaming
        """
        self.session = session
        self.batch_size = batch_size

    def get_job(self, job_id: str) -> Optional[JobPosting]:
        job = self.session.get(Job, job_id)
        return job_from_row(job) if job else None

    def get_candidate(self, candidate_id: str) -> Optional[CandidateProfile]:
        user = self.session.get(User, candidate_id)
        if not user or user.role != JOBSEEKER_ROLE:
            return None
        return candidate_from_user(user)

    def _stream(self, stmt, convert, kind: str) -> Iterator:
        result = self.session.scalars(stmt.execution_options(yield_per=self.batch_size))
        try:
            for row in result:
                try:
                    yield convert(row)
                except (AttributeError, TypeError, ValueError) as e:
                    logger.warning("Skipping malformed %s record %s: %s", kind, row.id, e)
        finally:
            # Also runs when the caller abandons the cursor early
            result.close()

    def iter_candidates(self) -> Iterator[CandidateProfile]:
        stmt = select(User).where(*_JOBSEEKER_FILTER).order_by(User.id)
        return self._stream(stmt, candidate_from_user, "jobseeker")

    def iter_active_jobs(self) -> Iterator[JobPosting]:
        stmt = select(Job).where(_ACTIVE_JOB_FILTER).order_by(Job.id)
        return self._stream(stmt, job_from_row, "job")

    def iter_candidate_ids(self) -> Iterator[str]:
        stmt = select(User.id).where(*_JOBSEEKER_FILTER).order_by(User.id)
        return iter(self.session.scalars(stmt).all())

    def iter_job_ids(self) -> Iterator[str]:
        stmt = select(Job.id).where(_ACTIVE_JOB_FILTER).order_by(Job.id)
        return iter(self.session.scalars(stmt).all())

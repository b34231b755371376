"""Pytest fixtures for Talent Match tests."""
import sys
from pathlib import Path
from typing import Iterator, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.matching.types import CandidateProfile, GeoPoint, JobPosting, TimeSlot
from src.persistence.models import Application, Base, Job, User


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="function")
def test_db():
    """Create a fresh in-memory database for each test."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(bind=engine)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def user_factory(test_db):
    """
    Factory fixture to create jobseeker rows.

    Usage:
        alice = user_factory("alice", skills=["excel"])
    """

    def _create_user(user_id: str, **overrides) -> User:
        values = dict(
            id=user_id,
            email=f"{user_id}@test.com",
            name=user_id.title(),
            role="jobseeker",
            profile_completed=True,
            skills=["excel", "sales"],
            total_experience=3,
            availability=[{"day": "Monday", "start_time": "09:00", "end_time": "17:00"}],
            longitude=77.0,
            latitude=28.0,
        )
        values.update(overrides)
        user = User(**values)
        test_db.add(user)
        test_db.commit()
        return user

    return _create_user


@pytest.fixture
def job_factory(test_db):
    """Factory fixture to create job rows."""

    def _create_job(job_id: str, **overrides) -> Job:
        values = dict(
            id=job_id,
            title=f"Job {job_id}",
            company_name="Acme",
            skills_required=["excel", "sales"],
            experience_level="mid",
            availability=[{"day": "Monday", "start_time": "09:00", "end_time": "13:00"}],
            longitude=77.0,
            latitude=28.0,
            remote_option=False,
            status="active",
        )
        values.update(overrides)
        job = Job(**values)
        test_db.add(job)
        test_db.commit()
        return job

    return _create_job


@pytest.fixture
def sample_application(test_db, user_factory, job_factory):
    """Create an application of a good candidate to a job."""
    user_factory("alice")
    job_factory("job-1")
    application = Application(id="app-1", job_id="job-1", applicant_id="alice")
    test_db.add(application)
    test_db.commit()
    return application


# =============================================================================
# DOMAIN FIXTURES
# =============================================================================


def make_candidate(candidate_id: str = "cand-1", **overrides) -> CandidateProfile:
    """A completed profile that passes the default job's hard filter."""
    values = dict(
        id=candidate_id,
        skills=["excel", "sales"],
        total_experience=3,
        availability=[TimeSlot("Monday", "09:00", "17:00")],
        location=GeoPoint(77.0, 28.0),
        profile_completed=True,
    )
    values.update(overrides)
    return CandidateProfile(**values)


def make_job(job_id: str = "job-1", **overrides) -> JobPosting:
    """An active mid-level job requiring excel and sales."""
    values = dict(
        id=job_id,
        title=f"Job {job_id}",
        skills_required=["excel", "sales"],
        experience_level="mid",
        availability=[TimeSlot("Monday", "09:00", "13:00")],
        location=GeoPoint(77.0, 28.0),
        status="active",
    )
    values.update(overrides)
    return JobPosting(**values)


@pytest.fixture
def candidate_factory():
    """Build CandidateProfile objects with overridable defaults."""
    return make_candidate


@pytest.fixture
def posting_factory():
    """Build JobPosting objects with overridable defaults."""
    return make_job


@pytest.fixture
def scenario_job():
    """Job from the worked example: two skills, mid level, two weekly slots."""
    return make_job(
        "job-scenario",
        skills_required=["excel", "sales"],
        experience_level="mid",
        remote_option=False,
        location=GeoPoint(77.0, 28.0),
        availability=[
            TimeSlot("Monday", "09:00", "13:00"),
            TimeSlot("Wednesday", "09:00", "13:00"),
        ],
    )


@pytest.fixture
def scenario_candidate():
    """Candidate from the worked example: half the skills, 1 year, ~4 km away."""
    return make_candidate(
        "cand-scenario",
        skills=["excel"],
        total_experience=1,
        # 0.036 degrees of latitude is about 4 km
        location=GeoPoint(77.0, 28.036),
        availability=[TimeSlot("Monday", "12:00", "15:00")],
        preferred_salary=None,
        preferred_industry=None,
        accepts_remote=None,
    )


class InMemoryReader:
    """PopulationReader over lists, recording how much was consumed."""

    def __init__(self, jobs=None, candidates=None):
        self.jobs = {job.id: job for job in jobs or []}
        self.candidates = {c.id: c for c in candidates or []}
        self.yielded = 0
        self.closed = False

    def get_job(self, job_id: str) -> Optional[JobPosting]:
        return self.jobs.get(job_id)

    def get_candidate(self, candidate_id: str) -> Optional[CandidateProfile]:
        return self.candidates.get(candidate_id)

    def _stream(self, records) -> Iterator:
        try:
            for record in records:
                self.yielded += 1
                yield record
        finally:
            self.closed = True

    def iter_candidates(self) -> Iterator[CandidateProfile]:
        return self._stream(c for c in self.candidates.values() if c.profile_completed)

    def iter_active_jobs(self) -> Iterator[JobPosting]:
        return self._stream(j for j in self.jobs.values() if j.status == "active")

    def iter_candidate_ids(self) -> Iterator[str]:
        return iter([c.id for c in self.candidates.values() if c.profile_completed])

    def iter_job_ids(self) -> Iterator[str]:
        return iter([j.id for j in self.jobs.values() if j.status == "active"])


@pytest.fixture
def reader_factory():
    """Build an InMemoryReader from jobs and candidates."""
    return InMemoryReader

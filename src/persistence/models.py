"""SQLAlchemy models for Talent Match."""
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, relationship


def utcnow() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def generate_uuid() -> str:
    """Generate a UUID string."""
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class User(Base):
    """Jobseeker or employer account.

    Matching only reads the jobseeker fields; profile editing happens
    elsewhere.
    """

    __tablename__ = "users"

    id = Column(String, primary_key=True, default=generate_uuid)
    email = Column(String, unique=True, nullable=False)
    name = Column(String)
    role = Column(String, nullable=False, default="jobseeker")  # jobseeker, employer
    profile_completed = Column(Boolean, default=False)

    # Jobseeker fields
    skills = Column(JSON, default=list)  # ["excel", "sales"]
    experience = Column(JSON, default=list)  # [{"company", "position", "start_date", "end_date"}]
    total_experience = Column(Float, default=0)  # Years, precomputed from experience
    education = Column(JSON, default=list)  # [{"level", "institute"}]
    availability = Column(JSON, default=list)  # [{"day", "start_time", "end_time"}]
    longitude = Column(Float, nullable=True)
    latitude = Column(Float, nullable=True)
    preferred_salary = Column(Float, nullable=True)
    preferred_industry = Column(String, nullable=True)
    accepts_remote = Column(Boolean, nullable=True)  # None = unspecified

    # Employer fields
    company_name = Column(String)

    # Timestamps
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    jobs = relationship("Job", back_populates="employer")
    applications = relationship("Application", back_populates="applicant")

    __table_args__ = (Index("ix_users_role_profile_completed", "role", "profile_completed"),)

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"


class Job(Base):
    """Job posting."""

    __tablename__ = "jobs"

    id = Column(String, primary_key=True, default=generate_uuid)
    employer_id = Column(String, ForeignKey("users.id"), nullable=True)
    title = Column(String, nullable=False)
    description = Column(Text)
    company_name = Column(String)

    # Matching requirements
    skills_required = Column(JSON, default=list)
    education = Column(String, nullable=True)  # Required level, e.g. "graduate"
    experience_level = Column(String, default="entry")  # entry, mid, senior
    availability = Column(JSON, default=list)  # Empty = no schedule constraint
    longitude = Column(Float, nullable=True)
    latitude = Column(Float, nullable=True)
    remote_option = Column(Boolean, default=False)
    min_salary = Column(Integer, nullable=True)
    max_salary = Column(Integer, nullable=True)
    industry = Column(String, nullable=True)

    # Status: active, closed, draft
    status = Column(String, default="active", index=True)

    # Timestamps
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    employer = relationship("User", back_populates="jobs")
    applications = relationship("Application", back_populates="job")

    def __repr__(self) -> str:
        return f"<Job {self.title} ({self.status})>"


class Application(Base):
    """A jobseeker's application to a job, with its cached match score."""

    __tablename__ = "applications"

    id = Column(String, primary_key=True, default=generate_uuid)
    job_id = Column(String, ForeignKey("jobs.id"), nullable=False, index=True)
    applicant_id = Column(String, ForeignKey("users.id"), nullable=False)

    # Statuses: pending, shortlisted, accepted, rejected, withdrawn
    status = Column(String, nullable=False, default="pending")
    applied_at = Column(DateTime, default=utcnow)

    # Matching (null until first scored)
    match_score = Column(Integer, nullable=True)
    scored_at = Column(DateTime, nullable=True)

    # Relationships
    job = relationship("Job", back_populates="applications")
    applicant = relationship("User", back_populates="applications")

    def __repr__(self) -> str:
        return f"<Application {self.applicant_id} -> {self.job_id} ({self.status})>"


class Match(Base):
    """Cached ranking for one job or one jobseeker.

    Exactly one of ``job_id`` / ``jobseeker_id`` is set. Both are unique so a
    key never has more than one row. Rows are not deleted by the matching
    engine; whoever deletes a job or jobseeker must purge its row.
    """

    __tablename__ = "matches"

    id = Column(String, primary_key=True, default=generate_uuid)
    job_id = Column(String, unique=True, nullable=True)
    candidate_matches = Column(JSON, default=list)  # [{"candidate_id", "score"}]

    jobseeker_id = Column(String, unique=True, nullable=True)
    job_matches = Column(JSON, default=list)  # [{"job_id", "score", "job"}]

    last_updated = Column(DateTime, default=utcnow)

    def __repr__(self) -> str:
        key = f"job={self.job_id}" if self.job_id else f"jobseeker={self.jobseeker_id}"
        return f"<Match {key} updated={self.last_updated}>"

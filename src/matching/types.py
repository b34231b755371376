"""Domain records consumed by the matching engine.

These are plain dataclasses so the scorers stay independent of the storage
layer. ``src.persistence.repository`` builds them from ORM rows; tests build
them directly.
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional, Union

DateLike = Union[date, datetime, str, None]


@dataclass(frozen=True)
class GeoPoint:
    """A point on the globe, stored GeoJSON-style as (longitude, latitude)."""

    longitude: float
    latitude: float

    @classmethod
    def from_coordinates(cls, coordinates: Optional[list]) -> Optional["GeoPoint"]:
        """Build from a ``[lng, lat]`` pair, returning None when incomplete."""
        if not coordinates or len(coordinates) < 2:
            return None
        lng, lat = coordinates[0], coordinates[1]
        if lng is None or lat is None:
            return None
        return cls(longitude=float(lng), latitude=float(lat))

    def to_coordinates(self) -> list[float]:
        return [self.longitude, self.latitude]


@dataclass(frozen=True)
class TimeSlot:
    """A weekly availability window, e.g. Monday 09:00-13:00."""

    day: str
    start_time: str
    end_time: str

    @classmethod
    def from_dict(cls, data: dict) -> "TimeSlot":
        """Accept both snake_case and camelCase keys from stored JSON."""
        return cls(
            day=data.get("day") or "",
            start_time=data.get("start_time") or data.get("startTime") or "",
            end_time=data.get("end_time") or data.get("endTime") or "",
        )

    def to_dict(self) -> dict[str, str]:
        return {"day": self.day, "start_time": self.start_time, "end_time": self.end_time}


@dataclass(frozen=True)
class EducationEntry:
    """One education record of a candidate."""

    level: str
    institute: Optional[str] = None


@dataclass(frozen=True)
class ExperienceEntry:
    """One job in a candidate's work history. ``end_date`` None means ongoing."""

    start_date: DateLike = None
    end_date: DateLike = None
    company: Optional[str] = None
    position: Optional[str] = None


@dataclass
class CandidateProfile:
    """The part of a jobseeker profile relevant to matching."""

    id: str
    skills: list[str] = field(default_factory=list)
    total_experience: float = 0.0
    experience: list[ExperienceEntry] = field(default_factory=list)
    education: list[EducationEntry] = field(default_factory=list)
    availability: list[TimeSlot] = field(default_factory=list)
    location: Optional[GeoPoint] = None
    preferred_salary: Optional[float] = None
    preferred_industry: Optional[str] = None
    accepts_remote: Optional[bool] = None
    profile_completed: bool = False
    name: Optional[str] = None


@dataclass
class JobPosting:
    """The part of a job posting relevant to matching."""

    id: str
    title: str = ""
    company_name: Optional[str] = None
    skills_required: list[str] = field(default_factory=list)
    education: Optional[str] = None
    experience_level: str = "entry"
    availability: list[TimeSlot] = field(default_factory=list)
    location: Optional[GeoPoint] = None
    remote_option: bool = False
    min_salary: Optional[float] = None
    max_salary: Optional[float] = None
    industry: Optional[str] = None
    status: str = "active"

    def to_snapshot(self) -> dict[str, Any]:
        """Serialize to a JSON-safe dict for the jobseeker match cache."""
        return {
            "id": self.id,
            "title": self.title,
            "company_name": self.company_name,
            "skills_required": list(self.skills_required),
            "education": self.education,
            "experience_level": self.experience_level,
            "availability": [slot.to_dict() for slot in self.availability],
            "location": self.location.to_coordinates() if self.location else None,
            "remote_option": self.remote_option,
            "min_salary": self.min_salary,
            "max_salary": self.max_salary,
            "industry": self.industry,
            "status": self.status,
        }

    @classmethod
    def from_snapshot(cls, data: dict[str, Any]) -> "JobPosting":
        return cls(
            id=data["id"],
            title=data.get("title") or "",
            company_name=data.get("company_name"),
            skills_required=list(data.get("skills_required") or []),
            education=data.get("education"),
            experience_level=data.get("experience_level") or "entry",
            availability=[TimeSlot.from_dict(s) for s in data.get("availability") or []],
            location=GeoPoint.from_coordinates(data.get("location")),
            remote_option=bool(data.get("remote_option")),
            min_salary=data.get("min_salary"),
            max_salary=data.get("max_salary"),
            industry=data.get("industry"),
            status=data.get("status") or "active",
        )


@dataclass(frozen=True)
class ScoreBreakdown:
    """The five sub-scores of a pair plus their weighted total."""

    skills: int
    experience: int
    location: int
    availability: int
    preferences: int
    total: int


@dataclass(frozen=True)
class CandidateMatch:
    """A ranked candidate for a job."""

    candidate_id: str
    score: int

    def to_dict(self) -> dict[str, Any]:
        return {"candidate_id": self.candidate_id, "score": self.score}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CandidateMatch":
        return cls(candidate_id=data["candidate_id"], score=int(data["score"]))


@dataclass(frozen=True)
class JobMatch:
    """A ranked job for a jobseeker, with a snapshot of the posting."""

    job_id: str
    score: int
    job: Optional[JobPosting] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "job_id": self.job_id,
            "score": self.score,
            "job": self.job.to_snapshot() if self.job else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JobMatch":
        snapshot = data.get("job")
        return cls(
            job_id=data["job_id"],
            score=int(data["score"]),
            job=JobPosting.from_snapshot(snapshot) if snapshot else None,
        )

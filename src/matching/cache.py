"""Persisted ranking cache, one row per job and per jobseeker."""
import logging
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.matching.exceptions import CacheWriteError
from src.matching.types import CandidateMatch, JobMatch
from src.persistence.models import Match, generate_uuid, utcnow

logger = logging.getLogger(__name__)

# Dialects with INSERT ... ON CONFLICT DO UPDATE
_UPSERT_INSERTS = {
    "sqlite": sqlite_insert,
    "postgresql": pg_insert,
}


class MatchCache:
    """Read and overwrite cached rankings.

    Writes replace the whole list and its timestamp in one statement, so
    concurrent writers to the same key resolve as last-writer-wins and
    never leave a duplicate row. Reads never trigger a recompute.
    """

    def __init__(self, session: Session):
        """
        Initialize match cache.

        Args:
            session: Database session
        """
        self.session = session

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def upsert_job_matches(self, job_id: str, matches: Sequence[CandidateMatch]) -> None:
        """Replace the cached candidate ranking for a job."""
        entries = [m.to_dict() for m in matches]
        self._upsert("job_id", job_id, "candidate_matches", entries)
        logger.debug("Cached %d candidate matches for job %s", len(entries), job_id)

    def upsert_jobseeker_matches(self, jobseeker_id: str, matches: Sequence[JobMatch]) -> None:
        """Replace the cached job ranking for a jobseeker."""
        entries = [m.to_dict() for m in matches]
        self._upsert("jobseeker_id", jobseeker_id, "job_matches", entries)
        logger.debug("Cached %d job matches for jobseeker %s", len(entries), jobseeker_id)

    def _upsert(self, key_column: str, key: str, list_column: str, entries: list[dict]) -> None:
        cache_key = f"{key_column}={key}"
        now = utcnow()
        try:
            dialect = self.session.get_bind().dialect.name
            insert = _UPSERT_INSERTS.get(dialect)

            if insert is not None:
                stmt = insert(Match).values(
                    id=generate_uuid(),
                    **{key_column: key, list_column: entries, "last_updated": now},
                )
                stmt = stmt.on_conflict_do_update(
                    index_elements=[key_column],
                    set_={
                        list_column: stmt.excluded[list_column],
                        "last_updated": stmt.excluded.last_updated,
                    },
                )
                self.session.execute(stmt)
            else:
                self._upsert_generic(key_column, key, list_column, entries, now)

            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("Failed to write match cache for %s: %s", cache_key, e)
            raise CacheWriteError(cache_key, entries) from e

    def _upsert_generic(
        self,
        key_column: str,
        key: str,
        list_column: str,
        entries: list[dict],
        now: datetime,
    ) -> None:
        """Row-locking fallback for databases without ON CONFLICT."""
        stmt = select(Match).where(getattr(Match, key_column) == key).with_for_update()
        record = self.session.scalars(stmt).first()
        if record is None:
            record = Match(**{key_column: key})
            self.session.add(record)
        setattr(record, list_column, entries)
        record.last_updated = now

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _get(self, key_column: str, key: str) -> Optional[Match]:
        stmt = (
            select(Match)
            .where(getattr(Match, key_column) == key)
            .execution_options(populate_existing=True)
        )
        return self.session.scalars(stmt).first()

    def get_job_matches(self, job_id: str) -> Optional[list[CandidateMatch]]:
        """Cached candidates for a job, or None if never ranked."""
        record = self._get("job_id", job_id)
        if record is None:
            return None
        return [CandidateMatch.from_dict(entry) for entry in record.candidate_matches or []]

    def get_jobseeker_matches(self, jobseeker_id: str) -> Optional[list[JobMatch]]:
        """Cached jobs for a jobseeker, or None if never ranked."""
        record = self._get("jobseeker_id", jobseeker_id)
        if record is None:
            return None
        return [JobMatch.from_dict(entry) for entry in record.job_matches or []]

    def get_last_updated(
        self,
        job_id: Optional[str] = None,
        jobseeker_id: Optional[str] = None,
    ) -> Optional[datetime]:
        """When a job's or jobseeker's ranking was last written."""
        if (job_id is None) == (jobseeker_id is None):
            raise ValueError("Pass exactly one of job_id or jobseeker_id")
        record = self._get("job_id", job_id) if job_id else self._get("jobseeker_id", jobseeker_id)
        return record.last_updated if record else None

    # ------------------------------------------------------------------
    # Purge (for the owners of job / jobseeker deletion)
    # ------------------------------------------------------------------

    def purge_job(self, job_id: str) -> bool:
        """Delete the cached ranking of a deleted job."""
        return self._purge("job_id", job_id)

    def purge_jobseeker(self, jobseeker_id: str) -> bool:
        """Delete the cached ranking of a deleted jobseeker."""
        return self._purge("jobseeker_id", jobseeker_id)

    def _purge(self, key_column: str, key: str) -> bool:
        result = self.session.execute(delete(Match).where(getattr(Match, key_column) == key))
        self.session.commit()
        if result.rowcount:
            logger.info("Purged match cache for %s=%s", key_column, key)
        return bool(result.rowcount)

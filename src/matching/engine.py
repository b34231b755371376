"""Batch ranking of candidates for a job and jobs for a jobseeker."""
import heapq
import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, TypeVar

from src.matching.aggregator import ScoreAggregator
from src.matching.cache import MatchCache
from src.matching.exceptions import MatchingError, NotFoundError, RankingTimeoutError, ScoringError
from src.matching.filters import is_eligible
from src.matching.types import CandidateMatch, CandidateProfile, JobMatch, JobPosting
from src.matching.weights import MatchingConfig
from src.persistence.repository import PopulationReader

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

# Kept matches are pruned back to cache_limit whenever they exceed this multiple
PRUNE_FACTOR = 4


@dataclass
class ScanStats:
    """Counters for one ranking pass."""

    scanned: int = 0
    filtered: int = 0
    below_threshold: int = 0
    skipped: int = 0


@dataclass
class RefreshSummary:
    """Outcome of a bulk refresh."""

    refreshed: int = 0
    failed: int = 0


class RankingEngine:
    """Score a whole population against one job or one jobseeker.

    Each pass streams the population from the reader, applies the hard
    filter, scores survivors, keeps totals at or above ``min_match_score``,
    sorts by score (ties by id), caches the top ``cache_limit`` and returns
    the first ``limit``.
    """

    def __init__(
        self,
        reader: PopulationReader,
        cache: MatchCache,
        config: Optional[MatchingConfig] = None,
        aggregator: Optional[ScoreAggregator] = None,
    ):
        """
        Initialize ranking engine.

        Args:
            reader: Source of jobs and candidates
            cache: Where rankings are persisted
            config: Weights and thresholds (defaults if omitted)
            aggregator: Pair scorer (built from config weights if omitted)
        """
        self.reader = reader
        self.cache = cache
        self.config = config or MatchingConfig()
        self.aggregator = aggregator or ScoreAggregator(self.config.weights)

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    def rank_candidates_for_job(
        self,
        job_id: str,
        limit: Optional[int] = None,
        use_cache_only: bool = False,
        timeout: Optional[float] = None,
    ) -> list[CandidateMatch]:
        """
        Rank jobseekers for a job and refresh the job's cache.

        Args:
            job_id: Job to rank candidates for
            limit: Max results returned (defaults to config.default_limit)
            use_cache_only: Return the stored ranking if there is one
            timeout: Seconds before the scan is abandoned

        Returns:
            Candidate matches sorted by score descending

        Raises:
            NotFoundError: If the job does not exist
            RankingTimeoutError: If the scan exceeds the timeout
            CacheWriteError: If the ranking could not be persisted
        """
        limit = self._resolve_limit(limit)

        if use_cache_only:
            cached = self.cache.get_job_matches(job_id)
            if cached is not None:
                return cached[:limit]
            logger.info("No cached ranking for job %s, computing", job_id)

        job = self.reader.get_job(job_id)
        if job is None:
            raise NotFoundError("Job", job_id)

        ranked = self._rank(
            key=f"job {job_id}",
            population=self.reader.iter_candidates(),
            score=lambda candidate: self._score_pair(job, candidate),
            build=lambda candidate, total: CandidateMatch(candidate_id=candidate.id, score=total),
            identity=lambda match: match.candidate_id,
            timeout=timeout,
        )
        self.cache.upsert_job_matches(job_id, ranked)
        return ranked[:limit]

    def rank_jobs_for_jobseeker(
        self,
        jobseeker_id: str,
        limit: Optional[int] = None,
        use_cache_only: bool = False,
        timeout: Optional[float] = None,
    ) -> list[JobMatch]:
        """
        Rank active jobs for a jobseeker and refresh the jobseeker's cache.

        Same contract as rank_candidates_for_job, mirrored.
        """
        limit = self._resolve_limit(limit)

        if use_cache_only:
            cached = self.cache.get_jobseeker_matches(jobseeker_id)
            if cached is not None:
                return cached[:limit]
            logger.info("No cached ranking for jobseeker %s, computing", jobseeker_id)

        candidate = self.reader.get_candidate(jobseeker_id)
        if candidate is None:
            raise NotFoundError("Jobseeker", jobseeker_id)

        ranked = self._rank(
            key=f"jobseeker {jobseeker_id}",
            population=self.reader.iter_active_jobs(),
            score=lambda job: self._score_pair(job, candidate),
            build=lambda job, total: JobMatch(job_id=job.id, score=total, job=job),
            identity=lambda match: match.job_id,
            timeout=timeout,
        )
        self.cache.upsert_jobseeker_matches(jobseeker_id, ranked)
        return ranked[:limit]

    def refresh_all_jobs(self, timeout: Optional[float] = None) -> RefreshSummary:
        """Recompute the cached ranking of every active job."""
        # Ids are collected first so no cursor stays open across cache commits
        job_ids = list(self.reader.iter_job_ids())
        return self._refresh_each("job", job_ids, self.rank_candidates_for_job, timeout)

    def refresh_all_jobseekers(self, timeout: Optional[float] = None) -> RefreshSummary:
        """Recompute the cached ranking of every completed jobseeker."""
        jobseeker_ids = list(self.reader.iter_candidate_ids())
        return self._refresh_each("jobseeker", jobseeker_ids, self.rank_jobs_for_jobseeker, timeout)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _resolve_limit(self, limit: Optional[int]) -> int:
        if limit is None or limit <= 0:
            limit = self.config.default_limit
        return min(limit, self.config.cache_limit)

    def _score_pair(self, job: JobPosting, candidate: CandidateProfile) -> Optional[int]:
        """Total score of a pair, or None when the hard filter rejects it."""
        try:
            if not is_eligible(job, candidate):
                return None
            return self.aggregator.score_pair(job, candidate).total
        except Exception as e:
            raise ScoringError(job.id, candidate.id) from e

    def _rank(
        self,
        key: str,
        population: Iterable[T],
        score: Callable[[T], Optional[int]],
        build: Callable[[T, int], R],
        identity: Callable[[R], str],
        timeout: Optional[float],
    ) -> list[R]:
        """Stream a population and return the top cache_limit matches."""
        timeout = timeout if timeout is not None else self.config.timeout_seconds
        deadline = time.monotonic() + timeout if timeout else None
        cache_limit = self.config.cache_limit
        sort_key = lambda match: (-match.score, identity(match))  # noqa: E731

        stats = ScanStats()
        kept: list[R] = []
        started = time.monotonic()

        try:
            for record in population:
                if deadline is not None and time.monotonic() > deadline:
                    raise RankingTimeoutError(key, timeout, stats.scanned)
                stats.scanned += 1

                try:
                    total = score(record)
                except ScoringError as e:
                    stats.skipped += 1
                    logger.error("Error scoring %s: %s", key, e, exc_info=True)
                    continue

                if total is None:
                    stats.filtered += 1
                    continue
                if total < self.config.min_match_score:
                    stats.below_threshold += 1
                    continue

                kept.append(build(record, total))
                if len(kept) > cache_limit * PRUNE_FACTOR:
                    kept = heapq.nsmallest(cache_limit, kept, key=sort_key)
        finally:
            close = getattr(population, "close", None)
            if close is not None:
                close()

        ranked = sorted(kept, key=sort_key)[:cache_limit]

        logger.info(
            "Ranked %s: %d kept of %d scanned (%d filtered, %d below %d, %d skipped) in %.2fs",
            key,
            len(ranked),
            stats.scanned,
            stats.filtered,
            stats.below_threshold,
            self.config.min_match_score,
            stats.skipped,
            time.monotonic() - started,
        )
        return ranked

    def _refresh_each(
        self,
        kind: str,
        ids: list[str],
        rank: Callable[..., list],
        timeout: Optional[float],
    ) -> RefreshSummary:
        summary = RefreshSummary()
        for identity in ids:
            try:
                rank(identity, timeout=timeout)
                summary.refreshed += 1
            except MatchingError as e:
                summary.failed += 1
                logger.error("Failed to refresh %s %s: %s", kind, identity, e)

        logger.info(
            "Refreshed %d %s rankings (%d failed)", summary.refreshed, kind, summary.failed
        )
        return summary

"""On-demand match scores for individual applications."""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.matching.aggregator import ScoreAggregator
from src.matching.exceptions import NotFoundError
from src.matching.weights import MatchingConfig
from src.persistence.models import Application
from src.persistence.repository import candidate_from_user, job_from_row

logger = logging.getLogger(__name__)


@dataclass
class ScoredApplicant:
    """An application of a job with its match score."""

    application_id: str
    applicant_id: str
    applicant_name: Optional[str]
    status: str
    score: Optional[int]  # None when the job or applicant row is gone


class ApplicationScorer:
    """Score one (job, applicant) pair and store it on the application.

    The hard filter is skipped: an existing application is scored whether
    or not the applicant would have passed it.
    """

    def __init__(
        self,
        session: Session,
        config: Optional[MatchingConfig] = None,
        aggregator: Optional[ScoreAggregator] = None,
    ):
        """
        Initialize application scorer.

        Args:
            session: Database session
            config: Weights to score with, shared with the ranking engine
            aggregator: Pair scorer (built from config weights if omitted)
        """
        self.session = session
        self.config = config or MatchingConfig()
        self.aggregator = aggregator or ScoreAggregator(self.config.weights)

    def score_application(self, application_id: str) -> int:
        """
        Compute, persist and return an application's match score.

        Recomputing always overwrites the stored value.

        Raises:
            NotFoundError: If the application, its job or its applicant is missing
        """
        application = self.session.get(Application, application_id)
        if application is None:
            raise NotFoundError("Application", application_id)

        score = self._compute(application)
        self.session.commit()
        return score

    def _compute(self, application: Application) -> int:
        """Score an application in the current transaction without committing."""
        if application.job is None:
            raise NotFoundError("Job", application.job_id)
        if application.applicant is None:
            raise NotFoundError("Jobseeker", application.applicant_id)

        job = job_from_row(application.job)
        candidate = candidate_from_user(application.applicant)
        breakdown = self.aggregator.score_pair(job, candidate)

        application.match_score = breakdown.total
        application.scored_at = datetime.now(timezone.utc)
        logger.debug("Scored application %s: %s", application.id, breakdown)
        return breakdown.total

    def applicants_with_scores(self, job_id: str) -> list[ScoredApplicant]:
        """
        List a job's applicants with scores, best first.

        Stored non-zero scores are reused; missing or zero scores are
        computed and persisted. Applications whose job or applicant row is
        missing are listed with no score, after the scored ones. Ties keep
        application date order.
        """
        stmt = (
            select(Application)
            .where(Application.job_id == job_id)
            .order_by(Application.applied_at, Application.id)
        )
        applications = self.session.scalars(stmt).all()

        results: list[ScoredApplicant] = []
        computed = 0
        for application in applications:
            score = application.match_score
            if not score:
                try:
                    score = self._compute(application)
                    computed += 1
                except NotFoundError as e:
                    logger.warning("Cannot score application %s: %s", application.id, e)
                    score = None
            results.append(
                ScoredApplicant(
                    application_id=application.id,
                    applicant_id=application.applicant_id,
                    applicant_name=application.applicant.name if application.applicant else None,
                    status=application.status,
                    score=score,
                )
            )

        if computed:
            self.session.commit()
            logger.info("Scored %d new applications for job %s", computed, job_id)

        results.sort(key=lambda r: -1 if r.score is None else r.score, reverse=True)
        return results

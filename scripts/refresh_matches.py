#!/usr/bin/env python3
"""Recompute (or read) cached match rankings from the command line.

Usage:
    python -m scripts.refresh_matches --job JOB_ID
    python -m scripts.refresh_matches --jobseeker USER_ID --cache-only
    python -m scripts.refresh_matches --all
    python -m scripts.refresh_matches --applicants JOB_ID

Environment variables:
    DATABASE_URL: Database connection string
    WEIGHT_SET: Named weight set from config/weights.yaml
"""
import argparse
import logging
import sys

from scripts.bootstrap import settings, get_session, init_db
from src.logging_config import setup_logging
from src.matching.application_scorer import ApplicationScorer
from src.matching.cache import MatchCache
from src.matching.engine import RankingEngine
from src.matching.exceptions import MatchingError
from src.matching.weights import load_matching_config
from src.persistence.repository import SqlPopulationReader

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Refresh Talent Match rankings")
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--job", help="Rank candidates for this job id")
    target.add_argument("--jobseeker", help="Rank jobs for this jobseeker id")
    target.add_argument("--all", action="store_true", help="Refresh every job and jobseeker")
    target.add_argument("--applicants", metavar="JOB_ID", help="Score and list a job's applicants")
    parser.add_argument("--limit", type=int, default=None, help="Number of results to print")
    parser.add_argument("--cache-only", action="store_true", help="Print the stored ranking if present")
    parser.add_argument("--timeout", type=float, default=None, help="Seconds before a scan is abandoned")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(settings.log_level, settings.log_file)

    config = load_matching_config(settings)
    init_db()

    with get_session() as session:
        if args.applicants:
            scorer = ApplicationScorer(session, config=config)
            for applicant in scorer.applicants_with_scores(args.applicants):
                score = "-" if applicant.score is None else applicant.score
                print(f"{applicant.applicant_id}  {score}  {applicant.status}")
            return 0

        engine = RankingEngine(
            reader=SqlPopulationReader(session, batch_size=config.batch_size),
            cache=MatchCache(session),
            config=config,
        )

        if args.all:
            jobs = engine.refresh_all_jobs(timeout=args.timeout)
            jobseekers = engine.refresh_all_jobseekers(timeout=args.timeout)
            return 1 if jobs.failed or jobseekers.failed else 0

        if args.job:
            matches = engine.rank_candidates_for_job(
                args.job, limit=args.limit, use_cache_only=args.cache_only, timeout=args.timeout
            )
            for rank, match in enumerate(matches, start=1):
                print(f"{rank:>3}. {match.candidate_id}  {match.score}")
        else:
            matches = engine.rank_jobs_for_jobseeker(
                args.jobseeker, limit=args.limit, use_cache_only=args.cache_only, timeout=args.timeout
            )
            for rank, match in enumerate(matches, start=1):
                title = match.job.title if match.job else ""
                print(f"{rank:>3}. {match.job_id}  {match.score}  {title}")

        if not matches:
            logger.info("No matches cleared the minimum score of %d", config.min_match_score)
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logger.info("Interrupted.")
        sys.exit(1)
    except MatchingError as e:
        logger.error("Error: %s", e)
        sys.exit(1)

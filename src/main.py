"""Main entry point for the Talent Match refresh scheduler.

Rankings are computed on request; this scheduler only keeps the caches
warm by recomputing every job's and jobseeker's ranking on an interval.
"""
import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from config.settings import settings
from src.logging_config import setup_logging
from src.matching.cache import MatchCache
from src.matching.engine import RankingEngine
from src.matching.weights import MatchingConfig, load_matching_config
from src.persistence.database import get_session, init_db
from src.persistence.repository import SqlPopulationReader

logger = logging.getLogger(__name__)


def run_refresh_cycle(config: MatchingConfig) -> None:
    """Recompute all cached rankings once."""
    logger.info("=" * 60)
    logger.info("Starting match refresh at %s", datetime.now().strftime("%Y-%m-%d %H:%M:%S"))
    logger.info("=" * 60)

    with get_session() as session:
        engine = RankingEngine(
            reader=SqlPopulationReader(session, batch_size=config.batch_size),
            cache=MatchCache(session),
            config=config,
        )
        jobs = engine.refresh_all_jobs()
        jobseekers = engine.refresh_all_jobseekers()

    logger.info(
        "Refresh complete: %d jobs (%d failed), %d jobseekers (%d failed)",
        jobs.refreshed,
        jobs.failed,
        jobseekers.refreshed,
        jobseekers.failed,
    )


async def refresh_job(config: MatchingConfig) -> None:
    """Scheduler wrapper that keeps the event loop free during a refresh."""
    try:
        await asyncio.to_thread(run_refresh_cycle, config)
    except Exception as e:
        logger.error("Match refresh failed: %s", e, exc_info=True)


async def async_main():
    """Run the refresh scheduler until interrupted."""
    setup_logging(settings.log_level, settings.log_file)

    logger.info("Talent Match refresher starting...")

    config = load_matching_config(settings)

    init_db()
    logger.info("Database initialized")

    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        refresh_job,
        IntervalTrigger(minutes=settings.refresh_interval_minutes),
        args=[config],
        id="match_refresh",
        name="Match Refresh",
        max_instances=1,
    )

    scheduler.start()
    logger.info("Scheduler started: refresh every %d minutes", settings.refresh_interval_minutes)
    logger.info("Running initial refresh...")

    try:
        await refresh_job(config)

        logger.info("Talent Match refresher running. Press Ctrl+C to stop.")
        while True:
            await asyncio.sleep(60)

    except asyncio.CancelledError:
        logger.info("Shutting down...")
    finally:
        scheduler.shutdown()


def main():
    """Main entry point."""
    try:
        asyncio.run(async_main())
    except KeyboardInterrupt:
        logger.info("Shutdown complete.")


if __name__ == "__main__":
    main()

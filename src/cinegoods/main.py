"""Scheduler entry point: crawls every source once a day."""

import asyncio
import logging
import sys

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from cinegoods.config import Settings, get_settings, require_settings
from cinegoods.exceptions import ConfigurationError
from cinegoods.tasks.crawl_job import ALL_SOURCES, run_crawl
from cinegoods.utils.dates import KST

logger = logging.getLogger(__name__)


def create_scheduler(settings: Settings) -> AsyncIOScheduler:
    """Build a scheduler with the daily crawl of all sources registered."""
    scheduler = AsyncIOScheduler(timezone=KST)
    scheduler.add_job(
        run_crawl,
        trigger=CronTrigger(hour=settings.schedule_hour, minute=0, timezone=KST),
        args=[list(ALL_SOURCES), settings],
        id="daily_crawl",
        name="Daily crawl of all cinema sources",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    return scheduler


async def serve(settings: Settings) -> None:
    scheduler = create_scheduler(settings)
    scheduler.start()
    logger.info(f"Scheduler started, daily crawl registered for {settings.schedule_hour:02d}:00 KST")

    try:
        await asyncio.Event().wait()
    finally:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler shut down")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")

    try:
        settings = require_settings(get_settings())
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(1)

    try:
        asyncio.run(serve(settings))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()

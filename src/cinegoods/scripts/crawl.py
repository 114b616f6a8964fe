"""Run the goods event crawl for one or all cinema sources."""

import argparse
import asyncio
import logging
import sys

from cinegoods.config import get_settings, require_settings
from cinegoods.exceptions import ConfigurationError
from cinegoods.tasks.crawl_job import ALL_SOURCES, run_crawl

logger = logging.getLogger(__name__)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Crawl cinema goods events, analyse them with Gemini and save the results."
    )
    parser.add_argument(
        "source",
        choices=[*ALL_SOURCES, "all"],
        help="Cinema source to crawl, or 'all'",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only discover and filter events; no screenshots, AI calls or writes",
    )
    parser.add_argument(
        "--headed",
        action="store_true",
        help="Show the browser window",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    try:
        settings = require_settings(get_settings())
    except ConfigurationError as e:
        logger.error(str(e))
        logger.error("Please check your .env / .env.local file.")
        sys.exit(1)

    if args.headed:
        settings.headless = False

    source_names = list(ALL_SOURCES) if args.source == "all" else [args.source]
    summaries = asyncio.run(run_crawl(source_names, settings, dry_run=args.dry_run))

    for summary in summaries:
        print(
            f"{summary.source}: {summary.targets} targets, "
            f"{summary.inserted} inserted, {summary.failed} failed"
        )


if __name__ == "__main__":
    main()

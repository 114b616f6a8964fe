"""Crawl job: discover, filter, capture, analyse and persist goods events."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from functools import partial
from pathlib import Path

from google import genai

from cinegoods.config import Settings
from cinegoods.database import create_engine_and_sessionmaker
from cinegoods.services.candidate_filter import filter_targets
from cinegoods.services.event_store import EventStore
from cinegoods.services.gemini_client import GoodsAnalyzer
from cinegoods.services.records import build_event_row, build_sheet_record
from cinegoods.services.sheets_client import SheetsClient
from cinegoods.sources import SOURCE_REGISTRY, get_source
from cinegoods.sources.base import BaseSource
from cinegoods.sources.models import GoodsAnalysis, ScrapedListing
from cinegoods.utils.browser import BrowserSession, open_browser_session

logger = logging.getLogger(__name__)

ALL_SOURCES: tuple[str, ...] = tuple(SOURCE_REGISTRY)

SessionFactory = Callable[[], AbstractAsyncContextManager[BrowserSession]]


@dataclass
class CrawlSummary:
    """Counters for one source's run."""

    source: str
    discovered: int = 0
    targets: int = 0
    captured: int = 0
    analysed: int = 0
    sheet_rows: int = 0
    inserted: int = 0
    failed: int = 0


class CrawlPipeline:
    """
    Runs one source end to end.

    Targets are processed one at a time: the browser page is shared between
    iterations for some sources, so nothing here runs concurrently.
    """

    def __init__(
        self,
        source: BaseSource,
        store: EventStore,
        analyzer: GoodsAnalyzer,
        sheets: SheetsClient,
        session_factory: SessionFactory = open_browser_session,
        screenshot_dir: Path = Path("crawled_images"),
        pacing_delay: float = 3.0,
        dry_run: bool = False,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.source = source
        self.store = store
        self.analyzer = analyzer
        self.sheets = sheets
        self.session_factory = session_factory
        self.screenshot_dir = Path(screenshot_dir)
        self.pacing_delay = pacing_delay
        self.dry_run = dry_run
        self._sleep = sleep

    async def run(self) -> CrawlSummary:
        """Crawl the source once. Never raises; problems are logged and counted."""
        name = self.source.name
        summary = CrawlSummary(source=name)
        logger.info(f"Starting crawl for {name}")

        known_references = await self.store.fetch_known_references()

        try:
            async with self.session_factory() as session:
                candidates = await self._discover(session)
                summary.discovered = len(candidates)

                targets = filter_targets(candidates, known_references, self.source.policy.keywords)
                summary.targets = len(targets)
                logger.info(f"{name}: {len(targets)} of {len(candidates)} events to process")

                if self.dry_run:
                    for target in targets:
                        logger.info(f"{name}: [dry run] {target.title} -> {target.detail_url}")
                    return summary

                for index, target in enumerate(targets, start=1):
                    logger.info(f"{name}: Processing ({index}/{len(targets)}) {target.title}")
                    await self._process_target(session, target, summary)
                    if index < len(targets):
                        await self._sleep(self.pacing_delay)

        except Exception as e:
            logger.error(f"{name}: Crawl aborted: {e}", exc_info=True)

        finally:
            logger.info(
                f"Crawl complete for {name}: {summary.discovered} discovered, "
                f"{summary.targets} targets, {summary.captured} captured, "
                f"{summary.inserted} inserted, {summary.sheet_rows} sheet rows, "
                f"{summary.failed} failed"
            )

        return summary

    async def _discover(self, session: BrowserSession) -> list[ScrapedListing]:
        try:
            return await self.source.discover(session)
        except Exception as e:
            logger.error(f"{self.source.name}: Discovery failed, no events this run: {e}", exc_info=True)
            return []

    async def _process_target(
        self,
        session: BrowserSession,
        target: ScrapedListing,
        summary: CrawlSummary,
    ) -> None:
        """Capture, analyse and persist one target. Errors stop here."""
        try:
            screenshot_path = await self.source.capture(session, target, self.screenshot_dir)
            if screenshot_path is None:
                logger.warning(f"{self.source.name}: No screenshot for {target.title}, skipping")
                summary.failed += 1
                return
            summary.captured += 1

            analysis = await self.analyzer.analyze(
                screenshot_path,
                prompt=self.source.prompt,
                cooldown=self.source.policy.rate_limit_cooldown,
            )
            summary.analysed += 1

            await self._persist(target, analysis, summary)
            self._cleanup(screenshot_path)

        except Exception as e:
            summary.failed += 1
            logger.error(
                f"{self.source.name}: Error processing {target.title!r}: {e}",
                exc_info=True,
            )

    async def _persist(
        self,
        target: ScrapedListing,
        analysis: GoodsAnalysis,
        summary: CrawlSummary,
    ) -> None:
        policy = self.source.policy

        try:
            record = build_sheet_record(target, analysis)
            if await self.sheets.append_event(record, policy.sheet_headers):
                summary.sheet_rows += 1
        except Exception as e:
            logger.error(f"{self.source.name}: Sheet write failed for {target.title!r}: {e}")

        try:
            row = build_event_row(target, analysis, policy)
            if await self.store.insert_event(row):
                summary.inserted += 1
        except Exception as e:
            logger.error(f"{self.source.name}: DB write failed for {target.title!r}: {e}")

    def _cleanup(self, screenshot_path: Path) -> None:
        if self.source.policy.keep_screenshots:
            return
        try:
            screenshot_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not delete screenshot {screenshot_path}: {e}")


async def run_crawl(
    source_names: Sequence[str],
    settings: Settings,
    dry_run: bool = False,
) -> list[CrawlSummary]:
    """
    Build the shared clients and crawl each named source in turn.

    Args:
        source_names: Keys of ``SOURCE_REGISTRY``
        settings: Validated settings
        dry_run: Discover and filter only

    Returns:
        One summary per source that was run
    """
    engine, session_factory = create_engine_and_sessionmaker(settings.database_url)
    store = EventStore(session_factory)
    analyzer = GoodsAnalyzer(
        genai.Client(api_key=settings.gemini_api_key),
        rate_limit_cooldown=settings.rate_limit_cooldown,
        debug_dir=Path(settings.debug_dir),
    )
    sheets = SheetsClient(
        settings.google_service_account_email,
        settings.google_private_key,
        settings.google_sheet_id,
    )
    browser_factory = partial(
        open_browser_session,
        headless=settings.headless,
        navigation_timeout=settings.navigation_timeout,
    )

    summaries: list[CrawlSummary] = []
    try:
        for name in source_names:
            source = get_source(name, debug_dir=Path(settings.debug_dir))
            if not source:
                logger.warning(f"No source found for {name!r}")
                continue

            pipeline = CrawlPipeline(
                source,
                store,
                analyzer,
                sheets,
                session_factory=browser_factory,
                screenshot_dir=Path(settings.screenshot_dir),
                pacing_delay=settings.pacing_delay,
                dry_run=dry_run,
            )
            summaries.append(await pipeline.run())
    finally:
        await engine.dispose()

    return summaries

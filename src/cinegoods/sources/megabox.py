"""Megabox event source: parses the static event list and screenshots details."""

import asyncio
import logging
import re
import time
from pathlib import Path

from bs4 import BeautifulSoup, Tag
from playwright.async_api import ElementHandle, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from cinegoods.models import CinemaId, EventStatus
from cinegoods.sources.base import DEFAULT_SHEET_HEADERS, BaseSource, SourcePolicy
from cinegoods.sources.models import ScrapedListing
from cinegoods.utils.browser import BrowserSession, best_effort, detail_page, wait_for_images

logger = logging.getLogger(__name__)

LIST_URL = "https://www.megabox.co.kr/event/movie"
DETAIL_URL_TEMPLATE = "https://www.megabox.co.kr/event/detail?eventNo={event_no}"

LIST_CONTAINER_SELECTOR = ".event-list"
# Tried in order; the first visible one is screenshotted instead of the full page
CONTENT_SELECTORS = (".event-view", ".event-detail", ".event-content", "main", "body")
CONTENT_SELECTOR_TIMEOUT = 5000  # ms

EVENT_NO_RE = re.compile(r"eventNo=(\d+)")

MEGABOX_SHEET_HEADERS = (
    *DEFAULT_SHEET_HEADERS[:5],
    "poster_url",
    *DEFAULT_SHEET_HEADERS[5:],
)


class MegaboxSource(BaseSource):
    """
    Source for Megabox.

    The movie event list is server-rendered: each ``.event-list li`` has an
    ``a.eventBtn[data-no]`` with the event number, ``.tit``, ``.date`` and a
    thumbnail. Screenshots are kept on disk for manual curation.
    """

    name = "megabox"
    policy = SourcePolicy(
        cinema_id=CinemaId.MEGABOX,
        display_name="메가박스",
        keywords=(
            "증정",
            "스페셜",
            "오리지널 티켓",
            "TTT",
            "포스터",
            "아트카드",
            "굿즈",
            "배지",
            "뱃지",
            "포토카드",
            "시그니처",
        ),
        default_status=EventStatus.ACTIVE,
        default_visible=True,
        keep_screenshots=True,
        rate_limit_cooldown=20.0,
        sheet_headers=MEGABOX_SHEET_HEADERS,
    )

    async def discover(self, session: BrowserSession) -> list[ScrapedListing]:
        """Load the event list page and parse its items."""
        page = await session.new_page()
        try:
            logger.info("Megabox: Navigating to event list")
            await page.goto(LIST_URL, wait_until="networkidle", timeout=60000)

            try:
                await page.wait_for_selector(LIST_CONTAINER_SELECTOR, timeout=10000)
            except PlaywrightTimeoutError:
                logger.warning(
                    f"Megabox: Timed out waiting for {LIST_CONTAINER_SELECTOR}, saving debug screenshot"
                )
                await best_effort(
                    lambda: self._save_debug_screenshot(page), "save Megabox list screenshot"
                )

            html = await page.content()
        finally:
            await page.close()

        listings = self._parse_list_html(html)
        logger.info(f"Megabox: Found {len(listings)} events on the list page")
        return listings

    async def capture(
        self,
        session: BrowserSession,
        listing: ScrapedListing,
        output_dir: Path,
    ) -> Path | None:
        """Screenshot the event content area, or the full page if none is found."""
        try:
            async with detail_page(session) as page:
                logger.debug(f"Megabox: Loading {listing.detail_url}")
                await page.goto(listing.detail_url, wait_until="networkidle", timeout=30000)
                # Dynamic content keeps loading after network idle
                await asyncio.sleep(2)

                element, selector = await self._find_content_element(page)
                if element is not None:
                    await asyncio.sleep(1)
                    await wait_for_images(page)

                screenshot_path = self._screenshot_path(
                    output_dir, f"event_{self._event_no(listing.detail_url)}"
                )
                if element is not None:
                    logger.debug(f"Megabox: Screenshot of {selector}")
                    await element.screenshot(path=str(screenshot_path))
                else:
                    logger.debug("Megabox: No content element found, taking full-page screenshot")
                    await page.screenshot(path=str(screenshot_path), full_page=True)

                logger.info(f"Megabox: Saved screenshot {screenshot_path}")
                return screenshot_path

        except Exception as e:
            logger.error(f"Megabox: Failed to capture {listing.detail_url}: {e}")
            return None

    async def _find_content_element(self, page: Page) -> tuple[ElementHandle | None, str | None]:
        """Return the first candidate content element that has a visible box."""
        for selector in CONTENT_SELECTORS:
            try:
                await page.wait_for_selector(selector, timeout=CONTENT_SELECTOR_TIMEOUT)
            except PlaywrightTimeoutError:
                continue

            element = await page.query_selector(selector)
            if element is None:
                continue
            box = await element.bounding_box()
            if box and box["width"] > 0 and box["height"] > 0:
                return element, selector

        return None, None

    async def _save_debug_screenshot(self, page: Page) -> None:
        self.debug_dir.mkdir(parents=True, exist_ok=True)
        await page.screenshot(path=str(self.debug_dir / "debug_list_page.png"), full_page=True)

    def _event_no(self, detail_url: str) -> str:
        match = EVENT_NO_RE.search(detail_url)
        return match.group(1) if match else f"unknown_{int(time.time() * 1000)}"

    def _parse_list_html(self, html: str) -> list[ScrapedListing]:
        soup = BeautifulSoup(html, "html.parser")
        if soup.select_one(LIST_CONTAINER_SELECTOR) is None:
            logger.warning(f"Megabox: No {LIST_CONTAINER_SELECTOR} container on page")
            return []

        listings: list[ScrapedListing] = []
        for item in soup.select(f"{LIST_CONTAINER_SELECTOR} li"):
            try:
                listing = self._parse_item(item)
            except Exception as e:
                logger.warning(f"Megabox: Failed to parse event item: {e}")
                continue
            if listing:
                listings.append(listing)
        return listings

    def _parse_item(self, item: Tag) -> ScrapedListing | None:
        link = item.select_one("a.eventBtn")
        title_el = item.select_one(".tit")
        if link is None or title_el is None:
            return None

        event_no = (link.get("data-no") or "").strip()
        if not event_no:
            return None

        date_el = item.select_one(".date")
        image = item.select_one(".img img")

        return ScrapedListing(
            title=title_el.get_text(strip=True) or "No Title",
            detail_url=DETAIL_URL_TEMPLATE.format(event_no=event_no),
            date_range=date_el.get_text(" ", strip=True) if date_el else "",
            image_url=(image.get("src") or None) if image else None,
        )

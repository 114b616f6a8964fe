"""CGV event source: scrapes the rendered event list and clicks into details."""

import asyncio
import logging
import re
from datetime import date
from pathlib import Path
from urllib.parse import quote, urljoin

from bs4 import BeautifulSoup, Tag
from playwright.async_api import Page

from cinegoods.models import CinemaId, EventStatus
from cinegoods.sources.base import BaseSource, SourcePolicy
from cinegoods.sources.models import ScrapedListing
from cinegoods.utils.browser import BrowserSession, best_effort
from cinegoods.utils.dates import is_upcoming, today_kst
from cinegoods.utils.text import css_attribute_value

logger = logging.getLogger(__name__)

CGV_BASE_URL = "https://www.cgv.co.kr/"
# Event cards are rendered as buttons on the new site, so some have no href
FALLBACK_DETAIL_URL = "https://www.cgv.co.kr/culture-event/event/default.aspx?title="

# Class names carry a build hash suffix (e.g. "maintab_tabTitle__77wdq")
MAIN_TAB_SELECTOR = 'button[class*="maintab_tabTitle"]'
SUB_TAB_SELECTOR = 'button[class*="roundtab_tabTitle"]'
CARD_SELECTOR = 'li, [class*="eventCard_card"]'
LINK_SELECTOR = 'a, button[class*="link"]'
PERIOD_SELECTOR = '[class*="period"], [class*="subText"]'

EVENTS_TAB_TEXT = "이벤트/혜택"
MOVIE_TAB_PATTERN = re.compile(r"^영화$")
RENEWAL_BUTTON_TEXT = "새로운 CGV로 이동"
POPUP_CLOSE_TEXT = "닫기"

PLACEHOLDER_ALTS = {"No Title", "-"}

LIST_SETTLE_SECONDS = 8

_IS_SELECTED_JS = """
(el) => el.classList.contains('active')
    || (el.parentElement && el.parentElement.classList.contains('active'))
    || el.getAttribute('aria-selected') === 'true'
"""


class CGVSource(BaseSource):
    """
    Source for CGV.

    Flow:
    1. Open the home page, get past the renewal interstitial and popups.
    2. Click the "이벤트/혜택" main tab, then make sure "영화" is selected.
    3. Parse the rendered cards: title from ``img[alt]``, period from the
       period label, ``is_upcoming`` from the first ``YY.MM.DD`` date.

    Detail pages are reached by clicking the card image on the shared page,
    because direct URLs are not stable. After each capture the page goes
    back and the "영화" tab is re-selected since the site resets it.
    """

    name = "cgv"
    policy = SourcePolicy(
        cinema_id=CinemaId.CGV,
        display_name="CGV",
        keywords=(
            "증정",
            "스페셜",
            "TTT",
            "오리지널티켓",
            "아트카드",
            "시그니처",
            "굿즈",
            "뱃지",
            "포스터",
            "현장",
        ),
        default_status=EventStatus.SCHEDULED,
        default_visible=False,
        movie_title_fallback=True,
    )

    async def discover(self, session: BrowserSession) -> list[ScrapedListing]:
        """Navigate to the CGV event list and parse the cards."""
        page = session.page

        logger.info("CGV: Navigating to home page")
        await page.goto(CGV_BASE_URL, wait_until="networkidle", timeout=60000)
        await self._ensure_main_view(page)

        logger.info(f"CGV: Opening {EVENTS_TAB_TEXT} tab")
        event_tab = page.locator(MAIN_TAB_SELECTOR).filter(has_text=EVENTS_TAB_TEXT).first
        await event_tab.wait_for(timeout=15000)
        await event_tab.click(force=True)
        await asyncio.sleep(2)

        await self._select_movie_tab(page)
        await asyncio.sleep(LIST_SETTLE_SECONDS)

        html = await page.content()
        await best_effort(lambda: self._save_debug_snapshot(page, html), "save CGV list snapshot")

        listings = self._parse_list_html(html, today_kst())
        logger.info(f"CGV: Found {len(listings)} events on the list page")
        for listing in listings:
            label = "UPCOMING" if listing.is_upcoming else "PAST"
            logger.debug(f"CGV: [{label}] {listing.title} ({listing.date_range})")
        return listings

    async def capture(
        self,
        session: BrowserSession,
        listing: ScrapedListing,
        output_dir: Path,
    ) -> Path | None:
        """
        Click into the listing's detail view and take a full-page screenshot.

        The page is taken back to the list exactly once, whether or not the
        screenshot succeeded, and only if the click actually left the list.
        """
        page = session.page
        left_list = False

        try:
            logger.info(f"CGV: Opening detail by clicking: {listing.title}")
            image = page.locator(f'img[alt="{css_attribute_value(listing.title)}"]').first
            await image.wait_for(timeout=5000)
            await image.click(force=True)
            left_list = True

            await page.wait_for_load_state("networkidle", timeout=30000)
            await asyncio.sleep(2)

            # Detail pages can show the same interstitials as the home page
            await self._ensure_main_view(page)
            await asyncio.sleep(2)

            screenshot_path = self._screenshot_path(output_dir)
            await page.screenshot(path=str(screenshot_path), full_page=True)

        except Exception as e:
            logger.error(f"CGV: Failed to capture {listing.title!r}: {e}")
            if left_list:
                await self._return_to_list(page)
            return None

        await self._return_to_list(page)
        return screenshot_path

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    async def _ensure_main_view(self, page: Page) -> None:
        """Get past the renewal landing page and close the initial popup."""

        async def leave_renewal_page() -> None:
            button = page.get_by_text(RENEWAL_BUTTON_TEXT).first
            await button.wait_for(state="visible", timeout=5000)
            logger.info("CGV: Renewal landing page detected, moving on")
            await button.click()
            await page.wait_for_load_state("networkidle", timeout=30000)

        async def close_popup() -> None:
            await asyncio.sleep(2)
            close_button = page.get_by_text(POPUP_CLOSE_TEXT)
            if await close_button.count() > 0:
                await close_button.first.click(timeout=5000)
                logger.info(f"CGV: Closed popup ({POPUP_CLOSE_TEXT})")

        await best_effort(leave_renewal_page, "leave CGV renewal page")
        await best_effort(close_popup, "close CGV popup")

    async def _return_to_list(self, page: Page) -> None:
        """Go back from a detail view once and restore the "영화" tab."""

        async def go_back() -> None:
            logger.debug("CGV: Going back to list")
            await page.go_back(timeout=30000)
            await page.wait_for_load_state("networkidle", timeout=30000)
            await asyncio.sleep(3)

        await best_effort(go_back, "return to CGV list")
        await self._select_movie_tab(page)

    async def _select_movie_tab(self, page: Page) -> None:
        """Select the "영화" category tab unless it is already active."""

        async def select() -> None:
            movie_tab = page.locator(SUB_TAB_SELECTOR).filter(has_text=MOVIE_TAB_PATTERN).first
            await movie_tab.wait_for(timeout=5000)
            if not await movie_tab.evaluate(_IS_SELECTED_JS):
                await movie_tab.click(force=True)
                logger.info("CGV: Selected 영화 category")
                await asyncio.sleep(2)

        await best_effort(select, "select CGV movie tab")

    async def _save_debug_snapshot(self, page: Page, html: str) -> None:
        self.debug_dir.mkdir(parents=True, exist_ok=True)
        (self.debug_dir / "debug_cgv.html").write_text(html, encoding="utf-8")
        await page.screenshot(path=str(self.debug_dir / "debug_cgv_at_scrape.png"))

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def _parse_list_html(self, html: str, today: date) -> list[ScrapedListing]:
        """
        Parse the rendered event list.

        Cards are ``li`` or ``eventCard_card`` elements containing:
        - ``img[alt]``: event title (placeholders ignored)
        - ``a[href]`` or ``button.*link*``: detail link
        - ``*period*`` / ``*subText*``: "24.03.02 ~ 24.03.10"
        """
        soup = BeautifulSoup(html, "html.parser")
        listings: list[ScrapedListing] = []
        seen_titles: set[str] = set()

        for card in soup.select(CARD_SELECTOR):
            try:
                listing = self._parse_card(card, today)
            except Exception as e:
                logger.warning(f"CGV: Failed to parse event card: {e}")
                continue
            if listing is None or listing.title in seen_titles:
                continue
            seen_titles.add(listing.title)
            listings.append(listing)

        return listings

    def _parse_card(self, card: Tag, today: date) -> ScrapedListing | None:
        image = card.find("img")
        if not isinstance(image, Tag):
            return None

        title = (image.get("alt") or "").strip()
        if not title or title in PLACEHOLDER_ALTS:
            return None

        period_el = card.select_one(PERIOD_SELECTOR)
        date_range = period_el.get_text(" ", strip=True) if period_el else ""
        if not date_range:
            return None

        return ScrapedListing(
            title=title,
            detail_url=self._detail_url(card, title),
            date_range=date_range,
            is_upcoming=is_upcoming(date_range, today),
            image_url=image.get("src") or None,
        )

    def _detail_url(self, card: Tag, title: str) -> str:
        link = card.select_one(LINK_SELECTOR)
        if link is not None and link.name == "a":
            href = (link.get("href") or "").strip()
            if href and href != "#" and not href.startswith("javascript:"):
                return urljoin(CGV_BASE_URL, href)
        return FALLBACK_DETAIL_URL + quote(title, safe="!~*'()")

"""Lotte Cinema event source: reads the event list from its JSON XHR response."""

import asyncio
import logging
from pathlib import Path
from typing import Any

from playwright.async_api import Response

from cinegoods.models import CinemaId, EventStatus
from cinegoods.sources.base import BaseSource, SourcePolicy
from cinegoods.sources.models import ScrapedListing
from cinegoods.utils.browser import BrowserSession, detail_page

logger = logging.getLogger(__name__)

LIST_URL = "https://www.lottecinema.co.kr/NLCHS/Event/DetailList?code=20"
EVENT_DATA_ENDPOINT = "EventData.aspx"
DETAIL_URL_TEMPLATE = "https://www.lottecinema.co.kr/NLCHS/Event/EventTemplateInfo?eventId={event_id}"

RESPONSE_POLL_ATTEMPTS = 15
RESPONSE_POLL_INTERVAL = 1.0  # seconds


class LotteSource(BaseSource):
    """
    Source for Lotte Cinema.

    The event list page fills itself from an ``EventData.aspx`` XHR. Rather
    than scraping the DOM we listen for that response and map its ``Items``
    straight into listings. Details are opened by URL in a fresh page.
    """

    name = "lotte"
    policy = SourcePolicy(
        cinema_id=CinemaId.LOTTE,
        display_name="롯데시네마",
        keywords=("증정", "스페셜", "아트카드", "시그니처"),
        default_status=EventStatus.SCHEDULED,
        default_visible=False,
    )

    async def discover(self, session: BrowserSession) -> list[ScrapedListing]:
        """Load the list page and wait for the intercepted event data."""
        captured: list[ScrapedListing] = []

        async def on_response(response: Response) -> None:
            if EVENT_DATA_ENDPOINT not in response.url:
                return
            try:
                payload = await response.json()
            except Exception as e:
                logger.warning(f"Lotte: Could not decode {EVENT_DATA_ENDPOINT} response: {e}")
                return
            listings = self._parse_event_data(payload)
            if listings:
                captured[:] = listings

        page = await session.new_page()
        page.on("response", on_response)
        try:
            logger.info("Lotte: Navigating to event list")
            await page.goto(LIST_URL, wait_until="networkidle", timeout=60000)

            for _ in range(RESPONSE_POLL_ATTEMPTS):
                if captured:
                    break
                await asyncio.sleep(RESPONSE_POLL_INTERVAL)
        finally:
            await page.close()

        if not captured:
            logger.warning(f"Lotte: No {EVENT_DATA_ENDPOINT} response captured")
        else:
            logger.info(f"Lotte: Found {len(captured)} events")
        return list(captured)

    async def capture(
        self,
        session: BrowserSession,
        listing: ScrapedListing,
        output_dir: Path,
    ) -> Path | None:
        """Open the detail URL in its own page and take a full-page screenshot."""
        try:
            async with detail_page(session) as page:
                await page.goto(listing.detail_url, wait_until="networkidle", timeout=30000)
                await asyncio.sleep(2)

                screenshot_path = self._screenshot_path(output_dir)
                await page.screenshot(path=str(screenshot_path), full_page=True)
                return screenshot_path

        except Exception as e:
            logger.error(f"Lotte: Failed to capture {listing.detail_url}: {e}")
            return None

    def _parse_event_data(self, payload: Any) -> list[ScrapedListing]:
        """Map ``EventData.aspx`` JSON into listings, skipping incomplete items."""
        if not isinstance(payload, dict):
            return []

        items = payload.get("Items") or []
        listings: list[ScrapedListing] = []

        for item in items:
            if not isinstance(item, dict):
                continue

            title = str(item.get("EventName") or "").strip()
            event_id = item.get("EventID")
            if not title or not event_id:
                logger.debug(f"Lotte: Skipping item without name or id: {item!r:.200}")
                continue

            start = str(item.get("ProgressStartDate") or "").strip()
            end = str(item.get("ProgressEndDate") or "").strip()
            date_range = f"{start} ~ {end}" if start or end else None

            listings.append(
                ScrapedListing(
                    title=title,
                    detail_url=DETAIL_URL_TEMPLATE.format(event_id=event_id),
                    date_range=date_range,
                    image_url=item.get("ImageUrl") or None,
                )
            )

        return listings

"""Playwright session helpers shared by all cinema sources."""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TypeVar

from playwright.async_api import Browser, BrowserContext, Page, async_playwright
from playwright_stealth import Stealth

logger = logging.getLogger(__name__)

T = TypeVar("T")

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36"
)
LIST_VIEWPORT = {"width": 1440, "height": 900}
DETAIL_VIEWPORT = {"width": 1280, "height": 2000}

# Resolves once every <img> has loaded or errored, or after the per-image timeout
_WAIT_FOR_IMAGES_JS = """
(timeoutMs) => Promise.all(
    Array.from(document.images)
        .filter(img => !img.complete)
        .map(img => new Promise(resolve => {
            img.onload = resolve;
            img.onerror = resolve;
            setTimeout(resolve, timeoutMs);
        }))
)
"""


@dataclass
class BrowserSession:
    """A launched browser plus the page shared across targets."""

    browser: Browser
    context: BrowserContext
    page: Page

    async def new_page(self, viewport: dict | None = None) -> Page:
        """Open an extra page in the session's context."""
        page = await self.context.new_page()
        if viewport:
            await page.set_viewport_size(viewport)
        return page


@asynccontextmanager
async def open_browser_session(
    headless: bool = True,
    navigation_timeout: int = 60,
) -> AsyncIterator[BrowserSession]:
    """
    Launch a stealth Chromium with a Korean desktop profile.

    The browser is closed when the context exits, whatever happened inside.
    """
    stealth = Stealth()
    async with stealth.use_async(async_playwright()) as p:
        browser = await p.chromium.launch(headless=headless)
        try:
            context = await browser.new_context(
                user_agent=USER_AGENT,
                viewport=LIST_VIEWPORT,
                locale="ko-KR",
                timezone_id="Asia/Seoul",
            )
            context.set_default_timeout(navigation_timeout * 1000)
            page = await context.new_page()
            yield BrowserSession(browser=browser, context=context, page=page)
        finally:
            await browser.close()
            logger.debug("Browser closed")


@asynccontextmanager
async def detail_page(
    session: BrowserSession,
    viewport: dict | None = DETAIL_VIEWPORT,
) -> AsyncIterator[Page]:
    """Open a page for a single target and always close it afterwards."""
    page = await session.new_page(viewport)
    try:
        yield page
    finally:
        await best_effort(page.close, "close detail page")


async def best_effort(action: Callable[[], Awaitable[T]], description: str) -> T | None:
    """
    Run an optional browser step, logging and ignoring any failure.

    For UI obstacles that may or may not be present (popups, interstitials)
    and cleanup steps. Returns the action's result, or None if it failed.
    """
    try:
        return await action()
    except Exception as e:
        logger.debug(f"Optional step skipped ({description}): {e}")
        return None


async def wait_for_images(page: Page, per_image_timeout_ms: int = 2000) -> None:
    """Wait for pending images on the page to finish loading."""
    await page.evaluate(_WAIT_FOR_IMAGES_JS, per_image_timeout_ms)

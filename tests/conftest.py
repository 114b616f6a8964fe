"""Shared test fixtures."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from cinegoods.sources.models import ScrapedListing

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def make_listing(
    title: str = "[스페셜] 웡카 아트카드 증정",
    detail_url: str = "https://example.com/event/1",
    date_range: str | None = "24.03.02 ~ 24.03.10",
    is_upcoming: bool | None = None,
    image_url: str | None = None,
) -> ScrapedListing:
    return ScrapedListing(
        title=title,
        detail_url=detail_url,
        date_range=date_range,
        is_upcoming=is_upcoming,
        image_url=image_url,
    )


def make_page() -> MagicMock:
    """Playwright page double whose navigation and capture calls are awaitable."""
    page = MagicMock()
    page.goto = AsyncMock()
    page.close = AsyncMock()
    page.content = AsyncMock(return_value="<html></html>")
    page.screenshot = AsyncMock()
    page.go_back = AsyncMock()
    page.wait_for_load_state = AsyncMock()
    page.wait_for_selector = AsyncMock()
    page.query_selector = AsyncMock(return_value=None)
    page.evaluate = AsyncMock()
    page.set_viewport_size = AsyncMock()
    return page


def make_session(page: MagicMock | None = None, detail: MagicMock | None = None) -> MagicMock:
    """Browser session double: ``page`` is the shared page, ``new_page`` returns *detail*."""
    session = MagicMock()
    session.page = page or make_page()
    session.new_page = AsyncMock(return_value=detail or make_page())
    return session


@pytest.fixture
def screenshot_file(tmp_path: Path) -> Path:
    path = tmp_path / "shot.png"
    path.write_bytes(PNG_BYTES)
    return path


@pytest.fixture
def no_sleep(monkeypatch: pytest.MonkeyPatch) -> AsyncMock:
    """Replace asyncio.sleep so settle delays don't slow the tests down."""
    sleep = AsyncMock()
    monkeypatch.setattr("asyncio.sleep", sleep)
    return sleep

"""Live tests for the cinema sources.

These tests launch a real browser against the cinema websites.
Run with: pytest -m live tests/sources/test_sources_live.py -v -s --log-cli-level=DEBUG
"""

import logging

import pytest

from cinegoods.sources import SOURCE_REGISTRY, get_source
from cinegoods.utils.browser import open_browser_session

logger = logging.getLogger(__name__)


@pytest.mark.live
@pytest.mark.parametrize("name", list(SOURCE_REGISTRY))
@pytest.mark.asyncio
async def test_source_discovers_listings(name, tmp_path):
    """Each cinema's event list should yield listings with titles and detail URLs."""
    source = get_source(name, debug_dir=tmp_path)

    async with open_browser_session() as session:
        listings = await source.discover(session)

    logger.info(f"{name} returned {len(listings)} listings")
    for listing in listings[:10]:
        logger.info(f"  {listing.title} | {listing.date_range} | {listing.detail_url}")

    assert listings, f"No listings found for {name}; the page layout may have changed"
    for listing in listings:
        assert listing.title
        assert listing.detail_url.startswith("https://")


@pytest.mark.live
@pytest.mark.asyncio
async def test_megabox_captures_first_listing(tmp_path):
    source = get_source("megabox", debug_dir=tmp_path)

    async with open_browser_session() as session:
        listings = await source.discover(session)
        assert listings
        path = await source.capture(session, listings[0], tmp_path / "shots")

    assert path is not None and path.stat().st_size > 0

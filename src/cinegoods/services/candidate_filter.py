"""Selects which discovered listings are worth capturing and analysing."""

import logging
from collections.abc import Iterable, Sequence

from cinegoods.sources.models import ScrapedListing
from cinegoods.utils.text import contains_keyword

logger = logging.getLogger(__name__)


def filter_targets(
    candidates: Sequence[ScrapedListing],
    known_references: set[str],
    keywords: Iterable[str],
) -> list[ScrapedListing]:
    """
    Keep listings that are new, mention a goods keyword and are upcoming.

    A listing is a target when:
    - its ``detail_url`` is not already stored,
    - its title contains at least one keyword, and
    - ``is_upcoming`` is True, for sources that compute it (None is ignored).

    Input order is preserved.
    """
    keywords = tuple(keywords)
    targets: list[ScrapedListing] = []

    for listing in candidates:
        if listing.detail_url in known_references:
            logger.debug(f"Already stored: {listing.title}")
            continue
        if not contains_keyword(listing.title, keywords):
            logger.debug(f"No goods keyword: {listing.title}")
            continue
        if listing.is_upcoming is False:
            logger.debug(f"Not upcoming: {listing.title} ({listing.date_range})")
            continue
        targets.append(listing)

    return targets

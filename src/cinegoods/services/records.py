"""Builds the database row and spreadsheet record for an enriched listing."""

from datetime import datetime, timezone
from typing import Any

from cinegoods.sources.base import SourcePolicy
from cinegoods.sources.models import UNKNOWN_GOODS_TYPE, GoodsAnalysis, ScrapedListing
from cinegoods.utils.text import strip_bracket_prefix


def build_event_row(
    listing: ScrapedListing,
    analysis: GoodsAnalysis,
    policy: SourcePolicy,
) -> dict[str, Any]:
    """
    Map a listing and its analysis onto ``events`` columns.

    Status, visibility and the movie-title fallback come from the source policy.
    """
    movie_title = analysis.movie_title
    if not movie_title and policy.movie_title_fallback:
        movie_title = strip_bracket_prefix(listing.title)

    return {
        "event_title": listing.title,
        "movie_title": movie_title,
        "cinema_id": int(policy.cinema_id),
        "goods_type": analysis.goods_type or UNKNOWN_GOODS_TYPE,
        "period": listing.date_range,
        "image_url": listing.image_url,
        "locations": list(analysis.locations),
        "official_url": listing.detail_url,
        "status": policy.default_status.value,
        "is_visible": policy.default_visible,
        "is_new": True,
    }


def build_sheet_record(
    listing: ScrapedListing,
    analysis: GoodsAnalysis,
    crawled_at: datetime | None = None,
) -> dict[str, str]:
    """Build a spreadsheet record keyed by header name."""
    crawled_at = crawled_at or datetime.now(timezone.utc)
    return {
        "event_title": listing.title,
        "movie_title": analysis.movie_title,
        "goods_type": analysis.goods_type,
        "locations": ", ".join(analysis.locations),
        "period": listing.date_range or "",
        "poster_url": listing.image_url or "",
        "detail_url": listing.detail_url,
        "crawled_at": crawled_at.isoformat(),
    }

"""Data models shared by the cinema sources and the pipeline."""

from dataclasses import dataclass, field

UNKNOWN_GOODS_TYPE = "unknown"


@dataclass
class ScrapedListing:
    """
    Raw event listing found on a cinema's event list page.

    This is the output format that every source's discovery step must return.
    """

    title: str  # Event title as shown on the list page
    detail_url: str  # Detail page URL (or synthesised locator); dedup key
    date_range: str | None = None  # e.g. "24.03.02 ~ 24.03.10"
    is_upcoming: bool | None = None  # Only set by sources that compute it
    image_url: str | None = None  # List thumbnail


@dataclass
class GoodsAnalysis:
    """Structured fields extracted from a detail-page screenshot."""

    movie_title: str = ""
    goods_type: str = UNKNOWN_GOODS_TYPE
    locations: list[str] = field(default_factory=list)

    @classmethod
    def sentinel(cls) -> "GoodsAnalysis":
        """Result used when extraction fails completely."""
        return cls(movie_title="", goods_type=UNKNOWN_GOODS_TYPE, locations=[])

    def to_dict(self) -> dict:
        """Return the camelCase shape used in the model's JSON contract."""
        return {
            "movieTitle": self.movie_title,
            "goodsType": self.goods_type,
            "locations": list(self.locations),
        }


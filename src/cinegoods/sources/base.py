"""Base interface for all cinema event sources."""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from cinegoods.models import CinemaId, EventStatus
from cinegoods.services.prompts import build_extraction_prompt
from cinegoods.sources.models import ScrapedListing
from cinegoods.utils.browser import BrowserSession

DEFAULT_SHEET_HEADERS: tuple[str, ...] = (
    "event_title",
    "movie_title",
    "goods_type",
    "locations",
    "period",
    "detail_url",
    "crawled_at",
)


@dataclass(frozen=True)
class SourcePolicy:
    """
    Per-cinema settings for filtering and persistence.

    The cinemas differ on purpose here (approval gate, default status,
    screenshot retention), so each source declares its own values.
    """

    cinema_id: CinemaId
    display_name: str  # Korean cinema name used in the extraction prompt
    keywords: tuple[str, ...]
    default_status: EventStatus = EventStatus.SCHEDULED
    default_visible: bool = False
    movie_title_fallback: bool = False  # Use stripped event title when AI finds none
    keep_screenshots: bool = False
    rate_limit_cooldown: float | None = None  # Gemini 429 wait; None uses the analyzer default
    sheet_headers: tuple[str, ...] = DEFAULT_SHEET_HEADERS


class BaseSource(ABC):
    """
    Abstract base class for cinema event sources.

    A source knows how to discover listings on its cinema's website and how
    to capture a screenshot of one listing's detail page. The pipeline driver
    is written once against this interface.
    """

    name: str
    policy: SourcePolicy

    def __init__(self, debug_dir: Path = Path(".")) -> None:
        """
        Args:
            debug_dir: Where debug HTML and screenshots are written.
        """
        self.debug_dir = Path(debug_dir)

    @property
    def prompt(self) -> str:
        """Extraction prompt naming this source's cinema."""
        return build_extraction_prompt(self.policy.display_name)

    @abstractmethod
    async def discover(self, session: BrowserSession) -> list[ScrapedListing]:
        """
        Find candidate listings on the cinema's event list page.

        Missing elements skip the affected listing only.

        Raises:
            May raise on navigation failures; the driver treats that as
            zero candidates for this run.
        """

    @abstractmethod
    async def capture(
        self,
        session: BrowserSession,
        listing: ScrapedListing,
        output_dir: Path,
    ) -> Path | None:
        """
        Screenshot the listing's detail page.

        Returns:
            Path to the screenshot, or None if the capture failed

        Raises:
            Should NOT raise exceptions. Return None on errors and log them.
        """

    def _screenshot_path(self, output_dir: Path, stem: str | None = None) -> Path:
        """Build a screenshot path in *output_dir*, creating the directory."""
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        stem = stem or f"{self.name}_{int(time.time() * 1000)}"
        return output_dir / f"{stem}.png"

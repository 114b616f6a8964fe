"""Gemini client for extracting goods details from detail-page screenshots."""

import asyncio
import json
import logging
import re
import shutil
import time
from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path
from typing import Any

from google import genai
from google.genai import errors, types

from cinegoods.exceptions import AnalysisParseError
from cinegoods.services.prompts import build_extraction_prompt
from cinegoods.sources.models import UNKNOWN_GOODS_TYPE, GoodsAnalysis
from cinegoods.utils.retry import for_each_model

logger = logging.getLogger(__name__)

# Cheapest and fastest first; later entries are fallbacks
DEFAULT_MODELS: tuple[str, ...] = (
    "gemini-2.5-flash-lite",
    "gemini-2.5-flash",
    "gemini-2.5-pro",
    "gemini-2.0-flash",
    "gemini-2.0-pro",
)

_CODE_FENCE_RE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")


def is_rate_limited(error: Exception) -> bool:
    """Return True for HTTP 429 / quota errors from the Gemini API."""
    if isinstance(error, errors.APIError) and error.code == 429:
        return True
    return "RESOURCE_EXHAUSTED" in str(error)


def parse_analysis_response(text: str) -> dict[str, Any]:
    """
    Parse the JSON object out of a model response.

    Models sometimes wrap the object in code fences or add prose around it,
    so the text between the first ``{`` and the last ``}`` is parsed. If that
    fails, a second, more aggressive cleanup is tried before giving up.

    Args:
        text: Raw response text

    Returns:
        The parsed JSON object

    Raises:
        AnalysisParseError: If no JSON object can be recovered
    """
    cleaned = _CODE_FENCE_RE.sub("", text or "").strip()

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    candidate = cleaned[start : end + 1] if start != -1 and end > start else cleaned

    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError:
        logger.warning(f"Gemini: JSON parse failed, retrying with cleanup: {candidate[:300]!r}")
        candidate = re.sub(r"^[^{]*", "", candidate)
        candidate = re.sub(r"[^}]*$", "", candidate)
        candidate = _TRAILING_COMMA_RE.sub(r"\1", candidate)
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError as e:
            raise AnalysisParseError(f"Could not parse model response as JSON: {e}", raw=text) from e

    if not isinstance(parsed, dict):
        raise AnalysisParseError("Model response JSON is not an object", raw=text)
    return parsed


def normalize_analysis(data: dict[str, Any]) -> GoodsAnalysis:
    """
    Clean up a parsed model response.

    Strings are trimmed, an empty goods type becomes ``"unknown"`` and
    locations keep only non-empty strings. Applying it to its own output
    (via ``GoodsAnalysis.to_dict``) returns an equal result.
    """
    movie_title = data.get("movieTitle")
    movie_title = movie_title.strip() if isinstance(movie_title, str) else ""

    goods_type = data.get("goodsType", data.get("goodsKind"))
    goods_type = goods_type.strip() if isinstance(goods_type, str) else ""
    if not goods_type or goods_type.lower() == UNKNOWN_GOODS_TYPE:
        goods_type = UNKNOWN_GOODS_TYPE

    raw_locations = data.get("locations")
    locations: list[str] = []
    if isinstance(raw_locations, list):
        locations = [
            location.strip()
            for location in raw_locations
            if isinstance(location, str) and location.strip()
        ]

    return GoodsAnalysis(movie_title=movie_title, goods_type=goods_type, locations=locations)


class GoodsAnalyzer:
    """Extracts movie title, goods type and branches from a screenshot via Gemini."""

    def __init__(
        self,
        client: genai.Client,
        models: Sequence[str] = DEFAULT_MODELS,
        max_attempts_per_model: int = 2,
        rate_limit_cooldown: float = 10.0,
        debug_dir: Path = Path("."),
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        """
        Args:
            client: Configured google-genai client
            models: Model names in fallback order
            max_attempts_per_model: Attempts per model on rate limits
            rate_limit_cooldown: Seconds to wait after a 429
            debug_dir: Where screenshots of failed analyses are copied
            sleep: Optional sleep override (tests)
        """
        self.client = client
        self.models = tuple(models)
        self.max_attempts_per_model = max_attempts_per_model
        self.rate_limit_cooldown = rate_limit_cooldown
        self.debug_dir = Path(debug_dir)
        self._sleep = sleep or asyncio.sleep

    async def analyze(
        self,
        image_path: Path,
        prompt: str | None = None,
        cooldown: float | None = None,
    ) -> GoodsAnalysis:
        """
        Analyze a detail-page screenshot.

        Args:
            image_path: PNG screenshot of the event detail page
            prompt: Extraction prompt (defaults to a cinema-neutral one)
            cooldown: Rate-limit wait for this call, overriding the analyzer default

        Returns:
            Normalized analysis, or the sentinel result on any failure.
            Never raises.
        """
        image_path = Path(image_path)
        prompt = prompt or build_extraction_prompt("영화관")
        raw_response = ""

        try:
            image_part = types.Part.from_bytes(
                data=image_path.read_bytes(),
                mime_type="image/png",
            )

            async def generate(model: str) -> str:
                logger.info(f"Gemini: Analysing {image_path.name} with {model}")
                response = await self.client.aio.models.generate_content(
                    model=model,
                    contents=[prompt, image_part],
                )
                return response.text or ""

            raw_response = await for_each_model(
                self.models,
                generate,
                is_rate_limited,
                max_attempts_per_model=self.max_attempts_per_model,
                cooldown=self.rate_limit_cooldown if cooldown is None else cooldown,
                sleep=self._sleep,
            )
            logger.debug(f"Gemini: Raw response: {raw_response[:200]}")

            analysis = normalize_analysis(parse_analysis_response(raw_response))
            logger.info(f"Gemini: Analysis complete: {analysis}")
            return analysis

        except Exception as e:
            logger.error(f"Gemini: Analysis failed for {image_path} ({type(e).__name__}): {e}")
            if raw_response:
                logger.error(f"Gemini: Raw response was: {raw_response}")
            self._save_debug_copy(image_path)
            return GoodsAnalysis.sentinel()

    def _save_debug_copy(self, image_path: Path) -> None:
        """Keep a copy of a screenshot whose analysis failed for manual inspection."""
        debug_path = self.debug_dir / f"debug_failed_{int(time.time() * 1000)}.png"
        try:
            self.debug_dir.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(image_path, debug_path)
            logger.error(f"Gemini: Saved failed screenshot to {debug_path}")
        except OSError as e:
            logger.warning(f"Gemini: Could not save debug screenshot: {e}")

"""Text helpers for event titles."""

import re
from collections.abc import Iterable

# One or more leading "[...]" tags, e.g. "[CGV] [스페셜] 웡카 아트카드 증정"
_BRACKET_PREFIX_RE = re.compile(r"^\s*(?:\[[^\]]*\]\s*)+")


def strip_bracket_prefix(title: str) -> str:
    """
    Remove leading bracketed tags from an event title.

    Used as the movie-title fallback when the model could not read one.
    If nothing but tags is left, the stripped original title is returned.
    """
    stripped = _BRACKET_PREFIX_RE.sub("", title).strip()
    return stripped or title.strip()


def contains_keyword(title: str, keywords: Iterable[str]) -> bool:
    """Return True if any keyword occurs as a substring of *title*."""
    return any(keyword and keyword in title for keyword in keywords)


def css_attribute_value(value: str) -> str:
    """Escape a string for use inside a double-quoted CSS attribute selector."""
    return value.replace("\\", "\\\\").replace('"', '\\"')

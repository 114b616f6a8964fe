"""Period-string parsing for Korean cinema event listings."""

import re
from datetime import date, datetime
from zoneinfo import ZoneInfo

KST = ZoneInfo("Asia/Seoul")

# "24.03.02" or "2024.03.02"; two-digit years are 20xx
PERIOD_DATE_RE = re.compile(r"(?<!\d)(\d{4}|\d{2})\.(\d{1,2})\.(\d{1,2})(?!\d)")

# "소진 시" = until sold out, used in place of an end date
SOLD_OUT_MARKER = "소진"


def today_kst() -> date:
    """Return today's date in Korea, which is what the cinema sites use."""
    return datetime.now(KST).date()


def parse_period_date(text: str) -> date | None:
    """
    Parse the first ``YY.MM.DD`` / ``YYYY.MM.DD`` date in *text*.

    Args:
        text: Free text containing a date, e.g. "24.03.02(토)"

    Returns:
        Parsed date or None if no valid date is present
    """
    if not text:
        return None

    match = PERIOD_DATE_RE.search(text)
    if not match:
        return None

    year = int(match.group(1))
    if year < 100:
        year += 2000

    try:
        return date(year, int(match.group(2)), int(match.group(3)))
    except ValueError:
        return None


def split_period(period: str) -> tuple[date | None, date | None]:
    """
    Split a "start ~ end" period string into dates.

    The end date is None when missing or replaced by the sold-out marker.
    """
    if not period:
        return None, None

    parts = period.split("~", 1)
    start = parse_period_date(parts[0])
    end = None
    if len(parts) > 1 and SOLD_OUT_MARKER not in parts[1]:
        end = parse_period_date(parts[1])
    return start, end


def is_upcoming(period: str, today: date | None = None) -> bool:
    """Return True when the period's start date is strictly after *today*."""
    start, _ = split_period(period)
    if start is None:
        return False
    return start > (today or today_kst())

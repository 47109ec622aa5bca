import re
from datetime import datetime, timezone

from dateutil import parser as duparser

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_EDGE_DASHES = re.compile(r"^-+|-+$")

# "13:30", "1:30 pm", "1pm"; ASCII digits only
_TIME_RE = re.compile(r"^(\d{1,2})(?::(\d{2}))?\s*(am|pm)?$", re.ASCII)

# two defaults differing in year: a parsed year that follows the default was not in the input
_DEFAULT_DATE = datetime(2000, 1, 1)
_OTHER_DEFAULT_DATE = datetime(2001, 1, 1)


def slugify(value: str) -> str:
    slug = _NON_ALNUM.sub("-", str(value).strip().lower())
    return _EDGE_DASHES.sub("", slug)


def normalize_time(value: str) -> str | None:
    """Normalizes a free-form time to 24h ``HH:MM``.

    Returns None when the value is not a valid time.
    """
    match = _TIME_RE.match(value.strip().lower())
    if not match:
        return None

    hours = int(match.group(1))
    minutes = int(match.group(2)) if match.group(2) else 0
    period = match.group(3)

    if minutes > 59:
        return None

    if period:
        if hours < 1 or hours > 12:
            return None
        if period == "pm" and hours != 12:
            hours += 12
        elif period == "am" and hours == 12:
            hours = 0
    elif hours > 23:
        return None

    return f"{hours:02d}:{minutes:02d}"


def normalize_date(value: str) -> str | None:
    """Parses a date string and returns its UTC calendar date (YYYY-MM-DD).

    A missing month or day falls back to January / the 1st, so the result
    depends on the input alone. Input without a year (a bare time, "March 5")
    is rejected. Naive values are taken as UTC. Returns None if unparseable.
    """
    text = value.strip()
    if not text:
        return None
    try:
        dt = duparser.parse(text, default=_DEFAULT_DATE)
        other = duparser.parse(text, default=_OTHER_DEFAULT_DATE)
    except (ValueError, OverflowError):
        return None
    if dt.year != other.year:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt.date().isoformat()


def normalize_email(value: str) -> str:
    return value.strip().lower()

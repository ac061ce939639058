"""Date helpers for post filenames and front-matter values."""

from __future__ import annotations

import re
from datetime import UTC, date, datetime, time
from datetime import tzinfo as TZInfo
from typing import Any

from dateutil import parser as date_parser

POST_FILENAME_RE = re.compile(r"^(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})-(?P<title>.+)$")


def parse_post_filename(stem: str) -> tuple[date, str] | None:
    """Split a post filename stem ``YYYY-MM-DD-title`` into its date and title.

    Returns None when the stem does not follow the pattern or the date does
    not exist on the calendar.

    Examples:
        >>> parse_post_filename("2023-04-01-caching-basics")
        (datetime.date(2023, 4, 1), 'caching-basics')
        >>> parse_post_filename("caching-basics") is None
        True

    """
    match = POST_FILENAME_RE.match(stem)
    if match is None:
        return None
    try:
        parsed = date(int(match["year"]), int(match["month"]), int(match["day"]))
    except ValueError:
        return None
    return parsed, match["title"]


def coerce_datetime(value: Any, *, tz: TZInfo = UTC) -> datetime | None:
    """Turn a front-matter date value into an aware datetime.

    YAML hands us ``date``/``datetime`` objects for ISO values and plain
    strings for the generator's ``2023-04-01 10:00:00 +0800`` style, which
    dateutil understands. Naive values are placed in ``tz``.
    Returns None for anything that is not a recognisable date.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        normalized = value.strip()
        if not normalized:
            return None
        try:
            parsed = date_parser.isoparse(normalized)
        except (ValueError, OverflowError):
            try:
                parsed = date_parser.parse(normalized)
            except (ValueError, OverflowError, TypeError):
                return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def local_date(value: datetime, tz: TZInfo) -> date:
    """Calendar day of ``value`` as seen in the site timezone."""
    return value.astimezone(tz).date()


def format_front_matter_date(value: datetime) -> str:
    """Format a datetime the way the generator writes it: ``2023-04-01 10:00:00 +0800``."""
    return value.strftime("%Y-%m-%d %H:%M:%S %z")


__all__ = [
    "POST_FILENAME_RE",
    "coerce_datetime",
    "format_front_matter_date",
    "local_date",
    "parse_post_filename",
]

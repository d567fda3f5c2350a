"""Timestamp parsing and formatting helpers."""

import calendar
import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional, Union


def to_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime, treating naive values as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: Union[str, time.struct_time, None]) -> Optional[datetime]:
    """Parse a feed timestamp into an aware UTC datetime.

    Accepts feedparser's ``*_parsed`` struct_time values, RFC 2822 strings
    (common in RSS) and ISO 8601 strings (Atom).

    Args:
        value: Raw timestamp

    Returns:
        datetime if parsed successfully, None otherwise
    """
    if not value:
        return None

    # feedparser normalizes parsed dates to UTC struct_time
    if isinstance(value, (time.struct_time, tuple)):
        try:
            return datetime.fromtimestamp(calendar.timegm(value), tz=timezone.utc)
        except (ValueError, TypeError, OverflowError):
            return None

    value = value.strip()

    try:
        return to_utc(parsedate_to_datetime(value))
    except (ValueError, TypeError, IndexError):
        pass

    try:
        return to_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
    except ValueError:
        pass

    return None


def format_timestamp(value: datetime) -> str:
    """Format a datetime as RFC 3339 with millisecond precision.

    >>> format_timestamp(datetime(2025, 1, 1, tzinfo=timezone.utc))
    '2025-01-01T00:00:00.000Z'
    """
    value = to_utc(value)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)

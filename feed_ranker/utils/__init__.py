"""Utility helpers for feed_ranker."""

from .timestamps import format_timestamp, parse_timestamp, to_utc, utc_now

__all__ = [
    "format_timestamp",
    "parse_timestamp",
    "to_utc",
    "utc_now",
]

"""Services for feed_ranker."""

from .aggregator import aggregate_feeds, aggregate_opml
from .atom_writer import build_atom_feed
from .feed_parser import fetch_feed, parse_feed_document
from .opml_reader import parse_opml, read_opml
from .ranking import estimate_cadence, feed_cadences, rank_posts, score_post

__all__ = [
    "aggregate_feeds",
    "aggregate_opml",
    "build_atom_feed",
    "estimate_cadence",
    "feed_cadences",
    "fetch_feed",
    "parse_feed_document",
    "parse_opml",
    "rank_posts",
    "read_opml",
    "score_post",
]

"""Feed ranker MCP tools.

This module provides MCP tools for reading subscription lists, ranking their
posts and building a combined Atom feed.

NOTE: Never use Optional parameters in MCP tools - they break MCP clients.
Use empty string "" for optional strings and 0 for optional integers.
"""

from pathlib import Path
from typing import Any, Dict

from mcp.server.fastmcp import Context

from feed_ranker.config import get_config
from feed_ranker.errors import FeedRankerError
from feed_ranker.logging_config import get_logger
from feed_ranker.models.schemas import AggregationResult
from feed_ranker.services.aggregator import aggregate_feeds
from feed_ranker.services.atom_writer import build_atom_feed
from feed_ranker.services.opml_reader import read_opml
from feed_ranker.services.ranking import feed_cadences, rank_posts, score_post


def _failures(result: AggregationResult) -> list:
    return [
        {"feed_url": f.feed_url, "title": f.title, "error": f.error}
        for f in result.failures
    ]


async def _aggregate(opml_path: str) -> AggregationResult:
    subscriptions = read_opml(opml_path)
    return await aggregate_feeds(subscriptions.feeds, config=get_config())


async def list_subscriptions(opml_path: str, ctx: Context = None) -> Dict[str, Any]:
    """List the feeds in an OPML subscription list without fetching them.

    Outlines without an xmlUrl, or typed as something other than rss/atom,
    are left out. Nested folders are flattened in document order.

    Args:
        opml_path: Path to the OPML file
        ctx: MCP Context object (injected automatically)

    Returns:
        Dictionary with:
        - success: bool
        - title: title from the OPML head (may be null)
        - count: number of feeds
        - feeds: list of objects with title, feed_url, site_url
        - error: string if success is False
    """
    logger = get_logger(__name__)
    logger.info(f"list_subscriptions called: opml_path={opml_path}")

    try:
        subscriptions = read_opml(opml_path)
    except (FeedRankerError, OSError) as e:
        return {"success": False, "error": str(e)}

    return {
        "success": True,
        "title": subscriptions.title,
        "count": len(subscriptions.feeds),
        "feeds": [
            {"title": d.title, "feed_url": d.feed_url, "site_url": d.site_url}
            for d in subscriptions.feeds
        ],
    }


async def rank_subscriptions(
    opml_path: str,
    limit: int = 50,
    ctx: Context = None,
) -> Dict[str, Any]:
    """Fetch every feed in an OPML file and return one ranked list of posts.

    Posts are ordered by publish date pushed forward by their feed's average
    posting interval, so infrequent feeds are not buried by busy ones. Posts
    without a date are listed first. Feeds that fail to fetch or parse are
    skipped and reported under `failures`.

    Args:
        opml_path: Path to the OPML file
        limit: Maximum number of posts to return (0 returns all)
        ctx: MCP Context object (injected automatically)

    Returns:
        Dictionary with:
        - success: bool
        - feeds_ranked: number of feeds that contributed posts
        - failures: list of feeds that could not be fetched, with error
        - count: number of posts returned
        - cadences: map of feed URL to average hours between posts (null if unknown)
        - posts: list of objects with title, url, date, feed_title, feed_url, score
        - error: string if success is False
    """
    logger = get_logger(__name__)
    logger.info(f"rank_subscriptions called: opml_path={opml_path}, limit={limit}")

    try:
        result = await _aggregate(opml_path)
    except (FeedRankerError, OSError) as e:
        return {"success": False, "error": str(e)}

    cadences = feed_cadences(result.feeds)
    ranked = rank_posts(result.feeds)
    if limit > 0:
        ranked = ranked[:limit]

    posts = []
    for post in ranked:
        score = score_post(post, cadences)
        posts.append({
            "title": post.title,
            "url": post.url,
            "date": post.date.isoformat() if post.date else None,
            "feed_title": post.feed.title,
            "feed_url": post.feed.url,
            "score": score.isoformat() if score else None,
        })

    return {
        "success": True,
        "feeds_ranked": len(result.feeds),
        "failures": _failures(result),
        "count": len(posts),
        "cadences": {
            url: round(cadence.total_seconds() / 3600, 2) if cadence is not None else None
            for url, cadence in cadences.items()
        },
        "posts": posts,
    }


async def combine_subscriptions(
    opml_path: str,
    title: str = "",
    feed_id: str = "",
    output_path: str = "",
    ctx: Context = None,
) -> Dict[str, Any]:
    """Build a single Atom feed from every feed in an OPML file.

    Entries appear in ranked order and each keeps an <atom:source> block
    describing the feed it came from.

    Args:
        opml_path: Path to the OPML file
        title: Title of the combined feed (empty string uses the configured default)
        feed_id: Atom id of the combined feed (empty string uses the first entry's feed URL)
        output_path: Write the document to this file (empty string returns it inline)
        ctx: MCP Context object (injected automatically)

    Returns:
        Dictionary with:
        - success: bool
        - entries: number of entries written
        - failures: list of feeds that could not be fetched, with error
        - atom: the Atom document (only when output_path is empty)
        - output_path: file written (only when output_path is given)
        - error: string if success is False
    """
    logger = get_logger(__name__)
    logger.info(f"combine_subscriptions called: opml_path={opml_path}, output_path={output_path}")

    try:
        result = await _aggregate(opml_path)
    except (FeedRankerError, OSError) as e:
        return {"success": False, "error": str(e)}

    ranked = rank_posts(result.feeds)
    document = build_atom_feed(
        ranked,
        title=title or get_config().default_title,
        feed_id=feed_id or None,
    )

    response = {
        "success": True,
        "entries": len(ranked),
        "failures": _failures(result),
    }

    if output_path:
        try:
            Path(output_path).write_text(document, encoding="utf-8")
        except OSError as e:
            return {"success": False, "error": f"Could not write {output_path}: {e}"}
        response["output_path"] = output_path
    else:
        response["atom"] = document

    return response


# List of feed tools for registration
feed_tools = [
    list_subscriptions,
    rank_subscriptions,
    combine_subscriptions,
]

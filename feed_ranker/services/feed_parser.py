"""Feed parser service.

This module fetches RSS/Atom feeds and normalizes them into Feed and Post values.
The feed format is detected once per document and handled by a format adapter,
so nothing downstream needs to know whether a post came from RSS or Atom.
"""

from datetime import datetime
from typing import Optional, Union

import feedparser
import httpx

from feed_ranker.config import ServerConfig, get_config
from feed_ranker.errors import FeedFetchError, FeedParseError
from feed_ranker.logging_config import get_logger
from feed_ranker.models.schemas import Feed
from feed_ranker.utils.timestamps import parse_timestamp


class FeedAdapter:
    """Reads feed and entry fields out of a feedparser result.

    Subclasses override the fields whose location differs between formats.
    """

    format_name = "feed"

    def feed_title(self, meta: dict) -> str:
        return (meta.get("title") or "").strip()

    def feed_description(self, meta: dict) -> Optional[str]:
        return meta.get("subtitle") or None

    def site_link(self, meta: dict) -> Optional[str]:
        return meta.get("link") or None

    def last_build_date(self, meta: dict) -> Optional[str]:
        return meta.get("updated") or None

    def self_link(self, meta: dict) -> str:
        for link in meta.get("links", []):
            if link.get("rel") == "self" and link.get("href"):
                return link["href"]
        return ""

    def entry_title(self, entry: dict) -> str:
        return (entry.get("title") or "").strip()

    def entry_link(self, entry: dict) -> str:
        return (entry.get("link") or "").strip()

    def entry_guid(self, entry: dict) -> Optional[str]:
        return entry.get("id") or None

    def entry_creator(self, entry: dict) -> Optional[str]:
        return entry.get("author") or None

    def entry_content(self, entry: dict) -> Optional[str]:
        for block in entry.get("content", []):
            if block.get("value"):
                return block["value"]
        return entry.get("summary") or None

    def entry_date(self, entry: dict) -> Optional[datetime]:
        for field in ("published", "updated"):
            parsed = parse_timestamp(entry.get(f"{field}_parsed"))
            if parsed is None:
                parsed = parse_timestamp(entry.get(field))
            if parsed is not None:
                return parsed
        return None


class RssAdapter(FeedAdapter):
    """RSS 0.9x, 1.0 (RDF) and 2.0 channels."""

    format_name = "rss"

    def entry_link(self, entry: dict) -> str:
        link = super().entry_link(entry)
        # A permalink guid stands in for a missing <link>
        if not link and entry.get("guidislink"):
            link = entry.get("id") or ""
        return link


class AtomAdapter(FeedAdapter):
    """Atom 0.3 and 1.0 feeds."""

    format_name = "atom"

    def entry_link(self, entry: dict) -> str:
        link = super().entry_link(entry)
        if link:
            return link
        # Try alternate link
        for candidate in entry.get("links", []):
            if candidate.get("rel", "alternate") == "alternate" and candidate.get("href"):
                return candidate["href"]
        return ""


def adapter_for(version: str) -> Optional[FeedAdapter]:
    """Pick the adapter for a feedparser ``version`` string, or None if unknown."""
    if version.startswith("rss"):
        return RssAdapter()
    if version.startswith("atom"):
        return AtomAdapter()
    return None


def parse_feed_document(content: Union[str, bytes], feed_url: str = "") -> Feed:
    """Normalize an RSS/Atom document into a Feed with its posts.

    Args:
        content: Raw feed document
        feed_url: Endpoint the document came from; used as the feed's identity.
            If empty, the document's rel="self" link is used instead.

    Returns:
        Feed whose posts are in source order and point back at it

    Raises:
        FeedParseError: If the document is not a recognizable feed
    """
    logger = get_logger(__name__)

    parsed = feedparser.parse(content, sanitize_html=False)

    if parsed.bozo and not parsed.entries:
        raise FeedParseError(feed_url, f"Feed parsing error: {parsed.get('bozo_exception')}")

    adapter = adapter_for(parsed.get("version") or "")
    if adapter is None:
        raise FeedParseError(feed_url, "Unrecognized feed format")

    meta = parsed.feed
    feed = Feed(
        title=adapter.feed_title(meta),
        url=feed_url or adapter.self_link(meta),
        description=adapter.feed_description(meta),
        site_link=adapter.site_link(meta),
        last_build_date=adapter.last_build_date(meta),
    )

    for entry in parsed.entries:
        feed.add_post(
            title=adapter.entry_title(entry),
            url=adapter.entry_link(entry),
            date=adapter.entry_date(entry),
            content=adapter.entry_content(entry),
            guid=adapter.entry_guid(entry),
            creator=adapter.entry_creator(entry),
        )

    logger.info(f"Parsed {len(feed.posts)} posts from {adapter.format_name} feed {feed.url or '(no url)'}")
    return feed


async def fetch_feed(
    feed_url: str,
    client: Optional[httpx.AsyncClient] = None,
    config: Optional[ServerConfig] = None,
) -> Feed:
    """Fetch and normalize a feed.

    Args:
        feed_url: URL of the feed to fetch
        client: Shared HTTP client; a short-lived one is created if omitted
        config: Configuration for timeout and User-Agent

    Returns:
        Populated Feed

    Raises:
        FeedFetchError: If the URL cannot be retrieved
        FeedParseError: If the response is not a recognizable feed
    """
    if client is not None:
        return await _fetch_with_client(client, feed_url)

    async with create_http_client(config) as own_client:
        return await _fetch_with_client(own_client, feed_url)


def create_http_client(config: Optional[ServerConfig] = None) -> httpx.AsyncClient:
    """Build the HTTP client used for feed fetches."""
    config = config or get_config()
    return httpx.AsyncClient(
        follow_redirects=True,
        timeout=config.fetch_timeout,
        headers={"User-Agent": config.user_agent},
    )


async def _fetch_with_client(client: httpx.AsyncClient, feed_url: str) -> Feed:
    logger = get_logger(__name__)
    logger.info(f"Fetching feed: {feed_url}")

    try:
        response = await client.get(feed_url)
        response.raise_for_status()
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.warning(f"Failed to fetch feed {feed_url}: {e}")
        raise FeedFetchError(feed_url, f"Failed to fetch feed: {e}") from e

    return parse_feed_document(response.content, feed_url=feed_url)

"""Aggregation service.

Fetches every feed of a subscription list concurrently. A feed that fails to
fetch or parse is recorded and left out; the others still come through.
"""

import asyncio
from pathlib import Path
from typing import Iterable, Optional, Union

import httpx

from feed_ranker.config import ServerConfig, get_config
from feed_ranker.errors import FeedError
from feed_ranker.logging_config import get_logger
from feed_ranker.models.schemas import (
    AggregationResult,
    Feed,
    FeedDescriptor,
    FeedFailure,
)
from feed_ranker.services.feed_parser import create_http_client, fetch_feed
from feed_ranker.services.opml_reader import read_opml


async def _fetch_one(
    client: httpx.AsyncClient,
    semaphore: asyncio.Semaphore,
    descriptor: FeedDescriptor,
) -> Union[Feed, FeedFailure]:
    logger = get_logger(__name__)

    async with semaphore:
        try:
            feed = await fetch_feed(descriptor.feed_url, client=client)
        except FeedError as e:
            logger.warning(f"Skipping feed {descriptor.title or descriptor.feed_url}: {e}")
            return FeedFailure(
                feed_url=descriptor.feed_url,
                title=descriptor.title,
                error=str(e),
            )
        except Exception as e:
            logger.error(f"Unexpected error fetching {descriptor.feed_url}: {e}")
            return FeedFailure(
                feed_url=descriptor.feed_url,
                title=descriptor.title,
                error=f"{type(e).__name__}: {e}",
            )

    if not feed.title and descriptor.title:
        feed.title = descriptor.title
    return feed


async def aggregate_feeds(
    descriptors: Iterable[FeedDescriptor],
    config: Optional[ServerConfig] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> AggregationResult:
    """Fetch and normalize all feeds.

    Args:
        descriptors: Feeds to fetch
        config: Configuration for concurrency, timeout and User-Agent
        client: Shared HTTP client; one is created from ``config`` if omitted

    Returns:
        AggregationResult with feeds in descriptor order and per-feed failures
    """
    logger = get_logger(__name__)
    config = config or get_config()
    descriptors = list(descriptors)

    if not descriptors:
        return AggregationResult()

    semaphore = asyncio.Semaphore(config.max_concurrency)

    if client is None:
        async with create_http_client(config) as own_client:
            outcomes = await asyncio.gather(
                *(_fetch_one(own_client, semaphore, d) for d in descriptors)
            )
    else:
        outcomes = await asyncio.gather(
            *(_fetch_one(client, semaphore, d) for d in descriptors)
        )

    result = AggregationResult()
    for outcome in outcomes:
        if isinstance(outcome, FeedFailure):
            result.failures.append(outcome)
        else:
            result.feeds.append(outcome)

    logger.info(
        f"Aggregated {len(result.feeds)} feeds ({result.post_count} posts), "
        f"{len(result.failures)} failed"
    )
    return result


async def aggregate_opml(
    path: Union[str, Path],
    config: Optional[ServerConfig] = None,
) -> AggregationResult:
    """Read an OPML file and aggregate every feed it lists.

    Raises:
        OSError: If the file cannot be read
        OpmlParseError: If the file is not OPML
    """
    subscriptions = read_opml(path)
    return await aggregate_feeds(subscriptions.feeds, config=config)

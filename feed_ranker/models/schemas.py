"""Data models for feed_ranker.

This module defines the core data structures for subscriptions, feeds and posts.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class FeedDescriptor:
    """Represents one feed entry from a subscription list."""

    title: str
    feed_url: str
    site_url: Optional[str] = None
    text: Optional[str] = None


@dataclass
class SubscriptionList:
    """Represents a parsed OPML subscription list."""

    title: Optional[str] = None
    date_created: Optional[str] = None
    owner_email: Optional[str] = None
    feeds: List[FeedDescriptor] = field(default_factory=list)


@dataclass
class Feed:
    """Represents one subscribed source and its posts.

    The feed URL is the identity key used by the ranking engine. Once
    populated, a feed is treated as read-only.
    """

    title: str
    url: str
    description: Optional[str] = None
    site_link: Optional[str] = None
    last_build_date: Optional[str] = None
    posts: List["Post"] = field(default_factory=list, repr=False)

    def add_post(
        self,
        title: str,
        url: str,
        date: Optional[datetime] = None,
        content: Optional[str] = None,
        guid: Optional[str] = None,
        creator: Optional[str] = None,
    ) -> "Post":
        """Create a post bound to this feed and append it.

        Returns:
            The new Post, whose ``feed`` is this instance
        """
        post = Post(
            title=title,
            url=url,
            date=date,
            content=content,
            guid=guid,
            creator=creator,
            feed=self,
        )
        self.posts.append(post)
        return post


@dataclass
class Post:
    """Represents one item from a feed.

    ``date`` is timezone-aware (UTC) or None when the source had no usable
    date. ``feed`` points back at the owning Feed and is excluded from
    equality and repr.
    """

    title: str
    url: str
    date: Optional[datetime] = None
    content: Optional[str] = None
    guid: Optional[str] = None
    creator: Optional[str] = None
    # Always set by Feed.add_post; None only on hand-built posts, which the
    # ranker rejects with RankingPreconditionError
    feed: Optional[Feed] = field(default=None, repr=False, compare=False)


@dataclass
class FeedFailure:
    """A feed that could not be fetched or parsed."""

    feed_url: str
    title: str
    error: str


@dataclass
class AggregationResult:
    """Outcome of fetching and normalizing a set of subscriptions."""

    feeds: List[Feed] = field(default_factory=list)
    failures: List[FeedFailure] = field(default_factory=list)

    @property
    def post_count(self) -> int:
        return sum(len(feed.posts) for feed in self.feeds)

"""Exception types for feed_ranker."""


class FeedRankerError(Exception):
    """Base class for all feed_ranker errors."""


class OpmlParseError(FeedRankerError):
    """The subscription list is not a readable OPML document."""


class FeedError(FeedRankerError):
    """A single feed could not be turned into a Feed value."""

    def __init__(self, feed_url: str, message: str):
        super().__init__(message)
        self.feed_url = feed_url


class FeedFetchError(FeedError):
    """The feed URL could not be retrieved."""


class FeedParseError(FeedError):
    """The retrieved document is not a recognizable RSS or Atom feed."""


class RankingPreconditionError(FeedRankerError):
    """A post references a feed that was not passed to the ranking engine."""

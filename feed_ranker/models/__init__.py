"""Models for feed_ranker."""

from .schemas import (
    AggregationResult,
    Feed,
    FeedDescriptor,
    FeedFailure,
    Post,
    SubscriptionList,
)

__all__ = [
    "AggregationResult",
    "Feed",
    "FeedDescriptor",
    "FeedFailure",
    "Post",
    "SubscriptionList",
]

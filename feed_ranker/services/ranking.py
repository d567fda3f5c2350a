"""Ranking engine.

Orders posts from many feeds into one stream. The sort key is a post's date
pushed forward by its feed's typical posting interval (its cadence), so a feed
that posts once a week is not buried under a feed that posts hourly.

Everything here is pure: no I/O, and the input feeds are never modified.
"""

from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from feed_ranker.errors import RankingPreconditionError
from feed_ranker.models.schemas import Feed, Post


def estimate_cadence(feed: Feed) -> Optional[timedelta]:
    """Compute the average interval between a feed's dated posts.

    Args:
        feed: Feed whose posts to inspect

    Returns:
        Mean gap between consecutive dates (oldest first), or None if fewer
        than two posts carry a date
    """
    dates = sorted(post.date for post in feed.posts if post.date is not None)

    if len(dates) < 2:
        return None

    intervals = [current - previous for previous, current in zip(dates, dates[1:])]
    return sum(intervals, timedelta(0)) / len(intervals)


def feed_cadences(feeds: Iterable[Feed]) -> Dict[str, Optional[timedelta]]:
    """Compute each feed's cadence once, keyed by feed URL.

    When two Feed objects share a URL, the first one seen wins.
    """
    cadences: Dict[str, Optional[timedelta]] = {}
    for feed in feeds:
        if feed.url not in cadences:
            cadences[feed.url] = estimate_cadence(feed)
    return cadences


def score_post(post: Post, cadences: Dict[str, Optional[timedelta]]) -> Optional[datetime]:
    """Return ``post.date + cadence``, or None for a dateless post.

    A feed without a cadence contributes no offset. Scores that would pass
    ``datetime.max`` are clamped to it.

    Raises:
        RankingPreconditionError: If the post's feed is not in ``cadences``
    """
    if post.feed is None or post.feed.url not in cadences:
        raise RankingPreconditionError(
            f"Post {post.title!r} belongs to a feed that was not passed to the ranker"
        )

    if post.date is None:
        return None

    try:
        return post.date + (cadences[post.feed.url] or timedelta(0))
    except OverflowError:
        # Far-future dates saturate at the latest representable time
        return datetime.max.replace(tzinfo=post.date.tzinfo)


def rank_posts(feeds: Iterable[Feed]) -> List[Post]:
    """Rank all posts across feeds into one list.

    Posts without a date come first, in their original order. Dated posts
    follow in descending score. The sort is stable, so equal scores keep the
    order in which feeds and posts were supplied.

    Args:
        feeds: Fully populated feeds

    Returns:
        New list containing every post exactly once
    """
    feeds = list(feeds)
    cadences = feed_cadences(feeds)

    undated: List[Post] = []
    dated = []
    for feed in feeds:
        for post in feed.posts:
            score = score_post(post, cadences)
            if score is None:
                undated.append(post)
            else:
                dated.append((score, post))

    # Unknown dates rank ahead of everything rather than being dropped
    dated.sort(key=lambda scored: scored[0], reverse=True)
    return undated + [post for _, post in dated]

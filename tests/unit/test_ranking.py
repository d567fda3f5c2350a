"""Unit tests for the cadence estimator and ranking engine."""

from datetime import datetime, timedelta, timezone

import pytest

from feed_ranker.errors import RankingPreconditionError
from feed_ranker.models.schemas import Feed, Post
from feed_ranker.services.ranking import (
    estimate_cadence,
    feed_cadences,
    rank_posts,
    score_post,
)

from conftest import DAY, days_ago, make_feed


def titles(posts):
    return [post.title for post in posts]


class TestEstimateCadence:
    """Tests for the per-feed cadence estimator."""

    def test_average_of_consecutive_intervals(self):
        """Test the mean gap between sorted dates."""
        feed = make_feed("Feed", "f", [
            ("a", days_ago(0)),
            ("b", days_ago(1)),
            ("c", days_ago(4)),
        ])

        assert estimate_cadence(feed) == timedelta(days=2)

    def test_unsorted_dates_are_sorted_first(self):
        """Test that source order does not affect the result."""
        feed = make_feed("Feed", "f", [
            ("newest", days_ago(0)),
            ("oldest", days_ago(6)),
            ("middle", days_ago(3)),
        ])

        assert estimate_cadence(feed) == timedelta(days=3)

    def test_two_dated_posts_give_their_difference(self):
        feed = make_feed("Feed", "f", [("a", days_ago(5)), ("b", days_ago(2))])

        assert estimate_cadence(feed) == timedelta(days=3)

    def test_single_dated_post_has_no_cadence(self):
        feed = make_feed("Feed", "f", [("a", days_ago(1))])

        assert estimate_cadence(feed) is None

    def test_empty_feed_has_no_cadence(self):
        assert estimate_cadence(Feed(title="Empty", url="f")) is None

    def test_dateless_posts_are_ignored(self):
        """Test that only dated posts count toward the two-date minimum."""
        feed = make_feed("Feed", "f", [
            ("dated", days_ago(1)),
            ("undated 1", None),
            ("undated 2", None),
        ])

        assert estimate_cadence(feed) is None

    def test_identical_dates_give_zero_not_none(self):
        """Test that a real zero interval is distinct from no cadence."""
        feed = make_feed("Feed", "f", [("a", days_ago(1)), ("b", days_ago(1))])

        assert estimate_cadence(feed) == timedelta(0)


class TestFeedCadences:
    """Tests for the per-URL cadence cache."""

    def test_keyed_by_feed_url(self):
        busy = make_feed("Busy", "busy", [("a", days_ago(0)), ("b", days_ago(1))])
        quiet = make_feed("Quiet", "quiet", [("a", days_ago(0))])

        assert feed_cadences([busy, quiet]) == {"busy": DAY, "quiet": None}

    def test_first_feed_wins_when_urls_collide(self):
        first = make_feed("First", "same", [("a", days_ago(0)), ("b", days_ago(2))])
        second = make_feed("Second", "same", [("a", days_ago(0)), ("b", days_ago(10))])

        assert feed_cadences([first, second]) == {"same": timedelta(days=2)}


class TestScorePost:
    """Tests for post scoring."""

    def test_score_adds_cadence(self):
        feed = make_feed("Feed", "f", [("old", days_ago(2)), ("new", days_ago(0))])
        cadences = feed_cadences([feed])

        assert score_post(feed.posts[1], cadences) == days_ago(-2)

    def test_no_cadence_means_no_offset(self):
        feed = make_feed("Feed", "f", [("only", days_ago(1))])

        assert score_post(feed.posts[0], feed_cadences([feed])) == days_ago(1)

    def test_dateless_post_has_no_score(self):
        feed = make_feed("Feed", "f", [("undated", None)])

        assert score_post(feed.posts[0], feed_cadences([feed])) is None


class TestRankPosts:
    """Tests for the ranking engine."""

    def test_ranks_posts_from_multiple_feeds(self):
        """Test that a sparse feed's posts are pulled forward by its cadence."""
        feed1 = make_feed("Feed 1", "https://example.com/feed1.xml", [
            ("Post 1-1", days_ago(4)),
            ("Post 1-2", days_ago(2)),
            ("Post 1-3", days_ago(0)),
        ])
        feed2 = make_feed("Feed 2", "https://example.com/feed2.xml", [
            ("Post 2-1", days_ago(1)),
        ])

        ranked = rank_posts([feed1, feed2])

        assert titles(ranked) == ["Post 1-3", "Post 1-2", "Post 2-1", "Post 1-1"]

    def test_concrete_scenario(self):
        """Test the worked example with calendar dates."""
        def day(n):
            return datetime(2025, 1, n, tzinfo=timezone.utc)

        f1 = make_feed("F1", "f1", [
            ("oldest-F1", day(1)),
            ("middle-F1", day(3)),
            ("newest-F1", day(5)),
        ])
        f2 = make_feed("F2", "f2", [("F2-post", day(4))])

        ranked = rank_posts([f1, f2])

        assert titles(ranked) == ["newest-F1", "middle-F1", "F2-post", "oldest-F1"]

    def test_posts_without_dates_come_first(self):
        feed = make_feed("Feed", "f", [
            ("Post with date", days_ago(0)),
            ("Post without date", None),
        ])

        assert titles(rank_posts([feed])) == ["Post without date", "Post with date"]

    def test_dateless_posts_keep_source_order(self):
        feed = make_feed("Feed", "f", [
            ("Post with date", days_ago(0)),
            ("Post without date 1", None),
            ("Post without date 2", None),
        ])

        assert titles(rank_posts([feed])) == [
            "Post without date 1",
            "Post without date 2",
            "Post with date",
        ]

    def test_dateless_posts_precede_every_dated_post_across_feeds(self):
        future = make_feed("Future", "future", [("far future", days_ago(-365))])
        undated = make_feed("Undated", "undated", [("no date", None)])

        ranked = rank_posts([future, undated])

        assert titles(ranked) == ["no date", "far future"]

    def test_all_posts_without_dates(self):
        feed = make_feed("Feed", "f", [("Post 1", None), ("Post 2", None)])

        assert titles(rank_posts([feed])) == ["Post 1", "Post 2"]

    def test_singleton_feed_gets_no_boost(self):
        """Test that ties between equal scores keep input order."""
        feed1 = make_feed("Feed 1", "f1", [("Post 1-1", days_ago(1))])
        feed2 = make_feed("Feed 2", "f2", [
            ("Post 2-1", days_ago(3)),
            ("Post 2-2", days_ago(1)),
        ])

        ranked = rank_posts([feed1, feed2])

        assert titles(ranked) == ["Post 2-2", "Post 1-1", "Post 2-1"]

    def test_score_is_date_plus_average_interval(self):
        feed = make_feed("Feed", "f", [
            ("Old post", days_ago(6)),
            ("Recent post", days_ago(3)),
            ("Latest post", days_ago(0)),
        ])

        assert titles(rank_posts([feed])) == ["Latest post", "Recent post", "Old post"]

    def test_empty_feeds(self):
        empty = Feed(title="Empty Feed", url="empty")
        feed = make_feed("Feed", "f", [("Post", days_ago(0))])

        assert titles(rank_posts([empty, feed])) == ["Post"]

    def test_no_feeds(self):
        assert rank_posts([]) == []

    def test_completeness(self):
        """Test that every post appears exactly once."""
        feed1 = make_feed("Feed 1", "f1", [
            ("a", days_ago(3)), ("b", None), ("c", days_ago(1)),
        ])
        feed2 = make_feed("Feed 2", "f2", [("d", days_ago(2)), ("e", None)])

        ranked = rank_posts([feed1, feed2])

        assert len(ranked) == 5
        assert sorted(map(id, ranked)) == sorted(map(id, feed1.posts + feed2.posts))

    def test_deterministic(self):
        feed1 = make_feed("Feed 1", "f1", [("a", days_ago(3)), ("b", days_ago(1))])
        feed2 = make_feed("Feed 2", "f2", [("c", days_ago(2)), ("d", None)])

        assert titles(rank_posts([feed1, feed2])) == titles(rank_posts([feed1, feed2]))

    def test_does_not_mutate_feeds(self):
        feed = make_feed("Feed", "f", [("old", days_ago(2)), ("new", days_ago(0))])
        before = list(feed.posts)

        rank_posts([feed])

        assert feed.posts == before
        assert all(post.feed is feed for post in feed.posts)

    def test_accepts_generator(self):
        feed = make_feed("Feed", "f", [("a", days_ago(0))])

        assert titles(rank_posts(f for f in [feed])) == ["a"]

    def test_unregistered_feed_is_a_precondition_error(self):
        """Test that a post whose feed was not passed in fails fast."""
        registered = make_feed("Registered", "registered", [("ok", days_ago(0))])
        stray = make_feed("Stray", "stray", [("stray", days_ago(1))])
        registered.posts.append(stray.posts[0])

        with pytest.raises(RankingPreconditionError):
            rank_posts([registered])

    def test_far_future_date_saturates_instead_of_overflowing(self):
        """Test that a score past datetime.max is clamped and still ranked."""
        broken = make_feed("Broken clock", "broken", [
            ("ancient", datetime(2000, 1, 1, tzinfo=timezone.utc)),
            ("far future", datetime(9999, 12, 1, tzinfo=timezone.utc)),
        ])
        normal = make_feed("Normal", "normal", [("today", days_ago(0))])

        ranked = rank_posts([normal, broken])

        assert titles(ranked) == ["far future", "ancient", "today"]
        cadences = feed_cadences([broken])
        assert score_post(broken.posts[1], cadences) == datetime.max.replace(tzinfo=timezone.utc)

    def test_post_without_feed_is_a_precondition_error(self):
        feed = make_feed("Feed", "f", [("bound", days_ago(0))])
        feed.posts.append(Post(title="loose", url="https://example.com/loose", date=days_ago(1)))

        assert feed.posts[0].feed is feed
        with pytest.raises(RankingPreconditionError):
            rank_posts([feed])

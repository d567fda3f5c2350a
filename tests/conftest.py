"""Shared fixtures for feed_ranker tests."""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from feed_ranker.config import reset_config
from feed_ranker.models.schemas import Feed


FIXTURES = Path(__file__).parent / "fixtures"

BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)
DAY = timedelta(days=1)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    """Isolate tests from FEED_RANKER_* variables and the cached config."""
    for name in [
        "FEED_RANKER_NAME",
        "FEED_RANKER_LOG_LEVEL",
        "FEED_RANKER_FETCH_TIMEOUT",
        "FEED_RANKER_MAX_CONCURRENCY",
        "FEED_RANKER_USER_AGENT",
        "FEED_RANKER_DEFAULT_TITLE",
    ]:
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


def read_fixture(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8")


def make_feed(title: str, url: str, posts: list, **meta) -> Feed:
    """Build a Feed from (title, date) tuples or dicts of post fields."""
    feed = Feed(title=title, url=url, **meta)
    for post in posts:
        if isinstance(post, tuple):
            post_title, date = post
            post = {"title": post_title, "date": date}
        fields = {"url": f"{url}#{post['title']}", **post}
        feed.add_post(**fields)
    return feed


def days_ago(days: float) -> datetime:
    return BASE_TIME - days * DAY


def mock_response(content: str, status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.content = content.encode("utf-8")
    response.text = content
    response.raise_for_status = MagicMock()
    return response


def mock_http_client(routes: dict) -> AsyncMock:
    """AsyncClient stand-in that serves ``routes`` (url -> response or exception)."""

    async def mock_get(url, **kwargs):
        outcome = routes[url]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    mock_instance = AsyncMock()
    mock_instance.get = mock_get
    mock_instance.__aenter__ = AsyncMock(return_value=mock_instance)
    mock_instance.__aexit__ = AsyncMock(return_value=None)
    return mock_instance

"""Shared fixtures for feed_aggregator tests."""

from datetime import datetime, timedelta, timezone
from typing import List

import pytest

from feed_aggregator.items import Feed
from feed_aggregator.models import Article


BASE_DATE = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_article(guid: str, day: int, is_read: bool = False) -> Article:
    """Article dated ``day`` days after BASE_DATE."""
    return Article(
        guid=guid,
        date=BASE_DATE + timedelta(days=day),
        title=f"Article {guid}",
        link=f"https://example.com/{guid}",
        is_read=is_read,
    )


class Recorder:
    """Collects the arguments of every emission of the signals it is attached to."""

    def __init__(self):
        self.calls: List[tuple] = []

    def __call__(self, *args):
        self.calls.append(args)

    def __len__(self):
        return len(self.calls)

    @property
    def args(self) -> List[object]:
        return [call[0] for call in self.calls]


@pytest.fixture
def recorder():
    return Recorder


@pytest.fixture
def feed_factory():
    """Build a Feed at ``path`` holding articles dated by ``days``."""

    def _make(path: str, days=(), read_days=(), url: str = "") -> Feed:
        slug = path.replace("\\", "/")
        feed = Feed(url or f"https://example.com/{slug}.xml", path)
        for day in days:
            feed.add_article(make_article(f"{path}-{day}", day))
        for day in read_days:
            feed.add_article(make_article(f"{path}-read-{day}", day, is_read=True))
        return feed

    return _make


@pytest.fixture
def article_factory():
    return make_article


@pytest.fixture
def anyio_backend():
    """Background fetches are scheduled with asyncio, so only run on asyncio."""
    return "asyncio"

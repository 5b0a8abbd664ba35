"""Unit tests for feed services.

Tests for feed parsing and the background fetcher.
"""

import asyncio
import pytest
from unittest.mock import AsyncMock, patch, MagicMock
from datetime import datetime, timezone

from feed_aggregator.config import AggregatorConfig
from feed_aggregator.items import Feed, Folder
from feed_aggregator.services.feed_fetcher import FeedFetcher
from feed_aggregator.services.feed_parser import (
    fetch_feed,
    parse_feed,
    ParsedArticle,
    ParsedFeed,
    _parse_date,
)


# Mark all tests as async
pytestmark = pytest.mark.anyio


RSS_FEED = """<?xml version="1.0"?>
<rss version="2.0">
    <channel>
        <title>Test Blog</title>
        <item>
            <title>First Post</title>
            <link>https://example.com/post1</link>
            <guid>post-1</guid>
            <author>jane@example.com (Jane)</author>
            <description>Hello</description>
            <pubDate>Mon, 01 Jan 2024 12:00:00 GMT</pubDate>
        </item>
        <item>
            <title>Second Post</title>
            <link>https://example.com/post2</link>
        </item>
    </channel>
</rss>
"""


def _mock_client(mock_client, response=None, side_effect=None):
    mock_instance = AsyncMock()
    mock_instance.get = AsyncMock(return_value=response, side_effect=side_effect)
    mock_instance.__aenter__ = AsyncMock(return_value=mock_instance)
    mock_instance.__aexit__ = AsyncMock(return_value=None)
    mock_client.return_value = mock_instance
    return mock_instance


def _response(text):
    mock_response = MagicMock()
    mock_response.status_code = 200
    mock_response.text = text
    mock_response.raise_for_status = MagicMock()
    return mock_response


class TestFeedParser:
    """Tests for RSS/Atom feed parsing."""

    async def test_parse_rss_feed(self):
        """Test parsing a standard RSS 2.0 feed."""
        with patch("feed_aggregator.services.feed_parser.httpx.AsyncClient") as mock_client:
            _mock_client(mock_client, _response(RSS_FEED))

            articles = await parse_feed("https://example.com/feed.xml")

            assert len(articles) == 2
            assert articles[0].title == "First Post"
            assert articles[0].url == "https://example.com/post1"
            assert articles[0].guid == "post-1"
            assert articles[0].description == "Hello"
            assert articles[0].published_date == datetime(2024, 1, 1, 12, tzinfo=timezone.utc)
            assert articles[1].title == "Second Post"
            assert articles[1].published_date is None

    async def test_fetch_feed_returns_title(self):
        """Test that the channel title is reported."""
        with patch("feed_aggregator.services.feed_parser.httpx.AsyncClient") as mock_client:
            _mock_client(mock_client, _response(RSS_FEED))

            parsed = await fetch_feed("https://example.com/feed.xml")

            assert parsed.title == "Test Blog"
            assert len(parsed.articles) == 2

    async def test_parse_atom_feed(self):
        """Test parsing an Atom feed."""
        atom_feed = """<?xml version="1.0"?>
        <feed xmlns="http://www.w3.org/2005/Atom">
            <title>Test Blog</title>
            <entry>
                <title>Atom Post</title>
                <link href="https://example.com/atom-post"/>
                <updated>2024-01-15T10:30:00Z</updated>
            </entry>
        </feed>
        """

        with patch("feed_aggregator.services.feed_parser.httpx.AsyncClient") as mock_client:
            _mock_client(mock_client, _response(atom_feed))

            articles = await parse_feed("https://example.com/atom.xml")

            assert len(articles) == 1
            assert articles[0].title == "Atom Post"
            assert articles[0].url == "https://example.com/atom-post"
            assert articles[0].published_date.tzinfo is not None

    async def test_parse_feed_skips_missing_title(self):
        """Test that entries without title are skipped."""
        rss_feed = """<?xml version="1.0"?>
        <rss version="2.0">
            <channel>
                <title>Test Blog</title>
                <item>
                    <link>https://example.com/no-title</link>
                </item>
                <item>
                    <title>Has Title</title>
                    <link>https://example.com/has-title</link>
                </item>
            </channel>
        </rss>
        """

        with patch("feed_aggregator.services.feed_parser.httpx.AsyncClient") as mock_client:
            _mock_client(mock_client, _response(rss_feed))

            articles = await parse_feed("https://example.com/feed.xml")

            assert len(articles) == 1
            assert articles[0].title == "Has Title"

    async def test_parse_feed_http_error(self):
        """Test handling of HTTP errors."""
        import httpx

        with patch("feed_aggregator.services.feed_parser.httpx.AsyncClient") as mock_client:
            _mock_client(mock_client, side_effect=httpx.HTTPError("Connection failed"))

            articles = await parse_feed("https://example.com/feed.xml")
            parsed = await fetch_feed("https://example.com/feed.xml")

            assert articles == []
            assert parsed is None

    async def test_user_agent_and_timeout_are_passed(self):
        """Test that client settings come from the arguments."""
        with patch("feed_aggregator.services.feed_parser.httpx.AsyncClient") as mock_client:
            _mock_client(mock_client, _response(RSS_FEED))

            await parse_feed("https://example.com/feed.xml", timeout=5.0, user_agent="Test/1.0")

            kwargs = mock_client.call_args.kwargs
            assert kwargs["timeout"] == 5.0
            assert kwargs["headers"] == {"User-Agent": "Test/1.0"}

    def test_parse_date_rfc2822(self):
        """Test parsing RFC 2822 date format."""
        entry = {"published": "Mon, 01 Jan 2024 12:00:00 GMT"}
        result = _parse_date(entry)
        assert result is not None
        assert result.year == 2024
        assert result.month == 1
        assert result.day == 1

    def test_parse_date_iso_format(self):
        """Test parsing ISO format date."""
        entry = {"published": "2024-01-15T10:30:00Z"}
        result = _parse_date(entry)
        assert result is not None
        assert result.year == 2024
        assert result.month == 1
        assert result.day == 15

    def test_parse_date_naive_iso_is_utc(self):
        """Test that dates without offset are pinned to UTC."""
        entry = {"updated": "2024-01-15T10:30:00"}
        result = _parse_date(entry)
        assert result == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)

    def test_parse_date_invalid(self):
        """Test handling of invalid date."""
        entry = {"published": "not a date"}
        result = _parse_date(entry)
        assert result is None


def _parsed(*titles):
    return ParsedFeed(
        title="Remote",
        articles=[
            ParsedArticle(
                title=title,
                url=f"https://example.com/{title}",
                published_date=datetime(2024, 1, index + 1, tzinfo=timezone.utc),
            )
            for index, title in enumerate(titles)
        ],
    )


class TestFeedFetcher:
    """Tests for background feed refresh."""

    @pytest.fixture
    def fetcher(self):
        return FeedFetcher(AggregatorConfig(fetch_timeout=3.0, user_agent="Test/1.0"))

    async def test_fetch_loads_articles(self, fetcher):
        """Test that fetched entries are merged into the feed."""
        feed = Feed("https://example.com/feed.xml", "feed")
        mock_fetch = AsyncMock(return_value=_parsed("a", "b"))

        with patch("feed_aggregator.services.feed_fetcher.fetch_feed", mock_fetch):
            added = await fetcher.fetch(feed)

        assert added == 2
        assert feed.title == "Remote"
        assert feed.unread_count() == 2
        mock_fetch.assert_awaited_once_with(
            "https://example.com/feed.xml", timeout=3.0, user_agent="Test/1.0"
        )

    async def test_fetch_failure_sets_error(self, fetcher):
        """Test that a failed download marks the feed as errored."""
        feed = Feed("https://example.com/feed.xml", "feed")
        feed.is_loading = True

        with patch("feed_aggregator.services.feed_fetcher.fetch_feed", AsyncMock(return_value=None)):
            added = await fetcher.fetch(feed)

        assert added == 0
        assert feed.has_error is True
        assert feed.is_loading is False

    async def test_empty_result_on_empty_feed_sets_error(self, fetcher):
        """Test that an empty document for a feed without articles is an error."""
        feed = Feed("https://example.com/feed.xml", "feed")

        with patch("feed_aggregator.services.feed_fetcher.fetch_feed", AsyncMock(return_value=_parsed())):
            await fetcher.fetch(feed)

        assert feed.has_error is True

    async def test_destroyed_feed_is_left_alone(self, fetcher):
        """Test that results for a feed destroyed mid-fetch are dropped."""
        feed = Feed("https://example.com/feed.xml", "feed")
        feed.destroy()

        with patch("feed_aggregator.services.feed_fetcher.fetch_feed", AsyncMock(return_value=_parsed("a"))):
            added = await fetcher.fetch(feed)

        assert added == 0
        assert feed.articles() == []

    async def test_refresh_through_folder_runs_in_background(self, fetcher):
        """Test that Folder.refresh dispatches to the fetcher and returns immediately."""
        folder = Folder("")
        feed = Feed("https://example.com/feed.xml", "feed", fetcher=fetcher)
        folder.add_item(feed)
        pulses = []
        folder.unread_count_changed.connect(pulses.append)

        with patch("feed_aggregator.services.feed_fetcher.fetch_feed", AsyncMock(return_value=_parsed("a"))):
            folder.refresh()
            assert feed.is_loading is True
            assert fetcher.pending == 1

            for _ in range(5):
                await asyncio.sleep(0)

        assert fetcher.pending == 0
        assert feed.is_loading is False
        assert folder.unread_count() == 1
        assert pulses == [folder]

    async def test_aclose_cancels_pending(self, fetcher):
        """Test that aclose cancels unfinished fetches."""
        feed = Feed("https://example.com/feed.xml", "feed")

        async def slow_fetch(*args, **kwargs):
            await asyncio.sleep(10)

        with patch("feed_aggregator.services.feed_fetcher.fetch_feed", slow_fetch):
            task = fetcher.schedule(feed)
            await asyncio.sleep(0)
            await fetcher.aclose()

        assert task.cancelled()
        assert fetcher.pending == 0

    def test_schedule_without_loop(self, fetcher):
        """Test that scheduling outside an event loop reports an error."""
        feed = Feed("https://example.com/feed.xml", "feed")

        assert fetcher.schedule(feed) is None
        assert feed.has_error is True

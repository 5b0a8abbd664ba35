"""Services for feed_aggregator."""

from .feed_parser import fetch_feed, parse_feed, ParsedArticle, ParsedFeed
from .feed_fetcher import FeedFetcher

__all__ = [
    "fetch_feed",
    "parse_feed",
    "ParsedArticle",
    "ParsedFeed",
    "FeedFetcher",
]

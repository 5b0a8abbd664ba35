"""Data models for feed_aggregator."""

from .article import Article, article_date_recent_than

__all__ = [
    "Article",
    "article_date_recent_than",
]

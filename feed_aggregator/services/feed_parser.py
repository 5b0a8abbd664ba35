"""Feed parser service.

This module fetches RSS/Atom feeds and extracts their entries.
"""

import httpx
import feedparser
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional
from email.utils import parsedate_to_datetime

from feed_aggregator.config import DEFAULT_USER_AGENT


logger = logging.getLogger(__name__)


@dataclass
class ParsedArticle:
    """Represents a parsed entry from a feed."""

    title: str
    url: str
    published_date: Optional[datetime]
    guid: Optional[str] = None
    author: Optional[str] = None
    description: Optional[str] = None


@dataclass
class ParsedFeed:
    """Result of parsing one feed document."""

    title: str
    articles: List[ParsedArticle]


async def fetch_feed(
    feed_url: str,
    timeout: float = 30.0,
    user_agent: str = DEFAULT_USER_AGENT,
) -> Optional[ParsedFeed]:
    """Fetch and parse an RSS/Atom feed.

    Args:
        feed_url: URL of the feed to parse
        timeout: Request timeout in seconds
        user_agent: User-Agent header sent with the request

    Returns:
        ParsedFeed, or None if the feed could not be fetched or parsed
    """
    logger.info(f"Parsing feed: {feed_url}")

    async with httpx.AsyncClient(
        follow_redirects=True,
        timeout=timeout,
        headers={"User-Agent": user_agent},
    ) as client:
        try:
            response = await client.get(feed_url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch feed: {e}")
            return None

    feed = feedparser.parse(response.text)

    if feed.bozo and not feed.entries:
        logger.warning(f"Feed parsing error: {feed.bozo_exception}")
        return None

    articles = []
    for entry in feed.entries:
        title = entry.get("title", "").strip()
        if not title:
            continue

        url = entry.get("link", "").strip()
        if not url:
            # Try alternate link
            for link in entry.get("links", []):
                if link.get("rel") == "alternate" or link.get("href"):
                    url = link.get("href", "")
                    break

        if not url:
            continue

        articles.append(ParsedArticle(
            title=title,
            url=url,
            published_date=_parse_date(entry),
            guid=entry.get("id") or None,
            author=entry.get("author") or None,
            description=entry.get("summary") or None,
        ))

    logger.info(f"Parsed {len(articles)} articles from feed")
    return ParsedFeed(title=feed.feed.get("title", ""), articles=articles)


async def parse_feed(
    feed_url: str,
    timeout: float = 30.0,
    user_agent: str = DEFAULT_USER_AGENT,
) -> List[ParsedArticle]:
    """Parse an RSS/Atom feed and extract articles.

    Returns:
        List of ParsedArticle objects (empty on any failure)
    """
    parsed = await fetch_feed(feed_url, timeout=timeout, user_agent=user_agent)
    return parsed.articles if parsed else []


def _parse_date(entry: dict) -> Optional[datetime]:
    """Parse the publication date from a feed entry.

    Args:
        entry: Feed entry dict

    Returns:
        Timezone-aware datetime if parsed successfully, None otherwise
    """
    for field in ["published", "updated", "created"]:
        date_str = entry.get(field, "") or entry.get(f"{field}_parsed")

        if not date_str:
            continue

        # If it's already a time struct (from feedparser), it is UTC
        if isinstance(date_str, tuple):
            try:
                return datetime(*date_str[:6], tzinfo=timezone.utc)
            except (ValueError, TypeError):
                continue

        # Try RFC 2822 format (common in RSS)
        try:
            return _as_utc(parsedate_to_datetime(date_str))
        except (ValueError, TypeError):
            pass

        # Try ISO format
        try:
            return _as_utc(datetime.fromisoformat(date_str.replace("Z", "+00:00")))
        except (ValueError, AttributeError):
            pass

    return None


def _as_utc(value: datetime) -> datetime:
    # Articles of different feeds are compared, so naive dates are pinned to UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

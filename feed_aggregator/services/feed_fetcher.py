"""Background refresh of feeds.

Feed.refresh() is fire-and-forget: it hands the feed to FeedFetcher.schedule,
which starts a task on the running asyncio loop. The task fetches the
document and merges the result back into the feed.
"""

import asyncio
import logging
from typing import TYPE_CHECKING, Optional, Set

from feed_aggregator.config import AggregatorConfig, get_config
from feed_aggregator.services.feed_parser import fetch_feed

if TYPE_CHECKING:
    from feed_aggregator.items.feed import Feed


logger = logging.getLogger(__name__)


class FeedFetcher:
    """Schedules and runs feed downloads."""

    def __init__(self, config: Optional[AggregatorConfig] = None):
        self.config = config or get_config()
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def schedule(self, feed: "Feed") -> Optional[asyncio.Task]:
        """Start fetching ``feed`` in the background.

        Returns:
            The created task, or None when no event loop is running
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"No running event loop, cannot refresh '{feed.url}'")
            feed.set_error("No running event loop")
            return None

        task = loop.create_task(self.fetch(feed))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def fetch(self, feed: "Feed") -> int:
        """Download ``feed`` and merge new articles into it.

        Returns:
            Number of new articles
        """
        parsed = await fetch_feed(
            feed.url,
            timeout=self.config.fetch_timeout,
            user_agent=self.config.user_agent,
        )

        if feed.is_destroyed:
            logger.debug(f"Feed '{feed.url}' was destroyed during refresh")
            return 0

        if parsed is None:
            feed.set_error(f"Failed to fetch {feed.url}")
            return 0

        if not parsed.articles and not feed.articles():
            feed.set_error(f"No articles found in {feed.url}")
            return 0

        return feed.load_articles(parsed.articles, title=parsed.title)

    async def aclose(self) -> None:
        """Cancel pending refreshes and wait for them to finish."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()

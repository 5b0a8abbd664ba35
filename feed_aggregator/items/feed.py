"""Feed: leaf item owning a date-sorted list of articles."""

import logging
import uuid
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from feed_aggregator.events import Connection, Signal
from feed_aggregator.items.item import Item
from feed_aggregator.models import Article, article_date_recent_than

if TYPE_CHECKING:
    from feed_aggregator.services.feed_fetcher import FeedFetcher
    from feed_aggregator.services.feed_parser import ParsedArticle


logger = logging.getLogger(__name__)

DEFAULT_MAX_ARTICLES = 50


class Feed(Item):
    """A subscribed RSS/Atom feed.

    Articles are kept most recent first. Fetching is delegated to an
    optional fetcher; refresh() only dispatches to it.
    """

    def __init__(
        self,
        url: str,
        path: str = "",
        uid: Optional[str] = None,
        max_articles: int = DEFAULT_MAX_ARTICLES,
        fetcher: Optional["FeedFetcher"] = None,
    ):
        super().__init__(path)
        if max_articles <= 0:
            raise ValueError("max_articles must be positive")

        self.url = url
        self.uid = uid or str(uuid.uuid4())
        self.title = ""
        self.is_loading = False
        self.has_error = False
        self.error_message: Optional[str] = None
        self.max_articles = max_articles
        self.fetcher = fetcher

        self.state_changed = Signal("state_changed")

        self._articles: List[Article] = []
        self._by_guid: Dict[str, Article] = {}
        self._read_connections: Dict[str, Connection] = {}
        self._unread_count = 0
        self._marking_all = False

    def unread_count(self) -> int:
        return self._unread_count

    def articles(self) -> List[Article]:
        return list(self._articles)

    def article_by_guid(self, guid: str) -> Optional[Article]:
        return self._by_guid.get(guid)

    def add_article(self, article: Article) -> bool:
        """Insert an article in date order.

        Returns:
            False if an article with the same guid is already present, or if
            the feed is full and the article is older than all it holds
        """
        if article.guid in self._by_guid:
            return False

        # After every article at least as recent, so equal dates keep arrival order
        index = len(self._articles)
        for i, existing in enumerate(self._articles):
            if article_date_recent_than(article, existing.date):
                index = i
                break

        if index == len(self._articles) and index >= self.max_articles:
            return False

        self._articles.insert(index, article)
        self._by_guid[article.guid] = article
        self._read_connections[article.guid] = article.read.connect(self._handle_article_read)
        if not article.is_read:
            self._unread_count += 1

        self.new_article.emit(article)
        if not article.is_read:
            self.unread_count_changed.emit(self)

        while len(self._articles) > self.max_articles:
            self.remove_article(self._articles[-1])

        return True

    def remove_article(self, article: Article) -> None:
        """Drop an article owned by this feed.

        Raises:
            ValueError: If the article does not belong to this feed
        """
        if self._by_guid.get(article.guid) is not article:
            raise ValueError(f"Article '{article.guid}' is not in feed '{self.url}'")

        self.article_about_to_be_removed.emit(article)

        connection = self._read_connections.pop(article.guid)
        article.read.disconnect(connection)
        del self._by_guid[article.guid]
        self._articles.remove(article)

        if not article.is_read:
            self._unread_count -= 1
            self.unread_count_changed.emit(self)

    def load_articles(self, parsed: Iterable["ParsedArticle"], title: str = "") -> int:
        """Merge a fetch result into the feed.

        Returns:
            Number of articles that were new
        """
        added = 0
        for entry in parsed:
            if self.add_article(Article.from_parsed(entry)):
                added += 1

        if title:
            self.title = title
        self.is_loading = False
        self.has_error = False
        self.error_message = None
        self.state_changed.emit(self)

        logger.info(f"Loaded {added} new articles into '{self.path or self.url}'")
        return added

    def set_error(self, message: str) -> None:
        self.is_loading = False
        self.has_error = True
        self.error_message = message
        self.state_changed.emit(self)

    def mark_as_read(self) -> None:
        old_unread_count = self._unread_count

        self._marking_all = True
        try:
            for article in list(self._articles):
                if not article.is_read:
                    article.mark_as_read()
        finally:
            self._marking_all = False
            # a raising read handler may have run before ours
            self._unread_count = sum(1 for article in self._articles if not article.is_read)
            if self._unread_count != old_unread_count:
                self.unread_count_changed.emit(self)

    def refresh(self) -> None:
        if self.fetcher is None:
            logger.debug(f"No fetcher configured for '{self.url}', skipping refresh")
            return

        self.is_loading = True
        self.state_changed.emit(self)
        self.fetcher.schedule(self)

    def cleanup(self) -> None:
        """Release the feed's article data."""
        for article in list(self._articles):
            self.remove_article(article)

    def serialize(self, include_content: bool = False) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "uid": self.uid,
            "url": self.url,
        }
        if include_content:
            data["title"] = self.title
            data["is_loading"] = self.is_loading
            data["has_error"] = self.has_error
            data["articles"] = [article.to_dict() for article in self._articles]
        return data

    def _handle_article_read(self, article: Article) -> None:
        self._unread_count -= 1
        self.article_read.emit(article)
        if not self._marking_all:
            self.unread_count_changed.emit(self)

    def _release(self) -> None:
        for connection in list(self._read_connections.values()):
            connection.signal.disconnect(connection)
        self._read_connections.clear()
        self._articles.clear()
        self._by_guid.clear()
        self._unread_count = 0

"""Session: the root of the feed tree.

The session owns the root folder and addresses every item by path. Paths
join folder names with a backslash, e.g. ``News\\World\\BBC``.
"""

import logging
from typing import Any, Dict, List, Optional

from feed_aggregator.config import AggregatorConfig, get_config
from feed_aggregator.events import Signal
from feed_aggregator.items import (
    PATH_SEPARATOR,
    Feed,
    Folder,
    Item,
    is_valid_path,
    join_path,
    parent_path,
    relative_name,
    split_path,
)
from feed_aggregator.models import Article
from feed_aggregator.logging_config import setup_logging
from feed_aggregator.services.feed_fetcher import FeedFetcher


logger = logging.getLogger(__name__)


class Session:
    """Holds the root folder and performs path-based tree mutations."""

    def __init__(
        self,
        config: Optional[AggregatorConfig] = None,
        fetcher: Optional[FeedFetcher] = None,
    ):
        self.config = config or get_config()
        self.fetcher = fetcher
        self.root_folder = Folder("")

        self.item_added = Signal("item_added")
        self.item_about_to_be_removed = Signal("item_about_to_be_removed")

    @classmethod
    def with_fetcher(cls, config: Optional[AggregatorConfig] = None) -> "Session":
        """Create a session whose feeds refresh over HTTP.

        This is the entry point for host applications, so it also configures
        package logging.
        """
        config = config or get_config()
        setup_logging(config)
        return cls(config=config, fetcher=FeedFetcher(config))

    def item_by_path(self, path: str) -> Optional[Item]:
        """Find the item at ``path`` (the empty path is the root folder)."""
        if not path:
            return self.root_folder

        current: Item = self.root_folder
        for name in split_path(path):
            if not isinstance(current, Folder):
                return None
            child = current.item_by_name(name)
            if child is None:
                return None
            current = child
        return current

    def feeds(self) -> List[Feed]:
        """All feeds, depth first in insertion order."""
        result: List[Feed] = []
        stack: List[Item] = [self.root_folder]
        while stack:
            item = stack.pop()
            if isinstance(item, Feed):
                result.append(item)
            elif isinstance(item, Folder):
                stack.extend(reversed(item.items()))
        return result

    def feed_by_url(self, url: str) -> Optional[Feed]:
        for feed in self.feeds():
            if feed.url == url:
                return feed
        return None

    def add_folder(self, path: str) -> Folder:
        """Create an empty folder at ``path``.

        Raises:
            ValueError: If the path is invalid or taken, or its parent is missing
        """
        parent = self._prepare_item_dest(path)
        folder = Folder(path)
        self._add_item(folder, parent)
        return folder

    def add_feed(self, url: str, path: str, uid: Optional[str] = None) -> Feed:
        """Subscribe to ``url`` and place the feed at ``path``.

        Raises:
            ValueError: If the url is empty or already subscribed, or the path
                cannot be used
        """
        if not url:
            raise ValueError("Feed URL cannot be empty")
        if self.feed_by_url(url) is not None:
            raise ValueError(f"Feed with URL '{url}' already exists")

        parent = self._prepare_item_dest(path)
        feed = Feed(
            url,
            path,
            uid=uid,
            max_articles=self.config.max_articles_per_feed,
            fetcher=self.fetcher,
        )
        self._add_item(feed, parent)
        return feed

    def move_item(self, path: str, dest_path: str) -> Item:
        """Move the item at ``path`` to ``dest_path``.

        Raises:
            ValueError: If the item does not exist, is the root, or the
                destination cannot be used
        """
        item = self._existing_item(path)
        if item.path == dest_path:
            return item

        if isinstance(item, Folder) and (
            dest_path == item.path or dest_path.startswith(item.path + PATH_SEPARATOR)
        ):
            raise ValueError(f"Cannot move folder '{item.path}' into itself")

        dest_folder = self._prepare_item_dest(dest_path)
        src_folder = self._parent_folder(item.path)

        src_folder.remove_item(item)
        self._rewrite_paths(item, dest_path)
        dest_folder.add_item(item)

        logger.info(f"Moved '{path}' to '{dest_path}'")
        return item

    def remove_item(self, path: str) -> None:
        """Detach the item at ``path`` and destroy it with its subtree.

        Raises:
            ValueError: If the item does not exist or is the root
        """
        item = self._existing_item(path)

        self.item_about_to_be_removed.emit(item)
        self._parent_folder(item.path).remove_item(item)
        item.destroy()

        logger.info(f"Removed '{path}'")

    def refresh(self) -> None:
        self.root_folder.refresh()

    def mark_as_read(self) -> None:
        self.root_folder.mark_as_read()

    def cleanup(self) -> None:
        self.root_folder.cleanup()

    def unread_count(self) -> int:
        return self.root_folder.unread_count()

    def serialize(self, include_content: bool = False) -> Dict[str, Any]:
        return self.root_folder.serialize(include_content)

    def load(self, snapshot: Dict[str, Any]) -> None:
        """Rebuild the tree below the root from a serialized snapshot.

        Entries that cannot be loaded are logged and skipped.
        """
        if not isinstance(snapshot, dict):
            raise ValueError("Session snapshot must be a mapping")
        self._load_folder(snapshot, "")

    def destroy(self) -> None:
        self.root_folder.destroy()

    def _load_folder(self, data: Dict[str, Any], path: str) -> None:
        for name, value in data.items():
            item_path = join_path(path, name)
            try:
                if isinstance(value, str):
                    self.add_feed(value, item_path)
                elif isinstance(value, dict) and isinstance(value.get("url"), str):
                    feed = self.add_feed(value["url"], item_path, uid=value.get("uid"))
                    self._load_feed_data(feed, value)
                elif isinstance(value, dict) and not isinstance(value.get("url", {}), dict):
                    logger.warning(f"Skipping '{item_path}': feed URL is not a string")
                elif isinstance(value, dict):
                    # a mapping under "url" is a child item named "url"
                    self.add_folder(item_path)
                    self._load_folder(value, item_path)
                else:
                    logger.warning(f"Skipping '{item_path}': unsupported value {value!r}")
            except ValueError as e:
                logger.warning(f"Skipping '{item_path}': {e}")

    def _load_feed_data(self, feed: Feed, data: Dict[str, Any]) -> None:
        feed.title = data.get("title") or ""
        for article_data in data.get("articles", []):
            try:
                feed.add_article(Article.from_dict(article_data))
            except ValueError as e:
                logger.warning(f"Skipping article in '{feed.path}': {e}")

    def _add_item(self, item: Item, parent: Folder) -> None:
        parent.add_item(item)
        self.item_added.emit(item)
        logger.info(f"Added {type(item).__name__.lower()} '{item.path}'")

    def _prepare_item_dest(self, path: str) -> Folder:
        if not path or not is_valid_path(path):
            raise ValueError(f"Incorrect item path: '{path}'")
        if self.item_by_path(path) is not None:
            raise ValueError(f"An item with path '{path}' already exists")

        parent = self.item_by_path(parent_path(path))
        if not isinstance(parent, Folder):
            raise ValueError(f"Destination folder of '{path}' does not exist")
        return parent

    def _existing_item(self, path: str) -> Item:
        if not path:
            raise ValueError("The root folder cannot be moved or removed")
        item = self.item_by_path(path)
        if item is None:
            raise ValueError(f"Item '{path}' doesn't exist")
        return item

    def _parent_folder(self, path: str) -> Folder:
        parent = self.item_by_path(parent_path(path))
        if not isinstance(parent, Folder):
            raise ValueError(f"Parent folder of '{path}' does not exist")
        return parent

    def _rewrite_paths(self, item: Item, new_path: str) -> None:
        item.set_path(new_path)
        if isinstance(item, Folder):
            for child in item.items():
                self._rewrite_paths(child, join_path(new_path, relative_name(child.path)))

"""Folder: composite container of items.

A folder exclusively owns its children. Aggregated reads (unread count,
merged articles) are recomputed on every call; notifications travel upward
through the subscriptions a folder makes on each child it adds.
"""

import heapq
import logging
from operator import attrgetter
from typing import Any, Callable, Dict, List, Optional, Tuple

from feed_aggregator.events import Connection
from feed_aggregator.exceptions import CascadeError
from feed_aggregator.items.item import Item
from feed_aggregator.models import Article


logger = logging.getLogger(__name__)


class Folder(Item):
    """Container item that aggregates the state of its children."""

    def __init__(self, path: str = ""):
        super().__init__(path)
        self._items: List[Item] = []
        self._subscriptions: Dict[Item, List[Connection]] = {}

    def items(self) -> List[Item]:
        """Snapshot of the children in insertion order."""
        return list(self._items)

    def item_by_name(self, name: str) -> Optional[Item]:
        for item in self._items:
            if item.name == name:
                return item
        return None

    def unread_count(self) -> int:
        return sum(item.unread_count() for item in self.items())

    def articles(self) -> List[Article]:
        """Merge the children's article lists, most recent first.

        The merge is stable: on equal dates, articles of a child added
        earlier come first, and each child's own order is kept.
        """
        news: List[Article] = []
        for item in self.items():
            news = list(heapq.merge(news, item.articles(), key=attrgetter("date"), reverse=True))
        return news

    def mark_as_read(self) -> None:
        self._cascade("mark_as_read", lambda item: item.mark_as_read())

    def refresh(self) -> None:
        self._cascade("refresh", lambda item: item.refresh())

    def cleanup(self) -> None:
        self._cascade("cleanup", lambda item: item.cleanup())

    def serialize(self, include_content: bool = False) -> Dict[str, Any]:
        return {item.name: item.serialize(include_content) for item in self.items()}

    def add_item(self, item: Item) -> None:
        """Take ownership of ``item`` and subscribe to its signals.

        Raises:
            ValueError: If item is None, already owned by a folder, destroyed,
                this folder or one of its ancestors, or named like an
                existing child
        """
        if item is None:
            raise ValueError("Cannot add a null item")
        if any(child is item for child in self._items):
            raise ValueError(f"Item '{item.path}' is already in folder '{self.path}'")
        if item.parent is not None:
            raise ValueError(f"Item '{item.path}' is already owned by folder '{item.parent.path}'")
        ancestor: Optional[Item] = self
        while ancestor is not None:
            if ancestor is item:
                raise ValueError(f"Folder '{self.path}' cannot contain itself or an ancestor")
            ancestor = ancestor.parent
        if item.is_destroyed:
            raise ValueError(f"Item '{item.path}' is destroyed")
        if self.item_by_name(item.name) is not None:
            raise ValueError(f"Folder '{self.path}' already has an item named '{item.name}'")

        self._items.append(item)
        item._parent = self
        self._subscriptions[item] = [
            item.new_article.connect(self.new_article.emit),
            item.article_read.connect(self.article_read.emit),
            item.article_about_to_be_removed.connect(self.article_about_to_be_removed.emit),
            item.unread_count_changed.connect(self._handle_item_unread_count_changed),
            item.about_to_be_destroyed.connect(self._handle_item_about_to_be_destroyed),
        ]
        self.unread_count_changed.emit(self)

    def remove_item(self, item: Item) -> None:
        """Unsubscribe from ``item`` and give up ownership without destroying it.

        Raises:
            ValueError: If item is not a child of this folder
        """
        if item is None or not any(child is item for child in self._items):
            raise ValueError(f"Item {item!r} is not in folder '{self.path}'")

        self._detach(item)
        self.unread_count_changed.emit(self)

    def _detach(self, item: Item) -> None:
        for connection in self._subscriptions.pop(item):
            connection.signal.disconnect(connection)

        for index, child in enumerate(self._items):
            if child is item:
                del self._items[index]
                break
        item._parent = None

    def _handle_item_unread_count_changed(self, item: Item) -> None:
        self.unread_count_changed.emit(self)

    def _handle_item_about_to_be_destroyed(self, item: Item) -> None:
        # The dying child leaves the tree before the pulse so that observers
        # read the reduced aggregate.
        unread = item.unread_count()
        self._detach(item)
        if unread > 0:
            self.unread_count_changed.emit(self)

    def _release(self) -> None:
        failures: List[Tuple[Item, BaseException]] = []

        for item in self.items():
            # a handler may have taken the child out of this folder meanwhile
            if not any(child is item for child in self._items):
                continue
            try:
                item.destroy()
            except Exception as e:
                logger.exception(f"destroy failed for '{item.path}'")
                failures.append((item, e))

        if failures:
            raise CascadeError("destroy", failures)

    def _cascade(self, operation: str, action: Callable[[Item], None]) -> None:
        failures: List[Tuple[Item, BaseException]] = []

        for item in self.items():
            try:
                action(item)
            except Exception as e:
                logger.exception(f"{operation} failed for '{item.path}'")
                failures.append((item, e))

        if failures:
            raise CascadeError(operation, failures)

"""Item capability shared by folders and feeds.

Items are addressed by a path whose components are joined with a backslash;
an item's name is the last component of its path and the root folder has
the empty path.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from feed_aggregator.events import Signal
from feed_aggregator.models import Article


PATH_SEPARATOR = "\\"


def join_path(*parts: str) -> str:
    """Join path components, skipping empty ones."""
    return PATH_SEPARATOR.join(part for part in parts if part)


def split_path(path: str) -> List[str]:
    return path.split(PATH_SEPARATOR) if path else []


def parent_path(path: str) -> str:
    """Return the path of the folder that contains ``path``."""
    index = path.rfind(PATH_SEPARATOR)
    return path[:index] if index >= 0 else ""


def relative_name(path: str) -> str:
    index = path.rfind(PATH_SEPARATOR)
    return path[index + 1:] if index >= 0 else path


def is_valid_path(path: str) -> bool:
    """A valid path has no empty components (the root path is valid)."""
    if not path:
        return True
    return all(part.strip() for part in split_path(path))


class Item(ABC):
    """A node of the feed tree.

    Every item exposes five signals. Folders subscribe to them when the item
    is added and unsubscribe when it is removed.
    """

    def __init__(self, path: str = ""):
        self._path = path
        self._destroyed = False
        self._parent: Optional["Item"] = None

        self.new_article = Signal("new_article")
        self.article_read = Signal("article_read")
        self.article_about_to_be_removed = Signal("article_about_to_be_removed")
        self.unread_count_changed = Signal("unread_count_changed")
        self.about_to_be_destroyed = Signal("about_to_be_destroyed")

    @property
    def path(self) -> str:
        return self._path

    @property
    def name(self) -> str:
        return relative_name(self._path)

    @property
    def parent(self) -> Optional["Item"]:
        """Folder that currently owns this item, if any."""
        return self._parent

    @property
    def is_destroyed(self) -> bool:
        return self._destroyed

    def set_path(self, path: str) -> None:
        self._path = path

    @abstractmethod
    def unread_count(self) -> int:
        """Number of unread articles reachable from this item."""

    @abstractmethod
    def articles(self) -> List[Article]:
        """Articles under this item, most recent first."""

    @abstractmethod
    def refresh(self) -> None:
        pass

    @abstractmethod
    def mark_as_read(self) -> None:
        pass

    @abstractmethod
    def cleanup(self) -> None:
        pass

    @abstractmethod
    def serialize(self, include_content: bool = False) -> Dict[str, Any]:
        pass

    def destroy(self) -> None:
        """Destroy the item.

        Emits about_to_be_destroyed while the item is still fully readable,
        then releases whatever the item owns.

        Raises:
            ValueError: If the item was already destroyed
        """
        if self._destroyed:
            raise ValueError(f"Item '{self._path}' is already destroyed")

        # set before emitting so a reentrant destroy() is rejected
        self._destroyed = True
        self.about_to_be_destroyed.emit(self)
        self._release()

    def _release(self) -> None:
        """Hook for subclasses to drop owned state after destruction."""

    def signals(self) -> List[Signal]:
        return [
            self.new_article,
            self.article_read,
            self.article_about_to_be_removed,
            self.unread_count_changed,
            self.about_to_be_destroyed,
        ]

    def __repr__(self) -> str:
        return f"<{type(self).__name__} '{self._path}'>"

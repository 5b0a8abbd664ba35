"""Item tree for feed_aggregator."""

from .item import (
    PATH_SEPARATOR,
    Item,
    is_valid_path,
    join_path,
    parent_path,
    relative_name,
    split_path,
)
from .folder import Folder
from .feed import Feed

__all__ = [
    "PATH_SEPARATOR",
    "Item",
    "Folder",
    "Feed",
    "is_valid_path",
    "join_path",
    "parent_path",
    "relative_name",
    "split_path",
]

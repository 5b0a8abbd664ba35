"""feed_aggregator - hierarchical RSS feed tree.

Folders aggregate unread counts and recency-ordered article views over any
number of nested feeds, and forward article notifications to the root.

Host applications call setup_logging() once at startup (Session.with_fetcher
does so) to route package logs to stderr at the configured level.
"""

from feed_aggregator.config import AggregatorConfig, get_config, load_config
from feed_aggregator.events import Connection, Signal
from feed_aggregator.exceptions import CascadeError
from feed_aggregator.items import Feed, Folder, Item
from feed_aggregator.logging_config import setup_logging
from feed_aggregator.models import Article
from feed_aggregator.session import Session

__all__ = [
    "AggregatorConfig",
    "get_config",
    "load_config",
    "Connection",
    "Signal",
    "CascadeError",
    "Feed",
    "Folder",
    "Item",
    "Article",
    "Session",
    "setup_logging",
]

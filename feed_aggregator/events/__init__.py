"""Event primitives for feed_aggregator."""

from .signal import Connection, Signal

__all__ = [
    "Connection",
    "Signal",
]

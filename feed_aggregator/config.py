"""Configuration for feed_aggregator.

Values come from FEED_AGGREGATOR_* environment variables, falling back to
the defaults below.
"""

import os
from dataclasses import dataclass
from typing import Optional


DEFAULT_USER_AGENT = "FeedAggregator/1.0 (RSS Feed Reader)"


@dataclass
class AggregatorConfig:
    """Settings shared by the session, its feeds and the fetcher."""

    name: str = "feed_aggregator"
    log_level: str = "INFO"
    max_articles_per_feed: int = 50
    fetch_timeout: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT


def _env_int(key: str, default: int) -> int:
    value = os.environ.get(key)
    if not value:
        return default
    try:
        parsed = int(value)
    except ValueError as e:
        raise ValueError(f"{key} must be an integer, got '{value}'") from e
    if parsed <= 0:
        raise ValueError(f"{key} must be positive, got {parsed}")
    return parsed


def _env_float(key: str, default: float) -> float:
    value = os.environ.get(key)
    if not value:
        return default
    try:
        parsed = float(value)
    except ValueError as e:
        raise ValueError(f"{key} must be a number, got '{value}'") from e
    if parsed <= 0:
        raise ValueError(f"{key} must be positive, got {parsed}")
    return parsed


def load_config() -> AggregatorConfig:
    """Build a configuration from the environment.

    Returns:
        AggregatorConfig with environment overrides applied

    Raises:
        ValueError: If a numeric variable cannot be parsed
    """
    return AggregatorConfig(
        name=os.environ.get("FEED_AGGREGATOR_NAME", "feed_aggregator"),
        log_level=os.environ.get("FEED_AGGREGATOR_LOG_LEVEL", "INFO").upper(),
        max_articles_per_feed=_env_int("FEED_AGGREGATOR_MAX_ARTICLES", 50),
        fetch_timeout=_env_float("FEED_AGGREGATOR_FETCH_TIMEOUT", 30.0),
        user_agent=os.environ.get("FEED_AGGREGATOR_USER_AGENT", DEFAULT_USER_AGENT),
    )


_config: Optional[AggregatorConfig] = None


def get_config() -> AggregatorConfig:
    """Get or create the process-wide configuration."""
    global _config

    if _config is None:
        _config = load_config()

    return _config

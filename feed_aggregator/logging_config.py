"""Logging setup for feed_aggregator."""

import logging
import sys
from typing import Optional

from feed_aggregator.config import AggregatorConfig, get_config


logger = logging.getLogger("feed_aggregator")

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(config: Optional[AggregatorConfig] = None) -> logging.Logger:
    """Configure the package logger.

    Safe to call more than once; the stream handler is only attached the
    first time.

    Args:
        config: Optional configuration (uses get_config() if not provided)

    Returns:
        The package logger
    """
    if config is None:
        config = get_config()

    level = getattr(logging, config.log_level.upper(), logging.INFO)
    logger.setLevel(level)

    if not any(getattr(h, "_feed_aggregator", False) for h in logger.handlers):
        # stderr keeps stdout free for host applications
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._feed_aggregator = True
        logger.addHandler(handler)

    return logger

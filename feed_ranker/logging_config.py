"""Logging setup for feed_ranker.

Log output goes to stderr so that the STDIO MCP transport keeps stdout to itself.
"""

import logging
import sys
from typing import Optional

from feed_ranker.config import ServerConfig

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger("feed_ranker")


def setup_logging(config: Optional[ServerConfig] = None) -> logging.Logger:
    """Configure the feed_ranker logger hierarchy.

    Safe to call more than once; the handler is only installed the first time.

    Args:
        config: Server configuration supplying the log level

    Returns:
        The package root logger
    """
    level_name = config.log_level if config else "INFO"
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        level = logging.INFO

    installed = [h for h in logger.handlers if getattr(h, "_feed_ranker", False)]
    if installed:
        # sys.stderr may have been swapped since the first call
        for handler in installed:
            handler.setStream(sys.stderr)
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._feed_ranker = True
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a logger inside the feed_ranker hierarchy."""
    if name == "feed_ranker" or name.startswith("feed_ranker."):
        return logging.getLogger(name)
    return logger.getChild(name)

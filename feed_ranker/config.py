"""Configuration for feed_ranker.

Settings are read from FEED_RANKER_* environment variables.
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class ServerConfig:
    """Runtime configuration for the server, CLI and aggregator."""

    name: str = "feed_ranker"
    log_level: str = "INFO"
    fetch_timeout: float = 30.0
    max_concurrency: int = 8
    user_agent: str = "FeedRanker/1.0 (RSS Feed Aggregator)"
    default_title: str = "Combined Feed"


def _env_number(name: str, default, cast):
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = cast(raw)
    except ValueError:
        raise ValueError(f"Invalid value for {name}: {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


def load_config() -> ServerConfig:
    """Build a ServerConfig from the environment.

    Returns:
        ServerConfig with defaults for unset variables

    Raises:
        ValueError: If a numeric variable cannot be parsed
    """
    defaults = ServerConfig()
    return ServerConfig(
        name=os.environ.get("FEED_RANKER_NAME", defaults.name),
        log_level=os.environ.get("FEED_RANKER_LOG_LEVEL", defaults.log_level).upper(),
        fetch_timeout=_env_number("FEED_RANKER_FETCH_TIMEOUT", defaults.fetch_timeout, float),
        max_concurrency=_env_number("FEED_RANKER_MAX_CONCURRENCY", defaults.max_concurrency, int),
        user_agent=os.environ.get("FEED_RANKER_USER_AGENT", defaults.user_agent),
        default_title=os.environ.get("FEED_RANKER_DEFAULT_TITLE", defaults.default_title),
    )


# Singleton config
_config: Optional[ServerConfig] = None


def get_config() -> ServerConfig:
    """Get or create the process-wide configuration."""
    global _config

    if _config is None:
        _config = load_config()

    return _config


def reset_config() -> None:
    """Drop the cached configuration (used by tests)."""
    global _config
    _config = None

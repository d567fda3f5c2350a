"""Unit tests for configuration and logging setup."""

import logging

import pytest

from feed_ranker.config import ServerConfig, get_config, load_config
from feed_ranker.logging_config import get_logger, setup_logging


class TestLoadConfig:
    """Tests for environment-driven configuration."""

    def test_defaults(self):
        config = load_config()

        assert config == ServerConfig()
        assert config.max_concurrency == 8
        assert config.default_title == "Combined Feed"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("FEED_RANKER_NAME", "my-ranker")
        monkeypatch.setenv("FEED_RANKER_LOG_LEVEL", "debug")
        monkeypatch.setenv("FEED_RANKER_FETCH_TIMEOUT", "5.5")
        monkeypatch.setenv("FEED_RANKER_MAX_CONCURRENCY", "3")

        config = load_config()

        assert config.name == "my-ranker"
        assert config.log_level == "DEBUG"
        assert config.fetch_timeout == 5.5
        assert config.max_concurrency == 3

    def test_invalid_number_names_variable(self, monkeypatch):
        monkeypatch.setenv("FEED_RANKER_MAX_CONCURRENCY", "lots")

        with pytest.raises(ValueError, match="FEED_RANKER_MAX_CONCURRENCY"):
            load_config()

    def test_non_positive_number_rejected(self, monkeypatch):
        monkeypatch.setenv("FEED_RANKER_FETCH_TIMEOUT", "0")

        with pytest.raises(ValueError, match="FEED_RANKER_FETCH_TIMEOUT"):
            load_config()

    def test_get_config_is_cached(self):
        assert get_config() is get_config()


class TestLogging:
    """Tests for logging setup."""

    def test_setup_logging_sets_level_once(self):
        root = setup_logging(ServerConfig(log_level="WARNING"))
        handlers = list(root.handlers)

        setup_logging(ServerConfig(log_level="DEBUG"))

        assert root.level == logging.DEBUG
        assert root.handlers == handlers

    def test_get_logger_stays_in_hierarchy(self):
        assert get_logger("feed_ranker.services.ranking").name == "feed_ranker.services.ranking"
        assert get_logger("tests").name == "feed_ranker.tests"

"""
Tests for configuration loading and logging setup.
"""

import logging

import pytest
from pydantic import ValidationError
from rich.logging import RichHandler

from bakery_cms.config import (
    BakeryConfig,
    LogFormat,
    configure,
    configure_logging,
    get_config,
    set_config,
)


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way pytest left it."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestBakeryConfig:
    """Test the configuration model."""

    def test_defaults(self):
        config = BakeryConfig()

        assert config.database_url == "sqlite:///bakery.db"
        assert config.cascade_delete_enabled is True
        assert config.enforce_active_uniqueness is True
        assert config.allow_hard_delete_of_active is False
        assert config.is_sqlite

    def test_environment_validation(self):
        assert BakeryConfig(environment="Staging").environment == "staging"

        with pytest.raises(ValidationError):
            BakeryConfig(environment="qa")

    def test_log_level_validation(self):
        assert BakeryConfig(log_level="debug").log_level == "DEBUG"

        with pytest.raises(ValidationError):
            BakeryConfig(log_level="verbose")

    def test_pool_size_bounds(self):
        with pytest.raises(ValidationError):
            BakeryConfig(database_pool_size=0)

    def test_to_dict_is_json_friendly(self):
        data = BakeryConfig(log_format=LogFormat.PLAIN).to_dict()

        assert data["log_format"] == "plain"
        assert data["database_echo"] is False

    def test_is_sqlite(self):
        assert not BakeryConfig(database_url="postgresql://bakery@db/bakery").is_sqlite


class TestFromEnv:
    """Test loading from BAKERY_ environment variables."""

    def test_reads_prefixed_variables(self, monkeypatch):
        monkeypatch.setenv("BAKERY_DATABASE_URL", "sqlite:///other.db")
        monkeypatch.setenv("BAKERY_DATABASE_ECHO", "yes")
        monkeypatch.setenv("BAKERY_DATABASE_POOL_SIZE", "9")
        monkeypatch.setenv("BAKERY_CASCADE_DELETE_ENABLED", "false")
        monkeypatch.setenv("BAKERY_LOG_FORMAT", "plain")

        config = BakeryConfig.from_env()

        assert config.database_url == "sqlite:///other.db"
        assert config.database_echo is True
        assert config.database_pool_size == 9
        assert config.cascade_delete_enabled is False
        assert config.log_format == LogFormat.PLAIN

    def test_custom_prefix(self, monkeypatch):
        monkeypatch.setenv("SHOP_ENVIRONMENT", "development")

        assert BakeryConfig.from_env(prefix="SHOP_").environment == "development"

    def test_invalid_value_rejected(self, monkeypatch):
        monkeypatch.setenv("BAKERY_ENVIRONMENT", "moon")

        with pytest.raises(ValidationError):
            BakeryConfig.from_env()


class TestGlobalConfig:
    """Test the module-level configuration helpers."""

    def test_set_and_get(self):
        config = BakeryConfig(application_name="Shop")
        set_config(config)

        assert get_config() is config

    def test_get_loads_from_env_when_unset(self, monkeypatch):
        monkeypatch.setenv("BAKERY_APPLICATION_NAME", "From Env")
        set_config(None)

        assert get_config().application_name == "From Env"

    def test_configure_merges(self, bakery_config):
        config = configure(database_echo=True)

        assert config.database_echo is True
        assert config.database_url == bakery_config.database_url
        assert get_config() is config

    def test_configure_from_scratch(self):
        set_config(None)

        assert configure(environment="test").environment == "test"


class TestConfigureLogging:
    """Test root logger setup."""

    def test_rich_handler(self, restore_root_logger):
        configure_logging(BakeryConfig(log_level="WARNING"))

        assert isinstance(restore_root_logger.handlers[0], RichHandler)
        assert restore_root_logger.level == logging.WARNING

    def test_plain_handler(self, restore_root_logger):
        configure_logging(BakeryConfig(log_format=LogFormat.PLAIN))

        handler = restore_root_logger.handlers[0]
        assert not isinstance(handler, RichHandler)
        assert isinstance(handler, logging.StreamHandler)

    def test_echo_enables_engine_logging(self, restore_root_logger):
        engine_logger = logging.getLogger("sqlalchemy.engine")
        previous = engine_logger.level
        try:
            configure_logging(BakeryConfig(database_echo=True))
            assert engine_logger.level == logging.INFO
        finally:
            engine_logger.setLevel(previous)

"""
Tests for lifecycle toolkit configuration.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from lifecycle_toolkit.config import (
    LifecycleConfig,
    LogLevel,
    configure,
    get_config,
    set_config,
)


class TestLifecycleConfig:
    """Test configuration defaults and validation."""

    def test_defaults(self):
        config = LifecycleConfig()

        assert config.environment == "production"
        assert config.log_level == LogLevel.INFO
        assert config.default_page_size == 10
        assert config.max_page_size == 100
        assert config.operation_timeout_seconds == 5.0
        assert config.batch_timeout_seconds == 60.0

    def test_environment_normalized(self):
        assert LifecycleConfig(environment="Testing").environment == "testing"

    def test_invalid_environment(self):
        with pytest.raises(PydanticValidationError):
            LifecycleConfig(environment="qa")

    def test_default_page_size_cannot_exceed_max(self):
        with pytest.raises(PydanticValidationError, match="cannot exceed"):
            LifecycleConfig(default_page_size=50, max_page_size=20)

    @pytest.mark.parametrize(
        "field,value",
        [("max_page_size", 0), ("max_page_size", 5000), ("operation_timeout_seconds", 0)],
    )
    def test_out_of_range(self, field, value):
        with pytest.raises(PydanticValidationError):
            LifecycleConfig(**{field: value})

    def test_to_dict(self):
        data = LifecycleConfig(log_level="DEBUG").to_dict()

        assert data["log_level"] == "DEBUG"
        assert data["database_url"].startswith("sqlite")


class TestFromEnv:
    """Test loading configuration from environment variables."""

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("LIFECYCLE_MAX_PAGE_SIZE", "50")
        monkeypatch.setenv("LIFECYCLE_OPERATION_TIMEOUT_SECONDS", "2.5")
        monkeypatch.setenv("LIFECYCLE_LOG_LEVEL", "debug")
        monkeypatch.setenv("LIFECYCLE_DATABASE_URL", "sqlite:///:memory:")

        config = LifecycleConfig.from_env()

        assert config.max_page_size == 50
        assert config.operation_timeout_seconds == 2.5
        assert config.log_level == LogLevel.DEBUG
        assert config.database_url == "sqlite:///:memory:"

    def test_custom_prefix(self, monkeypatch):
        monkeypatch.setenv("ADMIN_DEFAULT_PAGE_SIZE", "25")
        assert LifecycleConfig.from_env(prefix="ADMIN_").default_page_size == 25

    def test_invalid_value_reported(self, monkeypatch):
        monkeypatch.setenv("LIFECYCLE_MAX_PAGE_SIZE", "lots")

        with pytest.raises(PydanticValidationError):
            LifecycleConfig.from_env()


class TestGlobalConfig:
    """Test the process-wide configuration helpers."""

    def test_get_config_cached(self):
        assert get_config() is get_config()

    def test_set_config(self):
        custom = LifecycleConfig(environment="testing")
        set_config(custom)
        assert get_config() is custom

        set_config(None)
        assert get_config() is not custom

    def test_configure_updates(self):
        configure(max_page_size=40)
        config = configure(default_page_size=5)

        assert config.max_page_size == 40
        assert config.default_page_size == 5
        assert get_config() is config

    def test_get_config_propagates_bad_environment(self, monkeypatch):
        monkeypatch.setenv("LIFECYCLE_ENVIRONMENT", "qa")

        with pytest.raises(PydanticValidationError):
            get_config()

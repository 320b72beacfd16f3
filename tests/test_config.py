"""Unit tests for config.py - Configuration management."""

import os
from unittest.mock import patch

import pytest

import config
from config import (
    Config,
    ConfigurationError,
    LoggingConfig,
    ProviderConfig,
    RetryConfig,
    get_config,
    load_config,
    reset_config,
)


class TestProviderConfig:
    """Tests for ProviderConfig class."""

    def test_default_values(self):
        """Test default configuration values."""
        cfg = ProviderConfig()
        assert cfg.host == ""
        assert cfg.token == ""
        assert cfg.service_name == "healthcheck"

    def test_from_env(self):
        """Test loading configuration from environment variables."""
        env_vars = {
            "HCAAS_HOST": "https://tsuru.example.com",
            "HCAAS_TOKEN": "envtoken",
            "HCAAS_SERVICE_NAME": "hcaas-prod",
        }
        with patch.dict(os.environ, env_vars, clear=False):
            cfg = ProviderConfig.from_env()
            assert cfg.host == "https://tsuru.example.com"
            assert cfg.token == "envtoken"
            assert cfg.service_name == "hcaas-prod"

    def test_from_env_empty_service_name_uses_default(self):
        """Test that an empty service name falls back to healthcheck."""
        with patch.dict(os.environ, {"HCAAS_SERVICE_NAME": ""}, clear=True):
            cfg = ProviderConfig.from_env()
            assert cfg.service_name == "healthcheck"

    def test_token_not_in_repr(self):
        """Test that token is not exposed in repr."""
        cfg = ProviderConfig(token="secret123")
        assert "secret123" not in repr(cfg)


class TestRetryConfig:
    """Tests for RetryConfig class."""

    def test_default_values(self):
        """Test default configuration values."""
        cfg = RetryConfig()
        assert cfg.create_timeout == 1200
        assert cfg.delete_timeout == 1200
        assert cfg.safety_margin == 60
        assert cfg.backoff_base_delay == 0.5
        assert cfg.backoff_max_delay == 10.0
        assert cfg.backoff_jitter_factor == 0.1
        assert cfg.request_timeout == 30.0

    def test_from_env(self):
        """Test loading configuration from environment variables."""
        env_vars = {
            "HCAAS_CREATE_TIMEOUT": "300",
            "HCAAS_DELETE_TIMEOUT": "600",
            "HCAAS_TIMEOUT_SAFETY_MARGIN": "30",
            "HCAAS_BACKOFF_BASE_DELAY": "1",
            "HCAAS_BACKOFF_MAX_DELAY": "20",
            "HCAAS_BACKOFF_JITTER_FACTOR": "0.2",
            "HCAAS_REQUEST_TIMEOUT": "5",
        }
        with patch.dict(os.environ, env_vars, clear=False):
            cfg = RetryConfig.from_env()
            assert cfg.create_timeout == 300
            assert cfg.delete_timeout == 600
            assert cfg.safety_margin == 30
            assert cfg.backoff_base_delay == 1
            assert cfg.backoff_max_delay == 20
            assert cfg.backoff_jitter_factor == 0.2
            assert cfg.request_timeout == 5

    def test_from_env_invalid_number(self):
        """Test that a non-numeric value raises ConfigurationError."""
        with patch.dict(os.environ, {"HCAAS_CREATE_TIMEOUT": "soon"}, clear=False):
            with pytest.raises(ConfigurationError) as exc_info:
                RetryConfig.from_env()
            assert "HCAAS_CREATE_TIMEOUT" in str(exc_info.value)

    def test_invalid_values_rejected(self):
        """Test that out-of-range values are collected into one error."""
        with pytest.raises(ConfigurationError) as exc_info:
            RetryConfig(
                create_timeout=0,
                safety_margin=-1,
                backoff_base_delay=5,
                backoff_max_delay=1,
                backoff_jitter_factor=1.5,
            )
        message = str(exc_info.value)
        assert "create_timeout" in message
        assert "safety_margin" in message
        assert "backoff_max_delay" in message
        assert "backoff_jitter_factor" in message

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            RetryConfig(request_timeout=0)


class TestLoggingConfig:
    """Tests for LoggingConfig class."""

    def test_from_env_uppercases(self):
        with patch.dict(os.environ, {"LOG_LEVEL": "debug"}, clear=False):
            assert LoggingConfig.from_env().log_level == "DEBUG"


class TestConfig:
    """Tests for the main Config class and singleton helpers."""

    def test_default(self):
        cfg = Config.default()
        assert cfg.provider == ProviderConfig()
        assert cfg.retry == RetryConfig()
        assert cfg.logging.log_level == "INFO"

    def test_from_env(self):
        with patch.dict(os.environ, {"HCAAS_HOST": "https://h"}, clear=False):
            cfg = Config.from_env()
            assert cfg.provider.host == "https://h"

    def test_load_config_is_singleton(self):
        reset_config()
        first = load_config()
        second = get_config()
        assert first is second
        assert config.config is first

    def test_reset_config(self):
        load_config()
        reset_config()
        assert config.config is None

"""
Configuration module for the HCaaS reconciler plugin.

Loads configuration from environment variables. Values given explicitly to
the provider (host, token) always take precedence over these.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

DEFAULT_SERVICE_NAME = "healthcheck"

# Default operation timeout of the host framework (20 minutes)
DEFAULT_OPERATION_TIMEOUT = 1200
# Reserved for plugin-host round trips, subtracted from every operation timeout
DEFAULT_SAFETY_MARGIN = 60


class ConfigurationError(ValueError):
    """Raised when configuration validation fails."""

    pass


def _get_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError as e:
        raise ConfigurationError(f"{key} must be a number: {value}") from e


@dataclass
class ProviderConfig:
    """Target platform configuration."""

    host: str = ""
    token: str = field(default="", repr=False)  # Never log token
    service_name: str = DEFAULT_SERVICE_NAME

    @classmethod
    def from_env(cls):
        """Load from environment variables."""
        return cls(
            host=os.getenv("HCAAS_HOST", ""),
            token=os.getenv("HCAAS_TOKEN", ""),
            service_name=os.getenv("HCAAS_SERVICE_NAME", DEFAULT_SERVICE_NAME)
            or DEFAULT_SERVICE_NAME,
        )


@dataclass
class RetryConfig:
    """Event lock retry configuration."""

    create_timeout: float = DEFAULT_OPERATION_TIMEOUT  # seconds
    delete_timeout: float = DEFAULT_OPERATION_TIMEOUT  # seconds
    safety_margin: float = DEFAULT_SAFETY_MARGIN  # seconds

    # Exponential backoff configuration
    backoff_base_delay: float = 0.5  # base delay in seconds
    backoff_max_delay: float = 10.0  # max delay in seconds
    backoff_jitter_factor: float = 0.1  # ±10% jitter

    # Per-attempt HTTP timeout
    request_timeout: float = 30.0

    def __post_init__(self):
        errors = []
        if self.create_timeout <= 0:
            errors.append("create_timeout must be positive")
        if self.delete_timeout <= 0:
            errors.append("delete_timeout must be positive")
        if self.safety_margin < 0:
            errors.append("safety_margin cannot be negative")
        if self.backoff_base_delay <= 0:
            errors.append("backoff_base_delay must be positive")
        if self.backoff_max_delay < self.backoff_base_delay:
            errors.append("backoff_max_delay must be >= backoff_base_delay")
        if not 0 <= self.backoff_jitter_factor < 1:
            errors.append("backoff_jitter_factor must be in [0, 1)")
        if self.request_timeout <= 0:
            errors.append("request_timeout must be positive")

        if errors:
            raise ConfigurationError(
                "Configuration validation failed:\n  - " + "\n  - ".join(errors)
            )

    @classmethod
    def from_env(cls):
        """Load from environment variables."""
        return cls(
            create_timeout=_get_float(
                "HCAAS_CREATE_TIMEOUT", DEFAULT_OPERATION_TIMEOUT
            ),
            delete_timeout=_get_float(
                "HCAAS_DELETE_TIMEOUT", DEFAULT_OPERATION_TIMEOUT
            ),
            safety_margin=_get_float(
                "HCAAS_TIMEOUT_SAFETY_MARGIN", DEFAULT_SAFETY_MARGIN
            ),
            backoff_base_delay=_get_float("HCAAS_BACKOFF_BASE_DELAY", 0.5),
            backoff_max_delay=_get_float("HCAAS_BACKOFF_MAX_DELAY", 10.0),
            backoff_jitter_factor=_get_float("HCAAS_BACKOFF_JITTER_FACTOR", 0.1),
            request_timeout=_get_float("HCAAS_REQUEST_TIMEOUT", 30.0),
        )


@dataclass
class LoggingConfig:
    """Logging configuration."""

    log_level: str = "INFO"

    @classmethod
    def from_env(cls):
        """Load from environment variables."""
        return cls(log_level=os.getenv("LOG_LEVEL", "INFO").upper())


@dataclass
class Config:
    """Main configuration object."""

    provider: ProviderConfig
    retry: RetryConfig
    logging: LoggingConfig

    @classmethod
    def from_env(cls):
        """Load all configuration from environment variables."""
        return cls(
            provider=ProviderConfig.from_env(),
            retry=RetryConfig.from_env(),
            logging=LoggingConfig.from_env(),
        )

    @classmethod
    def default(cls):
        """Return default configuration."""
        return cls(
            provider=ProviderConfig(),
            retry=RetryConfig(),
            logging=LoggingConfig(),
        )


# Global config instance
config: Optional[Config] = None


def load_config() -> Config:
    """Load configuration (singleton pattern)."""
    global config
    if config is None:
        config = Config.from_env()
    return config


def get_config() -> Config:
    """Get the current configuration."""
    if config is None:
        return load_config()
    return config


def reset_config() -> None:
    """Reset configuration (mainly for testing)."""
    global config
    config = None

"""Configuration parsing and validation."""

from orderly.config.env import (
    ENV_JSON_LOGS,
    ENV_LOG_LEVEL,
    ENV_PAUSE_ON_ERROR,
    apply_env_overrides,
    load_env_overrides,
)
from orderly.config.schema import (
    ConfigError,
    ConfigParseError,
    ConfigValidationError,
    QueueConfig,
    load_config,
    parse_config,
)

__all__ = [
    # Schema types
    "QueueConfig",
    # Schema functions
    "parse_config",
    "load_config",
    # Schema errors
    "ConfigError",
    "ConfigParseError",
    "ConfigValidationError",
    # Environment functions
    "load_env_overrides",
    "apply_env_overrides",
    # Environment constants
    "ENV_PAUSE_ON_ERROR",
    "ENV_LOG_LEVEL",
    "ENV_JSON_LOGS",
]

"""Environment variable overrides for queue configuration."""

import os
from dataclasses import replace
from typing import Any

from orderly.config.schema import ConfigValidationError, QueueConfig
from orderly.core.logging import LogLevel

# Environment variable names
ENV_PAUSE_ON_ERROR = "ORDERLY_PAUSE_ON_ERROR"
ENV_LOG_LEVEL = "ORDERLY_LOG_LEVEL"
ENV_JSON_LOGS = "ORDERLY_JSON_LOGS"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigValidationError(f"{name} must be a boolean, got {raw!r}")


def load_env_overrides() -> dict[str, Any]:
    """Read configuration overrides from the environment.

    Only variables that are set appear in the result.

    Returns:
        Mapping of QueueConfig field names to override values.

    Raises:
        ConfigValidationError: If a variable holds an invalid value.
    """
    overrides: dict[str, Any] = {}

    pause_on_error = os.environ.get(ENV_PAUSE_ON_ERROR)
    if pause_on_error is not None:
        overrides["pause_on_error"] = _parse_bool(ENV_PAUSE_ON_ERROR, pause_on_error)

    log_level = os.environ.get(ENV_LOG_LEVEL)
    if log_level is not None:
        try:
            overrides["log_level"] = LogLevel.from_name(log_level).name
        except ValueError as e:
            raise ConfigValidationError(f"{ENV_LOG_LEVEL}: {e}") from e

    json_logs = os.environ.get(ENV_JSON_LOGS)
    if json_logs is not None:
        overrides["json_logs"] = _parse_bool(ENV_JSON_LOGS, json_logs)

    return overrides


def apply_env_overrides(config: QueueConfig) -> QueueConfig:
    """Return a copy of config with environment overrides applied."""
    overrides = load_env_overrides()
    if not overrides:
        return config
    return replace(config, **overrides)

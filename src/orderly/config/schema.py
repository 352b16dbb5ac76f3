"""YAML schema validation for queue configuration files."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from orderly.core.logging import LogLevel


class ConfigError(Exception):
    """Base exception for configuration errors."""

    pass


class ConfigParseError(ConfigError):
    """Error parsing YAML configuration."""

    pass


class ConfigValidationError(ConfigError):
    """Error validating configuration schema."""

    pass


@dataclass(frozen=True)
class QueueConfig:
    """Complete queue configuration.

    Attributes:
        pause_on_error: Pause the queue and keep the error when a task fails
        log_level: Minimum structured log level name
        json_logs: Emit JSON log lines instead of human-readable ones
        show_status: Attach a console status display to new queues
    """

    pause_on_error: bool = False
    log_level: str = "INFO"
    json_logs: bool = True
    show_status: bool = False


KNOWN_KEYS = frozenset({"pause_on_error", "log_level", "json_logs", "show_status"})


def _parse_yaml(content: str) -> dict[str, Any]:
    """Parse YAML content into a dictionary.

    Raises:
        ConfigParseError: If YAML parsing fails.
    """
    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigParseError(f"Failed to parse YAML: {e}") from e
    if result is None:
        return {}
    if not isinstance(result, dict):
        raise ConfigParseError("Configuration must be a YAML mapping")
    return result


def _require_bool(section: dict[str, Any], key: str, default: bool) -> bool:
    value = section.get(key, default)
    if not isinstance(value, bool):
        raise ConfigValidationError(f"queue.{key} must be a boolean")
    return value


def _validate_log_level(section: dict[str, Any]) -> str:
    value = section.get("log_level", "INFO")
    if not isinstance(value, str) or not value.strip():
        raise ConfigValidationError("queue.log_level must be a non-empty string")
    try:
        return LogLevel.from_name(value).name
    except ValueError as e:
        raise ConfigValidationError(f"queue.log_level: {e}") from e


def _validate_queue(data: dict[str, Any]) -> QueueConfig:
    """Validate the queue section of configuration.

    The settings may live under a top-level ``queue:`` mapping or at the root.

    Raises:
        ConfigValidationError: If validation fails.
    """
    section = data.get("queue", data)
    if not isinstance(section, dict):
        raise ConfigValidationError("queue must be a mapping")

    unknown = sorted(set(section) - KNOWN_KEYS)
    if unknown:
        raise ConfigValidationError(f"Unknown configuration keys: {', '.join(unknown)}")

    return QueueConfig(
        pause_on_error=_require_bool(section, "pause_on_error", False),
        log_level=_validate_log_level(section),
        json_logs=_require_bool(section, "json_logs", True),
        show_status=_require_bool(section, "show_status", False),
    )


def parse_config(content: str) -> QueueConfig:
    """Parse and validate queue configuration content.

    Args:
        content: Raw YAML string.

    Returns:
        Validated QueueConfig object.

    Raises:
        ConfigParseError: If YAML parsing fails.
        ConfigValidationError: If schema validation fails.
    """
    return _validate_queue(_parse_yaml(content))


def load_config(path: Path) -> QueueConfig:
    """Load and validate queue configuration from a file.

    Raises:
        ConfigError: If the file does not exist.
        ConfigParseError: If file reading or YAML parsing fails.
        ConfigValidationError: If schema validation fails.
    """
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")
    try:
        content = path.read_text()
    except OSError as e:
        raise ConfigParseError(f"Failed to read configuration file: {e}") from e

    return parse_config(content)

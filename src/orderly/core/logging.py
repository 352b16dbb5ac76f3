"""Structured logging for orderly.

Provides:
- JSON-formatted log output
- Context-aware logging
- Log level management
- Status transition logging
- Task execution logging
"""

from __future__ import annotations

import json
import sys
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, TextIO


class LogLevel(Enum):
    """Log levels."""

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50

    @classmethod
    def from_name(cls, name: str) -> LogLevel:
        """Look up a level by case-insensitive name.

        Raises:
            ValueError: If the name is not a known level
        """
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown log level: {name}") from None


@dataclass
class LogEntry:
    """A structured log entry."""

    timestamp: str
    level: str
    message: str
    component: str
    event_type: str | None = None
    entry_id: str | None = None
    generation: int | None = None
    duration_ms: float | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> str:
        """Convert to JSON string."""
        data = {k: v for k, v in asdict(self).items() if v is not None}
        if not data.get("extra"):
            data.pop("extra", None)
        return json.dumps(data, default=str)

    def to_human_readable(self) -> str:
        """Convert to human-readable format."""
        parts = [f"[{self.timestamp}]", f"[{self.level}]", f"[{self.component}]"]
        if self.event_type:
            parts.append(f"[{self.event_type}]")
        parts.append(self.message)
        if self.entry_id:
            parts.append(f"entry={self.entry_id}")
        return " ".join(parts)


class StructuredLogger:
    """Structured logger for queue components.

    Writes one entry per line, either JSON or human-readable.
    """

    def __init__(
        self,
        component: str,
        level: LogLevel = LogLevel.INFO,
        output: TextIO | None = None,
        json_format: bool = True,
    ) -> None:
        """Initialize logger.

        Args:
            component: Component name (queue, display, config)
            level: Minimum log level
            output: Output stream (defaults to stderr)
            json_format: Whether to use JSON format
        """
        self.component = component
        self.level = level
        self.output = output or sys.stderr
        self.json_format = json_format
        self._context: dict[str, Any] = {}

    def set_context(self, **kwargs: Any) -> None:
        """Set persistent context for all log entries."""
        self._context.update(kwargs)

    def clear_context(self) -> None:
        """Clear persistent context."""
        self._context.clear()

    def with_context(self, **kwargs: Any) -> StructuredLogger:
        """Create a new logger with additional context."""
        child = StructuredLogger(
            component=self.component,
            level=self.level,
            output=self.output,
            json_format=self.json_format,
        )
        child._context = {**self._context, **kwargs}
        return child

    def is_enabled_for(self, level: LogLevel) -> bool:
        return level.value >= self.level.value

    def _log(
        self,
        level: LogLevel,
        message: str,
        event_type: str | None = None,
        **kwargs: Any,
    ) -> None:
        if not self.is_enabled_for(level):
            return

        generation = kwargs.pop("generation", None)
        duration_ms = kwargs.pop("duration_ms", None)
        extra = {**self._context, **kwargs}

        entry = LogEntry(
            timestamp=datetime.now(UTC).isoformat(),
            level=level.name,
            message=message,
            component=self.component,
            event_type=event_type,
            entry_id=extra.pop("entry_id", None),
            generation=generation,
            duration_ms=duration_ms,
            extra=extra,
        )

        if self.json_format:
            self.output.write(entry.to_json() + "\n")
        else:
            self.output.write(entry.to_human_readable() + "\n")
        self.output.flush()

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message."""
        self._log(LogLevel.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message."""
        self._log(LogLevel.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message."""
        self._log(LogLevel.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message."""
        self._log(LogLevel.ERROR, message, **kwargs)

    def critical(self, message: str, **kwargs: Any) -> None:
        """Log critical message."""
        self._log(LogLevel.CRITICAL, message, **kwargs)

    # Queue events

    def log_state_transition(
        self,
        from_state: str,
        to_state: str,
        reason: str = "",
    ) -> None:
        """Log a status transition.

        Args:
            from_state: Previous status
            to_state: New status
            reason: Event that caused the transition
        """
        self._log(
            LogLevel.INFO,
            f"State transition: {from_state} -> {to_state}",
            event_type="state_transition",
            from_state=from_state,
            to_state=to_state,
            reason=reason,
        )

    def log_task_start(
        self,
        entry_id: str,
        dedupe_key: str | None,
        generation: int,
    ) -> None:
        """Log the start of a task execution."""
        self._log(
            LogLevel.DEBUG,
            f"Task started: {entry_id}",
            event_type="task_start",
            entry_id=entry_id,
            dedupe_key=dedupe_key,
            generation=generation,
        )

    def log_task_end(
        self,
        entry_id: str,
        outcome: str,
        duration_ms: float | None = None,
    ) -> None:
        """Log the end of a task execution.

        Args:
            entry_id: Entry identifier
            outcome: "succeeded" or "failed"
            duration_ms: Execution time in milliseconds
        """
        self._log(
            LogLevel.DEBUG,
            f"Task {outcome}: {entry_id}",
            event_type="task_end",
            entry_id=entry_id,
            outcome=outcome,
            duration_ms=round(duration_ms, 3) if duration_ms is not None else None,
        )

    def log_dedupe_skip(self, dedupe_key: str) -> None:
        """Log a submission suppressed as an adjacent duplicate."""
        self._log(
            LogLevel.DEBUG,
            f"Duplicate submission skipped: {dedupe_key}",
            event_type="dedupe_skip",
            dedupe_key=dedupe_key,
        )

    def log_cancel(self, discarded: int, generation: int) -> None:
        """Log a cancellation.

        Args:
            discarded: Number of pending entries dropped
            generation: Generation after the bump
        """
        self._log(
            LogLevel.INFO,
            f"Queue cancelled, {discarded} pending task(s) discarded",
            event_type="cancel",
            discarded=discarded,
            generation=generation,
        )


def create_logger(
    component: str,
    level: LogLevel = LogLevel.INFO,
    json_format: bool = True,
    output: TextIO | None = None,
) -> StructuredLogger:
    """Create a structured logger."""
    return StructuredLogger(
        component=component,
        level=level,
        json_format=json_format,
        output=output,
    )


# Global loggers for each component
_loggers: dict[str, StructuredLogger] = {}
_defaults: dict[str, Any] = {}


def get_logger(component: str) -> StructuredLogger:
    """Get or create a logger for a component."""
    if component not in _loggers:
        _loggers[component] = create_logger(component, **_defaults)
    return _loggers[component]


def reset_loggers() -> None:
    """Reset all global loggers. Useful for testing."""
    _loggers.clear()
    _defaults.clear()


def configure_logging(
    level: LogLevel = LogLevel.INFO,
    json_format: bool = True,
    output: TextIO | None = None,
) -> None:
    """Configure global logging settings.

    Applies to loggers already created and to components requested later
    through get_logger().

    Args:
        level: Minimum log level for all loggers
        json_format: Whether to use JSON format
        output: Output stream
    """
    _defaults.update(level=level, json_format=json_format, output=output)
    for logger in _loggers.values():
        logger.level = level
        logger.json_format = json_format
        if output is not None:
            logger.output = output

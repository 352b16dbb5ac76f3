"""Centralized error handling for task and listener failures.

Provides:
- Context-aware error logging
- Failure notification callbacks
- The status a queue should move to after a task failure
"""

from __future__ import annotations

import contextlib
import traceback
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from orderly.core.logging import StructuredLogger


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    WARNING = "warning"  # Absorbed, processing continues
    ERROR = "error"  # Captured, processing pauses
    CRITICAL = "critical"  # Queue machinery itself failed


@dataclass
class ErrorContext:
    """Context information for error handling."""

    operation: str  # What was being attempted
    component: str  # Which component failed (queue, listener)
    task_id: str | None = None  # Associated entry ID
    pause_on_error: bool = False
    additional_info: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result: dict[str, Any] = {
            "operation": self.operation,
            "component": self.component,
            "pause_on_error": self.pause_on_error,
        }
        if self.task_id is not None:
            result["task_id"] = self.task_id
        if self.additional_info:
            result["additional_info"] = self.additional_info
        return result


class GracefulErrorHandler:
    """Handles errors without letting them escape the execution loop.

    Ensures:
    - Errors are logged with full context
    - Observers are notified
    - The queue is told whether to pause or carry on
    """

    def __init__(
        self,
        logger: StructuredLogger | None = None,
        on_error: Callable[[ErrorContext, BaseException], None] | None = None,
    ) -> None:
        """Initialize error handler.

        Args:
            logger: Structured logger instance
            on_error: Callback for error notifications
        """
        self._logger = logger
        self._on_error = on_error

    def handle_error(
        self,
        error: BaseException,
        context: ErrorContext,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
    ) -> str:
        """Handle an error gracefully.

        Args:
            error: The failure that occurred
            context: Error context information
            severity: How severe the error is

        Returns:
            Recommended QueueStatus value as string
        """
        self._log_error(error, context, severity)

        if self._on_error:
            with contextlib.suppress(Exception):
                self._on_error(context, error)

        return self._determine_status(context)

    def _log_error(
        self,
        error: BaseException,
        context: ErrorContext,
        severity: ErrorSeverity,
    ) -> None:
        if self._logger is None:
            return

        log_data = {
            "error_type": type(error).__name__,
            "error_message": str(error),
            "severity": severity.value,
            **context.to_dict(),
            "traceback": "".join(traceback.format_exception(error)),
        }

        log = {
            ErrorSeverity.WARNING: self._logger.warning,
            ErrorSeverity.ERROR: self._logger.error,
            ErrorSeverity.CRITICAL: self._logger.critical,
        }[severity]
        log(f"{context.operation} failed: {type(error).__name__}", **log_data)

    def _determine_status(self, context: ErrorContext) -> str:
        if context.pause_on_error:
            return "PAUSED"
        return "PROCESSING"

    def wrap_operation(
        self,
        operation: Callable[[], Any],
        context: ErrorContext,
        default_return: Any = None,
    ) -> Any:
        """Run an operation, absorbing and logging any exception.

        Args:
            operation: The operation to execute
            context: Error context for logging
            default_return: Value to return on error

        Returns:
            Operation result or default_return on error
        """
        try:
            return operation()
        except Exception as e:
            self.handle_error(e, context)
            return default_return


def create_error_handler(
    logger: StructuredLogger | None = None,
    on_error: Callable[[ErrorContext, BaseException], None] | None = None,
) -> GracefulErrorHandler:
    """Create a graceful error handler."""
    return GracefulErrorHandler(logger=logger, on_error=on_error)

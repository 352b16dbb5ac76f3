"""Core infrastructure for orderly.

Provides:
- Structured logging
- Metrics collection
- Error handling with graceful degradation
"""

from orderly.core.error_handling import (
    ErrorContext,
    ErrorSeverity,
    GracefulErrorHandler,
    create_error_handler,
)
from orderly.core.logging import (
    LogEntry,
    LogLevel,
    StructuredLogger,
    configure_logging,
    create_logger,
    get_logger,
    reset_loggers,
)
from orderly.core.metrics import LatencyStats, QueueMetrics

__all__ = [
    # Logging
    "LogLevel",
    "LogEntry",
    "StructuredLogger",
    "create_logger",
    "get_logger",
    "reset_loggers",
    "configure_logging",
    # Metrics
    "LatencyStats",
    "QueueMetrics",
    # Error handling
    "ErrorSeverity",
    "ErrorContext",
    "GracefulErrorHandler",
    "create_error_handler",
]

"""Tests for error handling module."""

import json
from io import StringIO
from unittest.mock import MagicMock

import pytest

from orderly.core.error_handling import (
    ErrorContext,
    ErrorSeverity,
    GracefulErrorHandler,
    create_error_handler,
)
from orderly.core.logging import LogLevel, StructuredLogger


@pytest.fixture
def output() -> StringIO:
    return StringIO()


@pytest.fixture
def handler(output: StringIO) -> GracefulErrorHandler:
    logger = StructuredLogger("queue", level=LogLevel.DEBUG, output=output)
    return GracefulErrorHandler(logger=logger)


def _records(output: StringIO) -> list[dict]:
    return [json.loads(line) for line in output.getvalue().splitlines()]


class TestErrorContext:
    """Tests for ErrorContext dataclass."""

    def test_minimal_to_dict(self) -> None:
        """Only set fields are included."""
        context = ErrorContext(operation="execute_task", component="queue")
        assert context.to_dict() == {
            "operation": "execute_task",
            "component": "queue",
            "pause_on_error": False,
        }

    def test_full_to_dict(self) -> None:
        """task_id and additional_info appear when given."""
        context = ErrorContext(
            operation="execute_task",
            component="queue",
            task_id="entry_1",
            pause_on_error=True,
            additional_info={"generation": 2},
        )
        data = context.to_dict()
        assert data["task_id"] == "entry_1"
        assert data["pause_on_error"] is True
        assert data["additional_info"] == {"generation": 2}


class TestGracefulErrorHandler:
    """Tests for GracefulErrorHandler."""

    def test_recommends_pause_when_requested(self, handler: GracefulErrorHandler) -> None:
        """pause_on_error context yields PAUSED."""
        context = ErrorContext(operation="execute_task", component="queue", pause_on_error=True)
        assert handler.handle_error(ValueError("x"), context) == "PAUSED"

    def test_recommends_processing_otherwise(self, handler: GracefulErrorHandler) -> None:
        """Without pause_on_error processing continues."""
        context = ErrorContext(operation="execute_task", component="queue")
        assert handler.handle_error(ValueError("x"), context) == "PROCESSING"

    @pytest.mark.parametrize(
        ("severity", "level"),
        [
            (ErrorSeverity.WARNING, "WARNING"),
            (ErrorSeverity.ERROR, "ERROR"),
            (ErrorSeverity.CRITICAL, "CRITICAL"),
        ],
    )
    def test_logs_at_severity(
        self,
        handler: GracefulErrorHandler,
        output: StringIO,
        severity: ErrorSeverity,
        level: str,
    ) -> None:
        """Severity selects the log level."""
        context = ErrorContext(operation="execute_task", component="queue", task_id="entry_1")
        handler.handle_error(RuntimeError("boom"), context, severity)

        record = _records(output)[0]
        assert record["level"] == level
        extra = record["extra"]
        assert extra["error_type"] == "RuntimeError"
        assert extra["error_message"] == "boom"
        assert extra["severity"] == severity.value
        assert extra["task_id"] == "entry_1"
        assert "RuntimeError: boom" in extra["traceback"]

    def test_accepts_base_exception(self, handler: GracefulErrorHandler, output: StringIO) -> None:
        """Non-Exception failures are logged too."""

        class Abort(BaseException):
            pass

        context = ErrorContext(operation="process_loop", component="queue")
        handler.handle_error(Abort("stop"), context, ErrorSeverity.CRITICAL)
        assert _records(output)[0]["extra"]["error_type"] == "Abort"

    def test_without_logger(self) -> None:
        """A handler without a logger still answers."""
        handler = GracefulErrorHandler()
        context = ErrorContext(operation="execute_task", component="queue")
        assert handler.handle_error(ValueError("x"), context) == "PROCESSING"

    def test_on_error_callback(self) -> None:
        """The callback receives context and error."""
        callback = MagicMock()
        handler = GracefulErrorHandler(on_error=callback)
        context = ErrorContext(operation="execute_task", component="queue")
        error = ValueError("x")
        handler.handle_error(error, context)
        callback.assert_called_once_with(context, error)

    def test_on_error_callback_failure_is_suppressed(self) -> None:
        """A failing callback does not propagate."""
        handler = GracefulErrorHandler(on_error=MagicMock(side_effect=RuntimeError("cb")))
        context = ErrorContext(operation="execute_task", component="queue")
        assert handler.handle_error(ValueError("x"), context) == "PROCESSING"


class TestWrapOperation:
    """Tests for wrap_operation()."""

    def test_returns_result(self, handler: GracefulErrorHandler) -> None:
        """Successful operations return their value."""
        context = ErrorContext(operation="notify_status", component="queue")
        assert handler.wrap_operation(lambda: 5, context) == 5

    def test_absorbs_exception(self, handler: GracefulErrorHandler, output: StringIO) -> None:
        """Failures return the default and are logged."""

        def failing() -> int:
            raise RuntimeError("listener failure")

        context = ErrorContext(operation="notify_status", component="queue")
        assert handler.wrap_operation(failing, context, default_return=-1) == -1

        record = _records(output)[0]
        assert record["level"] == "ERROR"
        assert record["extra"]["operation"] == "notify_status"

    def test_does_not_absorb_base_exception(self, handler: GracefulErrorHandler) -> None:
        """Control flow signals propagate."""

        def interrupted() -> None:
            raise KeyboardInterrupt

        context = ErrorContext(operation="notify_status", component="queue")
        with pytest.raises(KeyboardInterrupt):
            handler.wrap_operation(interrupted, context)


class TestCreateErrorHandler:
    """Tests for create_error_handler()."""

    def test_factory(self) -> None:
        """Factory returns a configured handler."""
        assert isinstance(create_error_handler(), GracefulErrorHandler)

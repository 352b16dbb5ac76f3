"""Queue exceptions and task failure normalization."""

import asyncio

# Signals that must never be absorbed as task failures
CONTROL_FLOW_EXCEPTIONS: tuple[type[BaseException], ...] = (
    asyncio.CancelledError,
    KeyboardInterrupt,
    SystemExit,
    GeneratorExit,
)


class QueueError(Exception):
    """Base exception for queue errors."""

    pass


class InvalidTransitionError(QueueError):
    """Raised when an event is not legal in the current status."""

    def __init__(self, status: str, event: str) -> None:
        self.status = status
        self.event = event
        super().__init__(f"Cannot apply {event} in status {status}")


class TaskError(QueueError):
    """Error-like wrapper for task failures that are not Exceptions.

    Attributes:
        original: The raw failure value the task produced
    """

    def __init__(self, message: str, original: object = None) -> None:
        self.original = original
        super().__init__(message)

    @property
    def message(self) -> str:
        """The failure message."""
        return str(self)


def normalize_task_error(failure: object) -> Exception:
    """Turn any failure value into an Exception.

    Exceptions pass through unchanged. Anything else becomes a TaskError
    whose message is the value's string form.

    Args:
        failure: Raised exception or arbitrary failure value

    Returns:
        An Exception describing the failure
    """
    if isinstance(failure, Exception):
        return failure
    return TaskError(str(failure), original=failure)

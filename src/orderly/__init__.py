"""orderly - run asynchronous tasks one at a time, in order, with pause/resume/cancel."""

__version__ = "0.1.0"

from orderly.queue import (
    Queue,
    QueueOptions,
    QueueStatus,
    TaskError,
    create_queue,
)

__all__ = [
    "__version__",
    "Queue",
    "QueueOptions",
    "QueueStatus",
    "TaskError",
    "create_queue",
]

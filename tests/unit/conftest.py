"""Shared fixtures for unit tests."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterator
from io import StringIO

import pytest

from orderly.core.logging import LogLevel, StructuredLogger, reset_loggers
from orderly.queue.runner import Queue
from orderly.queue.state import QueueStatus

WaitFor = Callable[..., Awaitable[None]]


@pytest.fixture(autouse=True)
def _clean_loggers() -> Iterator[None]:
    """Keep the global logger registry isolated per test."""
    reset_loggers()
    yield
    reset_loggers()


@pytest.fixture
def log_output() -> StringIO:
    """Captured structured log output."""
    return StringIO()


@pytest.fixture
def logger(log_output: StringIO) -> StructuredLogger:
    """Queue logger writing JSON lines to log_output."""
    return StructuredLogger(component="queue", level=LogLevel.DEBUG, output=log_output)


@pytest.fixture
def statuses() -> list[QueueStatus]:
    """Status notifications recorded in order."""
    return []


@pytest.fixture
def make_queue(
    logger: StructuredLogger, statuses: list[QueueStatus]
) -> Callable[..., Queue]:
    """Build queues that record status notifications into statuses."""

    def _make(pause_on_error: bool = False) -> Queue:
        return Queue(
            on_status_change=statuses.append,
            pause_on_error=pause_on_error,
            logger=logger,
        )

    return _make


@pytest.fixture
def wait_for() -> WaitFor:
    """Poll a predicate, yielding to the event loop between checks."""

    async def _wait_for(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            if loop.time() > deadline:
                raise AssertionError("wait_for timed out")
            await asyncio.sleep(0)

    return _wait_for

"""Shared fixtures for integration tests."""

from __future__ import annotations

from collections.abc import Iterator
from io import StringIO

import pytest
from rich.console import Console

from orderly.config import QueueConfig
from orderly.core.logging import reset_loggers
from orderly.queue import StatusDisplay


@pytest.fixture(autouse=True)
def _clean_loggers() -> Iterator[None]:
    """Keep the global logger registry isolated per test."""
    reset_loggers()
    yield
    reset_loggers()


@pytest.fixture
def quiet_config() -> QueueConfig:
    """Queue configuration that only logs errors."""
    return QueueConfig(log_level="ERROR")


@pytest.fixture
def console_output() -> StringIO:
    """Captured console output of the status display."""
    return StringIO()


@pytest.fixture
def display(console_output: StringIO) -> StatusDisplay:
    """Status display writing plain text to console_output."""
    console = Console(file=console_output, force_terminal=False, width=120)
    return StatusDisplay(console=console)

"""Rich console display of queue status transitions.

A StatusDisplay is callable with a QueueStatus, so it can be registered
directly as a queue status listener.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel
from rich.style import Style
from rich.table import Table
from rich.text import Text

from orderly.queue.state import QueueStatus

if TYPE_CHECKING:
    from orderly.queue.runner import Queue


@dataclass
class StatusMessage:
    """An observed status with timestamp."""

    status: QueueStatus
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


STATUS_STYLES: dict[QueueStatus, Style] = {
    QueueStatus.IDLE: Style(color="green"),
    QueueStatus.PROCESSING: Style(color="blue", bold=True),
    QueueStatus.PAUSED: Style(color="yellow", bold=True),
    QueueStatus.CANCELLED: Style(color="red"),
}

STATUS_ICONS: dict[QueueStatus, str] = {
    QueueStatus.IDLE: "💤",
    QueueStatus.PROCESSING: "🚀",
    QueueStatus.PAUSED: "⏸️",
    QueueStatus.CANCELLED: "⏹️",
}


class StatusDisplay:
    """Console renderer for queue status changes.

    Provides:
    - One styled line per observed transition
    - History of observed statuses
    - A summary panel for a queue snapshot
    """

    def __init__(
        self,
        console: Console | None = None,
        verbose: bool = False,
    ) -> None:
        """Initialize the status display.

        Args:
            console: Rich console (uses default if None)
            verbose: Whether to prefix lines with timestamps
        """
        self.console = console or Console()
        self.verbose = verbose
        self._messages: list[StatusMessage] = []
        self._callbacks: list[Callable[[StatusMessage], None]] = []

    @property
    def history(self) -> list[QueueStatus]:
        """Statuses observed so far, oldest first."""
        return [msg.status for msg in self._messages]

    def add_callback(self, callback: Callable[[StatusMessage], None]) -> None:
        """Add a callback to be called on each status update."""
        self._callbacks.append(callback)

    def record(self, status: QueueStatus) -> StatusMessage:
        """Record a status without printing it."""
        msg = StatusMessage(status=status)
        self._messages.append(msg)
        for callback in self._callbacks:
            callback(msg)
        return msg

    def __call__(self, status: QueueStatus) -> None:
        self._print_status(self.record(status))

    def _print_status(self, msg: StatusMessage) -> None:
        icon = STATUS_ICONS.get(msg.status, "•")
        text = Text(f"{icon} ")
        text.append(msg.status.value, style=STATUS_STYLES.get(msg.status, Style()))
        if self.verbose:
            text = Text.assemble((msg.timestamp.strftime("%H:%M:%S "), "dim"), text)
        self.console.print(text)

    def show_summary(self, queue: "Queue") -> None:
        """Display a queue status panel.

        Args:
            queue: Queue to summarize
        """
        snapshot = queue.get_status()
        status = queue.status

        table = Table(show_header=False, box=None, padding=(0, 1))
        table.add_column("Key", style="bold")
        table.add_column("Value")

        table.add_row("Status", Text(status.value, style=STATUS_STYLES.get(status, Style())))
        table.add_row("Pending", str(snapshot["size"]))
        if snapshot["current_task_key"]:
            table.add_row("Current key", snapshot["current_task_key"])
        if snapshot["last_error"]:
            table.add_row("Last error", Text(snapshot["last_error"], style="red"))
        if self.verbose:
            table.add_row("Generation", str(snapshot["generation"]))

        panel = Panel(
            table,
            title="[bold]Queue Status[/bold]",
            border_style="blue" if status is QueueStatus.PROCESSING else "dim",
        )
        self.console.print(panel)

    def clear(self) -> None:
        """Forget all recorded statuses."""
        self._messages.clear()

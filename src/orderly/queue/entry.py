"""Task entries and the ordered pending collection.

Entries are removed strictly from the front, one at a time. The collection
is owned by a single queue and is not locked: every mutation happens on the
event loop thread.
"""

import inspect
import random
import string
from collections import deque
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

TaskFn = Callable[[], Any]  # usually returns an awaitable


def generate_entry_id() -> str:
    """Generate a unique entry ID.

    Format: entry_{HHMMSS}_{random6chars}
    Uses UTC timezone.
    """
    now = datetime.now(UTC)
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=6))
    return f"entry_{now.strftime('%H%M%S')}_{suffix}"


@dataclass
class TaskEntry:
    """A unit of work waiting in, or taken from, the pending collection.

    Attributes:
        task: Zero-argument callable; may return an awaitable
        dedupe_key: Identity used for adjacent-duplicate suppression
        priority: Whether the entry was submitted to run next
        id: Entry identifier (auto-generated)
        created_at: UTC timestamp of submission
    """

    task: TaskFn
    dedupe_key: str | None = None
    priority: bool = False
    id: str = field(default_factory=generate_entry_id)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    async def run(self) -> None:
        """Execute the task, awaiting its result when it is awaitable."""
        result = self.task()
        if inspect.isawaitable(result):
            await result

    def to_dict(self) -> dict[str, Any]:
        """Convert entry to dictionary for status snapshots."""
        return {
            "id": self.id,
            "dedupe_key": self.dedupe_key,
            "priority": self.priority,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class PendingEntry:
    """An entry with its position in the pending collection."""

    entry: TaskEntry
    position: int


@dataclass
class PendingTasks:
    """Ordered collection of entries awaiting execution.

    FIFO by default; push_front() places an entry ahead of all others.
    """

    _entries: deque[TaskEntry] = field(default_factory=deque)

    def append(self, entry: TaskEntry) -> int:
        """Add an entry at the back.

        Returns:
            Position of the entry (1-based)
        """
        self._entries.append(entry)
        return len(self._entries)

    def push_front(self, entry: TaskEntry) -> None:
        """Add an entry at the front."""
        self._entries.appendleft(entry)

    def pop_front(self) -> TaskEntry | None:
        """Remove and return the front entry, or None if empty."""
        if self._entries:
            return self._entries.popleft()
        return None

    def peek_last(self) -> TaskEntry | None:
        """Get the back entry without removing it."""
        if self._entries:
            return self._entries[-1]
        return None

    def clear(self) -> int:
        """Discard every entry.

        Returns:
            Number of entries discarded
        """
        count = len(self._entries)
        self._entries.clear()
        return count

    def list_pending(self) -> list[PendingEntry]:
        """List entries with their 1-based positions."""
        return [
            PendingEntry(entry=entry, position=i + 1)
            for i, entry in enumerate(self._entries)
        ]

    def __iter__(self) -> Iterator[TaskEntry]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

"""In-order task queue.

This module provides:
- Queue status state machine (IDLE / PROCESSING / PAUSED / CANCELLED)
- Pending task collection with priority insertion
- Single-slot resume signal
- Queue runner with generation-guarded execution loop
- Rich console status display
"""

# Status state machine
from orderly.queue.state import (
    TRANSITIONS,
    QueueEvent,
    QueueStatus,
    StatusTransition,
    can_apply,
    transition,
)

# Errors
from orderly.queue.errors import (
    InvalidTransitionError,
    QueueError,
    TaskError,
    normalize_task_error,
)

# Entries
from orderly.queue.entry import (
    PendingEntry,
    PendingTasks,
    TaskEntry,
    generate_entry_id,
)

# Resume signal
from orderly.queue.signal import ResumeSignal

# Display
from orderly.queue.display import (
    STATUS_ICONS,
    STATUS_STYLES,
    StatusDisplay,
    StatusMessage,
)

# Runner
from orderly.queue.runner import (
    Queue,
    QueueOptions,
    create_queue,
)

__all__ = [
    # State
    "QueueStatus",
    "QueueEvent",
    "StatusTransition",
    "TRANSITIONS",
    "transition",
    "can_apply",
    # Errors
    "QueueError",
    "InvalidTransitionError",
    "TaskError",
    "normalize_task_error",
    # Entries
    "TaskEntry",
    "PendingEntry",
    "PendingTasks",
    "generate_entry_id",
    # Signal
    "ResumeSignal",
    # Display
    "StatusDisplay",
    "StatusMessage",
    "STATUS_STYLES",
    "STATUS_ICONS",
    # Runner
    "Queue",
    "QueueOptions",
    "create_queue",
]

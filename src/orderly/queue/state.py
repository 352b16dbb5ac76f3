"""Queue status definitions and the status transition table."""

from dataclasses import dataclass
from enum import Enum

from orderly.queue.errors import InvalidTransitionError


class QueueStatus(Enum):
    """Lifecycle states of a queue."""

    IDLE = "IDLE"  # No pending work, no execution loop
    PROCESSING = "PROCESSING"  # Loop is executing or about to execute a task
    PAUSED = "PAUSED"  # Loop is alive but blocked on the resume signal
    CANCELLED = "CANCELLED"  # Terminal until a new submission resurrects the queue


class QueueEvent(Enum):
    """Events that drive status transitions."""

    START = "start"
    PAUSE = "pause"
    RESUME = "resume"
    DRAIN = "drain"
    CANCEL = "cancel"
    RESURRECT = "resurrect"


# event -> (statuses the event is legal from, resulting status)
TRANSITIONS: dict[QueueEvent, tuple[frozenset[QueueStatus], QueueStatus]] = {
    QueueEvent.START: (frozenset({QueueStatus.IDLE}), QueueStatus.PROCESSING),
    QueueEvent.PAUSE: (frozenset({QueueStatus.PROCESSING}), QueueStatus.PAUSED),
    QueueEvent.RESUME: (frozenset({QueueStatus.PAUSED}), QueueStatus.PROCESSING),
    QueueEvent.DRAIN: (frozenset({QueueStatus.PROCESSING}), QueueStatus.IDLE),
    QueueEvent.CANCEL: (
        frozenset({QueueStatus.IDLE, QueueStatus.PROCESSING, QueueStatus.PAUSED}),
        QueueStatus.CANCELLED,
    ),
    QueueEvent.RESURRECT: (frozenset({QueueStatus.CANCELLED}), QueueStatus.IDLE),
}


@dataclass(frozen=True)
class StatusTransition:
    """Outcome of applying an event to a status.

    Attributes:
        event: The applied event
        previous: Status before the event
        current: Status after the event
    """

    event: QueueEvent
    previous: QueueStatus
    current: QueueStatus

    @property
    def changed(self) -> bool:
        """Whether listeners should be notified."""
        return self.previous is not self.current


def transition(status: QueueStatus, event: QueueEvent) -> StatusTransition:
    """Apply an event to a status.

    Re-entering the current status is always allowed and yields an
    unchanged transition.

    Args:
        status: Current status
        event: Event to apply

    Returns:
        The resulting StatusTransition

    Raises:
        InvalidTransitionError: If the event is illegal in this status
    """
    sources, target = TRANSITIONS[event]
    if status is not target and status not in sources:
        raise InvalidTransitionError(status.value, event.value)
    return StatusTransition(event=event, previous=status, current=target)


def can_apply(status: QueueStatus, event: QueueEvent) -> bool:
    """Check whether an event is legal from a status."""
    sources, target = TRANSITIONS[event]
    return status is target or status in sources

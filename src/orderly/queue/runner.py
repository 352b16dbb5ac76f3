"""Queue - runs submitted tasks one at a time, in submission order.

The queue owns its pending entries, its status and a generation counter.
Every execution loop captures the generation it was started under and may
only touch status while that generation is still live; cancel() and the
resurrection of a cancelled queue both advance the generation, so a loop
that was mid-task when the queue was cancelled finishes silently.
"""

import asyncio
import functools
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from orderly.config import QueueConfig, apply_env_overrides
from orderly.core.error_handling import (
    ErrorContext,
    ErrorSeverity,
    GracefulErrorHandler,
)
from orderly.core.logging import LogLevel, StructuredLogger, create_logger, get_logger
from orderly.core.metrics import QueueMetrics
from orderly.queue.display import StatusDisplay
from orderly.queue.entry import PendingTasks, TaskEntry, TaskFn
from orderly.queue.errors import CONTROL_FLOW_EXCEPTIONS, normalize_task_error
from orderly.queue.signal import ResumeSignal
from orderly.queue.state import QueueEvent, QueueStatus, transition

StatusCallback = Callable[[QueueStatus], None]

COMPONENT = "queue"


@dataclass
class QueueOptions:
    """Construction options for a Queue.

    Attributes:
        on_status_change: Called with the new status on every real transition,
            and once with IDLE at construction
        pause_on_error: Pause and keep the error when a task fails, instead
            of absorbing the failure and moving on
    """

    on_status_change: StatusCallback | None = None
    pause_on_error: bool = False


class Queue:
    """Single-consumer, in-order task runner.

    Mutating operations are synchronous and must be called from the event
    loop thread; submit() and submit_priority() need a running event loop.

    Attributes:
        on_status_change: Status callback, replaceable at any time
        metrics: Counters and latency for this queue
    """

    def __init__(
        self,
        options: QueueOptions | None = None,
        *,
        on_status_change: StatusCallback | None = None,
        pause_on_error: bool | None = None,
        logger: StructuredLogger | None = None,
        error_handler: GracefulErrorHandler | None = None,
        metrics: QueueMetrics | None = None,
    ) -> None:
        opts = options or QueueOptions()
        self.on_status_change = on_status_change or opts.on_status_change
        self._pause_on_error = (
            opts.pause_on_error if pause_on_error is None else pause_on_error
        )
        self._logger = logger or get_logger(COMPONENT)
        self._error_handler = error_handler or GracefulErrorHandler(logger=self._logger)
        self.metrics = metrics or QueueMetrics()

        self._pending = PendingTasks()
        self._status = QueueStatus.IDLE
        self._generation = 0
        self._runner: asyncio.Task[None] | None = None
        self._resume_signal = ResumeSignal()
        self._last_error: Exception | None = None
        self._current_key: str | None = None
        self._listeners: list[StatusCallback] = []

        self._notify(QueueStatus.IDLE)

    # Status

    @property
    def status(self) -> QueueStatus:
        return self._status

    @property
    def is_processing(self) -> bool:
        return self._status is QueueStatus.PROCESSING

    @property
    def is_paused(self) -> bool:
        return self._status is QueueStatus.PAUSED

    @property
    def is_cancelled(self) -> bool:
        return self._status is QueueStatus.CANCELLED

    @property
    def is_idle(self) -> bool:
        return self._status is QueueStatus.IDLE

    @property
    def is_running(self) -> bool:
        """Whether an execution loop exists (it may be parked while paused)."""
        return self._runner is not None

    @property
    def size(self) -> int:
        """Number of entries waiting to run."""
        return len(self._pending)

    @property
    def pause_on_error(self) -> bool:
        return self._pause_on_error

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def current_task_key(self) -> str | None:
        """Dedupe key of the entry currently executing."""
        return self._current_key

    @property
    def last_task_error(self) -> Exception | None:
        """Error of the last failed task, kept only with pause_on_error."""
        return self._last_error

    def clear_last_error(self) -> None:
        self._last_error = None

    def add_status_listener(self, listener: StatusCallback) -> None:
        """Register an additional observer of status transitions."""
        self._listeners.append(listener)

    def remove_status_listener(self, listener: StatusCallback) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _apply(self, event: QueueEvent) -> None:
        result = transition(self._status, event)
        if not result.changed:
            return
        self._status = result.current
        self._logger.log_state_transition(
            result.previous.value, result.current.value, reason=event.value
        )
        self._notify(result.current)

    def _notify(self, status: QueueStatus) -> None:
        callbacks = [self.on_status_change, *self._listeners]
        for callback in callbacks:
            if callback is None:
                continue
            self._error_handler.wrap_operation(
                functools.partial(callback, status),
                ErrorContext(
                    operation="notify_status",
                    component=COMPONENT,
                    additional_info={"status": status.value},
                ),
            )

    # Submission

    def submit(self, task: TaskFn, dedupe_key: str | None = None) -> bool:
        """Append a task, starting processing if the queue is idle.

        A cancelled queue is resurrected first. When dedupe_key equals the
        key of the last pending entry (or, with nothing pending, of the
        entry executing right now) the task is dropped.

        Args:
            task: Zero-argument callable, usually an async function
            dedupe_key: Identity for adjacent-duplicate suppression

        Returns:
            True if the task was added, False if it was a duplicate
        """
        return self._enqueue(TaskEntry(task=task, dedupe_key=dedupe_key), front=False)

    def submit_priority(self, task: TaskFn) -> None:
        """Insert a task ahead of all pending tasks.

        The task currently executing is never preempted.
        """
        self._enqueue(TaskEntry(task=task, priority=True), front=True)

    def _enqueue(self, entry: TaskEntry, front: bool) -> bool:
        if self.is_cancelled:
            self._resurrect()

        if not front and self._is_adjacent_duplicate(entry.dedupe_key):
            self.metrics.increment("deduplicated")
            self._logger.log_dedupe_skip(entry.dedupe_key or "")
            if self.is_idle and self._pending:
                self._start_runner()
            return False

        if front:
            self._pending.push_front(entry)
            self.metrics.increment("priority_submitted")
        else:
            self._pending.append(entry)
            self.metrics.increment("submitted")

        if self.is_idle:
            self._start_runner()
        return True

    def _is_adjacent_duplicate(self, dedupe_key: str | None) -> bool:
        if dedupe_key is None:
            return False
        last = self._pending.peek_last()
        neighbour = last.dedupe_key if last is not None else self._current_key
        return neighbour == dedupe_key

    def _resurrect(self) -> None:
        self._generation += 1
        self.metrics.increment("resurrections")
        self._apply(QueueEvent.RESURRECT)

    # Flow control

    def pause(self) -> None:
        """Stop before the next task. The running task is not interrupted."""
        if self.is_processing:
            self._apply(QueueEvent.PAUSE)

    def resume(self) -> None:
        """Leave the paused state, clearing the last task error.

        Also restarts processing when the queue is idle with pending work.
        """
        if self.is_paused:
            self._last_error = None
            self._apply(QueueEvent.RESUME)
            released = self._resume_signal.release()
            if not released and self._runner is None:
                # The paused loop is gone; continue under the current generation
                self._spawn_loop(asyncio.get_running_loop())
        if self.is_idle and self._pending:
            self._start_runner()

    def cancel(self) -> None:
        """Drop all pending work and invalidate the running loop.

        The task in flight runs to completion but can no longer change
        status. No effect if already cancelled.
        """
        if self.is_cancelled:
            return
        self._apply(QueueEvent.CANCEL)
        discarded = self._pending.clear()
        self._current_key = None
        self._generation += 1
        self._resume_signal.release()

        self.metrics.increment("cancellations")
        self.metrics.increment("discarded_on_cancel", discarded)
        self._logger.log_cancel(discarded, self._generation)

    def clear(self) -> None:
        """Drop all pending work without changing a busy or cancelled status."""
        discarded = self._pending.clear()
        self.metrics.increment("discarded_on_clear", discarded)
        if self.is_processing or self.is_paused or self.is_cancelled:
            return
        self._apply(QueueEvent.DRAIN)
        self._current_key = None

    # Execution

    def _is_current(self, generation: int) -> bool:
        return not self.is_cancelled and self._generation == generation

    def _start_runner(self) -> None:
        if self._runner is not None:
            return
        if self.is_cancelled:
            return
        if not self._pending:
            self._apply(QueueEvent.DRAIN)
            return

        loop = asyncio.get_running_loop()
        self._apply(QueueEvent.START)
        self._spawn_loop(loop)

    def _spawn_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        generation = self._generation
        self._runner = loop.create_task(
            self._process_loop(generation), name=f"orderly-queue-gen{generation}"
        )
        self._runner.add_done_callback(functools.partial(self._on_runner_done, generation))

    def _on_runner_done(self, generation: int, runner: asyncio.Task[None]) -> None:
        if self._runner is runner:
            self._runner = None
        if runner.cancelled():
            # Pending work waits for the next submit() or resume()
            self._recover(generation)
            return
        error = runner.exception()
        if error is not None:
            self._error_handler.handle_error(
                error,
                ErrorContext(
                    operation="process_loop",
                    component=COMPONENT,
                    additional_info={"generation": generation},
                ),
                ErrorSeverity.CRITICAL,
            )
            self._recover(generation)
        # Work left behind by a loop that was finishing (or stale) is picked up here
        if self.is_idle and self._pending:
            self._start_runner()

    def _recover(self, generation: int) -> None:
        """Leave a consistent status after the live loop ended abnormally.

        PROCESSING drains to IDLE. PAUSED is kept; resume() spawns a new loop.
        """
        if not self._is_current(generation):
            return
        self._current_key = None
        if self.is_processing:
            self._apply(QueueEvent.DRAIN)

    async def _process_loop(self, generation: int) -> None:
        while self._is_current(generation):
            if self.is_paused:
                await self._resume_signal.wait()
                continue

            entry = self._pending.pop_front()
            if entry is None:
                break

            # cancel() may have run while the entry was being taken
            if not self._is_current(generation):
                break

            await self._execute(entry, generation)

        # Only the live generation may set the final status
        if self._generation != generation:
            return
        if self.is_cancelled:
            return
        self._apply(QueueEvent.DRAIN)

    async def _execute(self, entry: TaskEntry, generation: int) -> None:
        self._current_key = entry.dedupe_key
        self.metrics.start_task(entry.id)
        self._logger.log_task_start(entry.id, entry.dedupe_key, generation)
        try:
            await entry.run()
        except asyncio.CancelledError as exc:
            self._finish(entry, succeeded=False)
            runner = asyncio.current_task()
            if runner is not None and runner.cancelling():
                raise
            # The task awaited something that was cancelled; that is its own failure
            self._handle_failure(entry, exc, generation)
        except CONTROL_FLOW_EXCEPTIONS:
            self._finish(entry, succeeded=False)
            raise
        except BaseException as exc:
            self._finish(entry, succeeded=False)
            self._handle_failure(entry, exc, generation)
        else:
            self._finish(entry, succeeded=True)

    def _finish(self, entry: TaskEntry, succeeded: bool) -> None:
        self._current_key = None
        duration_ms = self.metrics.end_task(entry.id, succeeded)
        self._logger.log_task_end(
            entry.id, "succeeded" if succeeded else "failed", duration_ms
        )

    def _handle_failure(
        self, entry: TaskEntry, failure: BaseException, generation: int
    ) -> None:
        error = normalize_task_error(failure)
        pause = self._pause_on_error and self._is_current(generation)
        context = ErrorContext(
            operation="execute_task",
            component=COMPONENT,
            task_id=entry.id,
            pause_on_error=pause,
            additional_info={"dedupe_key": entry.dedupe_key, "generation": generation},
        )
        severity = ErrorSeverity.ERROR if pause else ErrorSeverity.WARNING
        recommended = self._error_handler.handle_error(error, context, severity)
        if recommended == QueueStatus.PAUSED.value:
            self._last_error = error
            self._apply(QueueEvent.PAUSE)

    async def join(self) -> None:
        """Wait until no execution loop is running.

        Does not return while the queue stays paused.
        """
        while self._runner is not None:
            await asyncio.wait({self._runner})

    # Introspection

    def get_status(self) -> dict[str, Any]:
        """Get a snapshot of the queue.

        Returns:
            Status dictionary with pending entries and error info
        """
        return {
            "status": self._status.value,
            "size": len(self._pending),
            "generation": self._generation,
            "running": self._runner is not None,
            "current_task_key": self._current_key,
            "last_error": str(self._last_error) if self._last_error else None,
            "pending": [
                {"position": pending.position, **pending.entry.to_dict()}
                for pending in self._pending.list_pending()
            ],
        }

    def __len__(self) -> int:
        return len(self._pending)

    def __repr__(self) -> str:
        return (
            f"Queue(status={self._status.value}, size={len(self._pending)}, "
            f"generation={self._generation})"
        )


def create_queue(
    config: QueueConfig | None = None,
    on_status_change: StatusCallback | None = None,
    display: StatusDisplay | None = None,
) -> Queue:
    """Create a queue from configuration.

    Args:
        config: Queue configuration (defaults plus environment overrides if None)
        on_status_change: Status callback
        display: Status display to attach (created when config.show_status is set)

    Returns:
        Configured Queue instance
    """
    actual_config = config if config is not None else apply_env_overrides(QueueConfig())
    logger = create_logger(
        COMPONENT,
        level=LogLevel.from_name(actual_config.log_level),
        json_format=actual_config.json_logs,
    )
    queue = Queue(
        on_status_change=on_status_change,
        pause_on_error=actual_config.pause_on_error,
        logger=logger,
    )

    if display is None and actual_config.show_status:
        display = StatusDisplay()
    if display is not None:
        display.record(queue.status)
        queue.add_status_listener(display)
    return queue

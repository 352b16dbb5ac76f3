"""Integration test: Cancellation flow.

Tests queue cancellation behavior:
- Cancel mid-execution transitions to CANCELLED
- The in-flight task finishes but pending work is discarded
- A later submission revives the queue cleanly
"""

from __future__ import annotations

import asyncio

import pytest

from orderly.config import QueueConfig
from orderly.queue import QueueStatus, StatusDisplay, create_queue


class TestCancelMidExecution:
    """Test cancelling while a task is running."""

    @pytest.mark.asyncio
    async def test_in_flight_finishes_pending_discarded(
        self, quiet_config: QueueConfig, display: StatusDisplay
    ) -> None:
        """The running task completes; queued tasks never start."""
        queue = create_queue(quiet_config, display=display)
        started = asyncio.Event()
        release = asyncio.Event()
        completed: list[str] = []

        async def upload() -> None:
            started.set()
            await release.wait()
            completed.append("upload")

        async def notify() -> None:
            completed.append("notify")

        queue.submit(upload)
        queue.submit(notify)
        queue.submit(notify)
        await started.wait()

        queue.cancel()
        assert queue.status is QueueStatus.CANCELLED
        assert queue.size == 0

        release.set()
        await queue.join()

        assert completed == ["upload"]
        assert queue.status is QueueStatus.CANCELLED
        assert display.history == [
            QueueStatus.IDLE,
            QueueStatus.PROCESSING,
            QueueStatus.CANCELLED,
        ]

    @pytest.mark.asyncio
    async def test_cancel_while_paused(
        self, quiet_config: QueueConfig, display: StatusDisplay
    ) -> None:
        """A paused queue can be cancelled and its loop exits."""
        queue = create_queue(quiet_config, display=display)
        ran: list[int] = []

        async def step(n: int) -> None:
            ran.append(n)
            if n == 1:
                queue.pause()

        for n in (1, 2, 3):
            queue.submit(lambda n=n: step(n))

        while not queue.is_paused:
            await asyncio.sleep(0)

        queue.cancel()
        await asyncio.wait_for(queue.join(), timeout=1.0)

        assert ran == [1]
        assert queue.is_running is False
        assert display.history[-1] is QueueStatus.CANCELLED


class TestResurrection:
    """Test submitting after a cancellation."""

    @pytest.mark.asyncio
    async def test_next_submission_starts_cleanly(
        self, quiet_config: QueueConfig, display: StatusDisplay
    ) -> None:
        """A cancelled queue runs new work after a submission."""
        queue = create_queue(quiet_config, display=display)
        ran: list[str] = []

        async def first() -> None:
            queue.cancel()
            ran.append("first")

        async def second() -> None:
            ran.append("second")

        queue.submit(first)
        await queue.join()
        assert queue.is_cancelled

        queue.submit(second)
        await queue.join()

        assert ran == ["first", "second"]
        assert queue.is_idle
        assert queue.generation == 2
        assert display.history == [
            QueueStatus.IDLE,
            QueueStatus.PROCESSING,
            QueueStatus.CANCELLED,
            QueueStatus.IDLE,
            QueueStatus.PROCESSING,
            QueueStatus.IDLE,
        ]

    @pytest.mark.asyncio
    async def test_resurrected_work_waits_for_stale_task(
        self, quiet_config: QueueConfig
    ) -> None:
        """New work never overlaps the task left over from before cancel()."""
        queue = create_queue(quiet_config)
        release = asyncio.Event()
        active = 0
        peak = 0

        async def tracked() -> None:
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await release.wait()
            active -= 1

        queue.submit(tracked)
        while queue.size:
            await asyncio.sleep(0)
        await asyncio.sleep(0)

        queue.cancel()
        queue.submit(tracked)
        release.set()

        while not (queue.is_idle and queue.metrics.get("executed") == 2):
            await asyncio.sleep(0)
        await queue.join()

        assert peak == 1
        assert queue.metrics.get("cancellations") == 1
        assert queue.metrics.get("resurrections") == 1

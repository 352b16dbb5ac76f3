"""Integration test: Dedupe flow.

Tests coalescing of repeated submissions:
- Back-to-back submissions with the same key collapse to one
- The in-flight task counts as a neighbour when nothing is pending
- Non-adjacent repeats still run
"""

from __future__ import annotations

import asyncio

import pytest

from orderly.config import QueueConfig
from orderly.queue import create_queue


class TestAutosaveCoalescing:
    """Test a burst of saves for the same document."""

    @pytest.mark.asyncio
    async def test_burst_collapses(self, quiet_config: QueueConfig) -> None:
        """Rapid saves of one document run at most twice."""
        queue = create_queue(quiet_config)
        release = asyncio.Event()
        saves: list[str] = []

        async def save(doc: str) -> None:
            await release.wait()
            saves.append(doc)

        accepted = [queue.submit(lambda: save("doc-1"), dedupe_key="doc-1") for _ in range(5)]
        assert accepted == [True, False, False, False, False]

        await asyncio.sleep(0)
        assert queue.current_task_key == "doc-1"
        # Nothing pending, so the running save is the neighbour
        assert queue.submit(lambda: save("doc-1"), dedupe_key="doc-1") is False

        release.set()
        await queue.join()

        assert saves == ["doc-1"]
        assert queue.metrics.get("deduplicated") == 5

    @pytest.mark.asyncio
    async def test_interleaved_documents(self, quiet_config: QueueConfig) -> None:
        """Only adjacent repeats are dropped."""
        queue = create_queue(quiet_config)
        saves: list[str] = []

        async def save(doc: str) -> None:
            saves.append(doc)

        keys = ["a", "a", "b", "a", "b", "b"]
        accepted = [queue.submit(lambda k=k: save(k), dedupe_key=k) for k in keys]
        await queue.join()

        assert accepted == [True, False, True, True, True, False]
        assert saves == ["a", "b", "a", "b"]

    @pytest.mark.asyncio
    async def test_duplicate_after_completion_runs(self, quiet_config: QueueConfig) -> None:
        """Once a task has finished its key can be submitted again."""
        queue = create_queue(quiet_config)
        saves: list[str] = []

        async def save() -> None:
            saves.append("doc")

        assert queue.submit(save, dedupe_key="doc") is True
        await queue.join()
        assert queue.submit(save, dedupe_key="doc") is True
        await queue.join()

        assert saves == ["doc", "doc"]

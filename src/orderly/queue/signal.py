"""Single-slot resume signal for a paused execution loop."""

import asyncio


class ResumeSignal:
    """Awaitable signal with at most one waiter.

    The execution loop parks on wait() while the queue is paused;
    resume() and cancel() wake it through release().
    """

    def __init__(self) -> None:
        self._waiter: asyncio.Future[None] | None = None

    @property
    def has_waiter(self) -> bool:
        """Whether a loop is currently parked on the signal."""
        return self._waiter is not None and not self._waiter.done()

    async def wait(self) -> None:
        """Suspend until release() is called.

        A previous waiter that was never released is woken first, so no
        coroutine is left parked forever.
        """
        self.release()
        waiter = asyncio.get_running_loop().create_future()
        self._waiter = waiter
        try:
            await waiter
        finally:
            if self._waiter is waiter:
                self._waiter = None

    def release(self) -> bool:
        """Wake the parked waiter, if any.

        Returns:
            True if a waiter was woken
        """
        waiter, self._waiter = self._waiter, None
        if waiter is None or waiter.done():
            return False
        waiter.set_result(None)
        return True

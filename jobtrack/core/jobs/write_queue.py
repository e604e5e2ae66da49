"""
Detached, per-job serialized store writes.

Lifecycle calls on a job must not wait for the store, but their writes
must land in the order they were issued. Each job owns one queue; a drain
task started on demand runs its writes one after another.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)

WriteFactory = Callable[[], Awaitable[Any]]


class JobWriteQueue:
    """
    FIFO of pending store writes for a single job.

    Usage:
        writes = JobWriteQueue("JobRunner[abc]")
        writes.submit("mark job as started", lambda: store.upsert(...))
        ...
        await writes.join()
    """

    def __init__(self, label: str, maxsize: int = 0) -> None:
        """
        Args:
            label: Prefix for diagnostic messages.
            maxsize: Maximum queued writes, 0 for unbounded.
        """
        self.label = label
        self.maxsize = maxsize
        self._queue: asyncio.Queue[tuple[str, WriteFactory, int]] = asyncio.Queue(maxsize=maxsize)
        self._task: asyncio.Task | None = None
        self._pending = 0

    @property
    def pending(self) -> int:
        """Number of writes queued or in flight."""
        return self._pending

    def submit(
        self, description: str, factory: WriteFactory, level: int = logging.ERROR
    ) -> bool:
        """
        Queue a write without waiting for it.

        Args:
            description: What the write does, used when it fails.
            factory: Zero-argument callable returning the write coroutine.
            level: Log level used when the write fails.

        Returns:
            False if the write was dropped because the queue is full.

        Raises:
            RuntimeError: If no event loop is running.
        """
        loop = asyncio.get_running_loop()

        try:
            self._queue.put_nowait((description, factory, level))
        except asyncio.QueueFull:
            logger.error(f"{self.label}: write queue full, dropped write to {description}")
            return False

        self._pending += 1
        if self._task is None or self._task.done():
            self._task = loop.create_task(self._drain())
        return True

    async def _drain(self) -> None:
        """Run queued writes in order until the queue is empty."""
        while not self._queue.empty():
            description, factory, level = self._queue.get_nowait()
            try:
                await factory()
            except Exception as e:
                logger.log(level, f"{self.label}: Failed to {description} - {e}", exc_info=True)
            finally:
                self._pending -= 1
                self._queue.task_done()

    async def join(self) -> None:
        """Wait until every submitted write has settled."""
        await self._queue.join()

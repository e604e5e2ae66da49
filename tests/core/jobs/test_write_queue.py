"""Tests for JobWriteQueue."""

import asyncio
import logging
from unittest.mock import AsyncMock

import pytest

from jobtrack.core.jobs.write_queue import JobWriteQueue


class TestJobWriteQueue:
    """Tests for ordered detached writes."""

    async def test_runs_writes_in_submission_order(self) -> None:
        """Writes run one after another in the order submitted."""
        queue = JobWriteQueue("test")
        order: list[int] = []

        async def write(n: int, delay: float) -> None:
            await asyncio.sleep(delay)
            order.append(n)

        queue.submit("first", lambda: write(1, 0.02))
        queue.submit("second", lambda: write(2, 0))
        queue.submit("third", lambda: write(3, 0.01))
        await queue.join()

        assert order == [1, 2, 3]

    async def test_failure_does_not_stop_later_writes(self, caplog) -> None:
        """A failing write is logged and the next one still runs."""
        queue = JobWriteQueue("JobRunner[abc]")
        done: list[str] = []

        async def fail() -> None:
            raise OSError("connection reset")

        async def succeed() -> None:
            done.append("ok")

        with caplog.at_level(logging.ERROR):
            queue.submit("save record", fail)
            queue.submit("save other record", succeed)
            await queue.join()

        assert done == ["ok"]
        assert "JobRunner[abc]: Failed to save record - connection reset" in caplog.text

    async def test_bounded_queue_drops_when_full(self, caplog) -> None:
        """A full bounded queue drops new writes and says so."""
        queue = JobWriteQueue("test", maxsize=1)
        done: list[int] = []

        async def write(n: int) -> None:
            done.append(n)

        with caplog.at_level(logging.ERROR):
            assert queue.submit("first", lambda: write(1)) is True
            assert queue.submit("second", lambda: write(2)) is False
            await queue.join()

        assert done == [1]
        assert "write queue full" in caplog.text

    async def test_restarts_after_draining(self) -> None:
        """Writes submitted after the queue went idle still run."""
        queue = JobWriteQueue("test")
        done: list[int] = []

        async def write(n: int) -> None:
            done.append(n)

        queue.submit("first", lambda: write(1))
        await queue.join()
        queue.submit("second", lambda: write(2))
        await queue.join()

        assert done == [1, 2]
        assert queue.pending == 0

    async def test_join_without_writes(self) -> None:
        """Joining an unused queue returns immediately."""
        await JobWriteQueue("test").join()

    def test_submit_requires_running_loop(self) -> None:
        """A queue can be built anywhere but only accepts writes inside a loop."""
        queue = JobWriteQueue("test")

        with pytest.raises(RuntimeError):
            queue.submit("first", AsyncMock())

        assert queue.pending == 0

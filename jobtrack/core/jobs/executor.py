"""
Run a job to completion and hand its outcome to a callback.

The job reports its own lifecycle; this only runs it, waits for its
pending writes and delivers (error, result).
"""

import logging
from collections.abc import Callable
from typing import Any

from jobtrack.core.jobs.base import Job

logger = logging.getLogger(__name__)

JobCallback = Callable[[BaseException | None, Any], Any]


async def execute(
    job: Job, callback: JobCallback | None = None, *, flush: bool = True
) -> Any:
    """
    Run a job once.

    Args:
        job: The job to run.
        callback: Called with (error, result) once the job has finished.
            When given, the job's error is delivered here instead of raised.
        flush: Wait for the job's pending store writes before returning.

    Returns:
        The job's result, or None if it failed and a callback was given.

    Raises:
        Exception: The job's error, when no callback was given.
    """
    logger.info(f"Running job {job.name} ({job.id})")
    error: Exception | None = None
    result: Any = None

    try:
        result = await job.run()
    except Exception as e:
        logger.error(f"Job {job.name} ({job.id}) failed: {e}")
        error = e
    finally:
        if flush:
            await job.runner.flush()

    if callback is not None:
        callback(error, result)
        return result

    if error is not None:
        raise error

    logger.info(f"Job {job.name} ({job.id}) finished")
    return result

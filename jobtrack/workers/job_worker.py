#!/usr/bin/env python3
"""
Run a single job in its own worker process.

Loads configuration, connects the job store, runs the job class named on
the command line with a fresh JobRunner and exits with a status that
reflects the job's outcome.

Usage:
    python -m jobtrack.workers.job_worker myapp.jobs:ReindexJob --name reindex
    python -m jobtrack.workers.job_worker myapp.jobs:ImportJob --job-id 42 --store memory
"""

import argparse
import asyncio
import importlib
import logging
import sys
from typing import NoReturn

from jobtrack.core.config.loader import load_jobs_config, setup_logging
from jobtrack.core.jobs.base import Job
from jobtrack.core.jobs.executor import execute
from jobtrack.core.jobs.runner import JobRunner
from jobtrack.core.storage.factory import create_job_store

logger = logging.getLogger(__name__)


def load_job_class(path: str) -> type[Job]:
    """
    Import a job class from a "module:ClassName" path.

    Raises:
        ValueError: If the path is malformed or does not name a Job subclass.
    """
    module_name, sep, class_name = path.partition(":")
    if not sep or not module_name or not class_name:
        raise ValueError(f"Expected 'module:ClassName', got: {path}")

    module = importlib.import_module(module_name)
    job_class = getattr(module, class_name, None)
    if not isinstance(job_class, type) or not issubclass(job_class, Job):
        raise ValueError(f"{path} is not a Job subclass")
    return job_class


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a job and record its progress")
    parser.add_argument("job", help="Job class as module:ClassName")
    parser.add_argument("--name", default=None, help="Job name (defaults to the id)")
    parser.add_argument("--job-id", default=None, help="Job id (generated if omitted)")
    parser.add_argument(
        "--store",
        default=None,
        choices=["postgres", "redis", "memory"],
        help="Job store backend (defaults to jobs.store)",
    )
    return parser.parse_args(argv)


async def run_job(args: argparse.Namespace) -> int:
    """
    Run the job described by args.

    Returns:
        Process exit code: 0 on success, 1 if the job failed.
    """
    config = load_jobs_config()
    job_class = load_job_class(args.job)

    store = create_job_store(args.store or config.store)
    await store.connect()
    logger.info("Job store connection established")

    try:
        runner = JobRunner(
            store,
            args.name,
            args.job_id,
            worker_id=config.worker_id or None,
            write_queue_size=config.write_queue_size,
        )
        job = job_class(runner)
        try:
            await execute(job)
        except Exception as e:
            logger.error(f"Job {runner.name} ({runner.id}) failed: {e}", exc_info=True)
            return 1
        return 0
    finally:
        try:
            await store.disconnect()
            logger.info("Job store connection closed")
        except Exception as e:
            logger.error(f"Error closing job store: {e}")


def main(argv: list[str] | None = None) -> NoReturn:
    """
    Main entrypoint for the worker.

    This is the synchronous wrapper that starts the async event loop.
    """
    args = parse_args(argv)
    setup_logging(load_jobs_config().log_level)

    try:
        exit_code = asyncio.run(run_job(args))
    except SystemExit:
        raise
    except Exception as e:
        logger.critical(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()

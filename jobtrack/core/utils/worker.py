"""Identity of the worker process emitting job records."""

import os
import socket

from jobtrack.core.config.loader import load_jobs_config


def default_worker_id() -> str:
    """Build a worker id from the host name and process id."""
    return f"{socket.gethostname()}:{os.getpid()}"


def get_worker_id() -> str:
    """
    Get the id of the current worker.

    Uses the jobs.worker_id setting (or JOBS_WORKER_ID) when configured,
    otherwise falls back to host name and pid so entries from different
    processes on one machine stay distinguishable.
    """
    configured = load_jobs_config().worker_id
    return configured or default_worker_id()

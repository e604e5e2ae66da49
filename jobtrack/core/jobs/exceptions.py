"""
Job exceptions.

These signal defects in a concrete job and are raised synchronously.
Failures of the store behind a job are never raised through here.
"""


class JobError(Exception):
    """Base exception for job framework errors."""

    pass


class InvalidArgumentError(JobError, ValueError):
    """An argument is outside the range the job framework accepts."""

    pass

"""
SQLAlchemy models for job tracking.

This module exports all database models used by the package.
"""

from jobtrack.core.models.job_runs import JobLog, JobRun

__all__ = [
    "JobRun",
    "JobLog",
]

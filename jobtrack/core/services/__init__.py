"""
Service layer for job tracking.

This module exports read services over persisted job records.
"""

from jobtrack.core.services.job_runs import JobRunService

__all__ = ["JobRunService"]

"""
SQLAlchemy models for job progress tracking.

job_run holds one row per job instance with its status and progress.
job_log holds the append-only log trail written by running jobs.
"""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Float, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from jobtrack.core.storage.postgres import Base
from jobtrack.core.utils.time import utcnow_naive


class JobRun(Base):
    """
    Record of a single job instance.

    The id is assigned by the job runner, not by the database, so the row
    can be upserted before anything else knows about the job.
    """

    __tablename__ = "job_run"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    object_type: Mapped[str] = mapped_column(String(32), nullable=False, default="job_run")
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False)
    progress: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow_naive
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow_naive, onupdate=utcnow_naive
    )

    __table_args__ = (
        Index("ix_job_run_name", "name"),
        Index("ix_job_run_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<JobRun(id='{self.id}', status='{self.status}', progress={self.progress})>"


class JobLog(Base):
    """
    One log statement emitted by a job.

    job_id is a back-reference only; log rows outlive nothing and own nothing.
    """

    __tablename__ = "job_log"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    object_type: Mapped[str] = mapped_column(String(32), nullable=False, default="job_log")
    job_id: Mapped[str] = mapped_column(String(64), nullable=False)
    worker_id: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    # "metadata" is reserved on declarative classes
    meta: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSONB, nullable=False, default=dict
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow_naive
    )

    __table_args__ = (
        Index("ix_job_log_job_id", "job_id"),
        Index("ix_job_log_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<JobLog(job_id='{self.job_id}', worker='{self.worker_id}')>"

"""Status codes and record types for job runs."""

import enum
from dataclasses import dataclass, field
from typing import Any


class JobStatus(enum.Enum):
    """Built-in job status codes. Callers may persist any other string."""

    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    ERRORED = "ERRORED"


def status_value(status: "JobStatus | str") -> str:
    """Return the string persisted for a status."""
    if isinstance(status, JobStatus):
        return status.value
    return status


@dataclass
class JobRunRecord:
    """Snapshot of a persisted job run."""

    id: str
    name: str
    status: str
    progress: float = 0
    error: str | None = None

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "JobRunRecord":
        return cls(
            id=document["id"],
            name=document.get("name", document["id"]),
            status=document.get("status", ""),
            progress=document.get("progress", 0),
            error=document.get("error"),
        )

    @property
    def is_finished(self) -> bool:
        return self.status != JobStatus.RUNNING.value


@dataclass
class JobLogEntry:
    """One persisted log statement of a job."""

    job_id: str
    worker_id: str
    name: str
    message: str
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "JobLogEntry":
        return cls(
            job_id=document["job_id"],
            worker_id=document.get("worker_id", ""),
            name=document.get("name", ""),
            message=document.get("message", ""),
            metadata=document.get("metadata") or {},
        )

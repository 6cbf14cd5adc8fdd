"""Track import job progress."""
import logging
import threading
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional

from .exceptions import JobConflictError, JobStateError

logger = logging.getLogger(__name__)


class ImportStatus(str, Enum):
    PENDING = "pending"          # Accepted, waiting for a worker
    IN_PROGRESS = "in_progress"  # A worker is importing items
    DONE = "done"                # Every item imported
    ERROR = "error"              # Finished with at least one failed item
    CANCELLED = "cancelled"      # Stopped between items on request

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({ImportStatus.DONE, ImportStatus.ERROR, ImportStatus.CANCELLED})

_ALLOWED_TRANSITIONS = {
    ImportStatus.PENDING: {ImportStatus.IN_PROGRESS, ImportStatus.CANCELLED},
    ImportStatus.IN_PROGRESS: {ImportStatus.DONE, ImportStatus.ERROR, ImportStatus.CANCELLED},
}

_MUTABLE_FIELDS = {"processed", "status", "message", "failed_items", "cancel_requested"}


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ImportJob:
    """Immutable snapshot of one import job."""

    job_id: str
    total: int
    processed: int = 0
    status: ImportStatus = ImportStatus.PENDING
    message: str = "Waiting to start..."
    failed_items: tuple[str, ...] = ()
    cancel_requested: bool = False
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "jobId": self.job_id,
            "processed": self.processed,
            "total": self.total,
            "status": self.status.value,
            "message": self.message,
            "failedItems": list(self.failed_items),
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }


class ImportJobRegistry:
    """
    Thread-safe in-memory store of import jobs (single process).

    Each job is written only by its own worker and read by any number of
    pollers. Jobs are stored as immutable snapshots that are swapped under a
    lock, so a reader sees either the state before an update or after it.
    """

    def __init__(self, retention_seconds: Optional[float] = None):
        """
        Args:
            retention_seconds: Evict finished jobs older than this when new jobs
                are created. None keeps finished jobs for the process lifetime.
        """
        self.retention_seconds = retention_seconds
        self._jobs: Dict[str, ImportJob] = {}
        self._lock = threading.Lock()

    def create(self, total: int, job_id: Optional[str] = None) -> str:
        """Create a pending job and return its ID."""
        if total < 0:
            raise JobStateError(f"Job total must not be negative: {total}")

        if self.retention_seconds is not None:
            self.evict_finished(self.retention_seconds)

        with self._lock:
            if job_id:
                if job_id in self._jobs:
                    raise JobConflictError(job_id)
            else:
                job_id = str(uuid.uuid4())
                while job_id in self._jobs:
                    job_id = str(uuid.uuid4())
            self._jobs[job_id] = ImportJob(job_id=job_id, total=total)

        logger.info(f"[Progress] Job {job_id[:8]}: created with {total} item(s)")
        return job_id

    def get(self, job_id: str) -> Optional[ImportJob]:
        """Get the current snapshot of a job, or None if unknown."""
        with self._lock:
            return self._jobs.get(job_id)

    def update(self, job_id: str, **changes: Any) -> ImportJob:
        """
        Apply field changes to a job atomically.

        Raises:
            KeyError: If the job does not exist
            JobStateError: If the change would break the job's invariants
        """
        unknown = set(changes) - _MUTABLE_FIELDS
        if unknown:
            raise JobStateError(f"Cannot update job field(s): {', '.join(sorted(unknown))}")
        if "status" in changes:
            changes["status"] = ImportStatus(changes["status"])
        return self._apply(job_id, lambda current: changes)

    def _apply(self, job_id: str, compute_changes: Callable[[ImportJob], Dict[str, Any]]) -> ImportJob:
        with self._lock:
            current = self._jobs.get(job_id)
            if current is None:
                raise KeyError(job_id)

            updated = replace(current, **compute_changes(current), updated_at=_now())
            self._validate_transition(current, updated)
            self._jobs[job_id] = updated

        if updated.status != current.status or updated.processed != current.processed:
            logger.info(
                f"[Progress] Job {job_id[:8]}: {current.processed}/{current.total} → "
                f"{updated.processed}/{updated.total} ({updated.status.value}) - {updated.message}"
            )
        return updated

    @staticmethod
    def _validate_transition(current: ImportJob, updated: ImportJob) -> None:
        if current.status.is_terminal:
            if (updated.status, updated.processed, updated.message) != (
                current.status, current.processed, current.message
            ):
                raise JobStateError(f"Job {current.job_id} is already {current.status.value}")

        if updated.status != current.status and updated.status not in _ALLOWED_TRANSITIONS.get(current.status, ()):
            raise JobStateError(
                f"Job {current.job_id} cannot move from {current.status.value} to {updated.status.value}"
            )

        if updated.processed < current.processed:
            raise JobStateError(f"Job {current.job_id} processed count cannot decrease")
        if updated.processed > updated.total:
            raise JobStateError(
                f"Job {current.job_id} processed count {updated.processed} exceeds total {updated.total}"
            )

    def start(self, job_id: str, message: str = "Starting import...") -> ImportJob:
        return self.update(job_id, status=ImportStatus.IN_PROGRESS, message=message)

    def set_message(self, job_id: str, message: str) -> ImportJob:
        return self.update(job_id, message=message)

    def advance(self, job_id: str, failed_item: Optional[str] = None) -> ImportJob:
        """Count one more item as processed, recording it as failed if given."""
        def changes(current: ImportJob) -> Dict[str, Any]:
            return {
                "processed": current.processed + 1,
                "failed_items": current.failed_items + ((failed_item,) if failed_item else ()),
            }
        return self._apply(job_id, changes)

    def finish(self, job_id: str, status: ImportStatus, message: str) -> ImportJob:
        if not status.is_terminal:
            raise JobStateError(f"Cannot finish job with non-terminal status {status.value}")
        return self.update(job_id, status=status, message=message)

    def request_cancel(self, job_id: str) -> Optional[ImportJob]:
        """
        Ask a job to stop before its next item.

        Pending jobs are cancelled immediately. Finished jobs are returned
        unchanged. Returns None if the job is unknown.
        """
        with self._lock:
            current = self._jobs.get(job_id)
            if current is None:
                return None
            if current.status.is_terminal:
                return current
            if current.status == ImportStatus.PENDING:
                updated = replace(
                    current,
                    status=ImportStatus.CANCELLED,
                    cancel_requested=True,
                    message="Import cancelled before start",
                    updated_at=_now(),
                )
            else:
                updated = replace(current, cancel_requested=True, updated_at=_now())
            self._jobs[job_id] = updated

        logger.info(f"[Progress] Job {job_id[:8]}: cancellation requested ({updated.status.value})")
        return updated

    def is_cancel_requested(self, job_id: str) -> bool:
        job = self.get(job_id)
        return bool(job and job.cancel_requested)

    def list_active(self) -> list[ImportJob]:
        """Jobs that have not reached a terminal status."""
        with self._lock:
            return [job for job in self._jobs.values() if not job.status.is_terminal]

    def discard(self, job_id: str) -> bool:
        """Remove a job that was never started. Returns False if unknown."""
        with self._lock:
            removed = self._jobs.pop(job_id, None)
        if removed is not None:
            logger.info(f"[Progress] Job {job_id[:8]}: discarded")
        return removed is not None

    def evict_finished(self, max_age_seconds: float) -> int:
        """Remove finished jobs last updated more than ``max_age_seconds`` ago."""
        now = _now()
        with self._lock:
            expired = [
                job_id for job_id, job in self._jobs.items()
                if job.status.is_terminal and (now - job.updated_at).total_seconds() > max_age_seconds
            ]
            for job_id in expired:
                del self._jobs[job_id]

        if expired:
            logger.info(f"Evicted {len(expired)} finished import job(s)")
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    def __contains__(self, job_id: str) -> bool:
        with self._lock:
            return job_id in self._jobs

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum

from policy_summarizer.exceptions import ErrorKind
from policy_summarizer.worker.exceptions import InvalidTransitionError


class JobStatus(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ProcessingJob:
    """Lifecycle of one document's processing run.

    A job starts pending and moves exactly once to succeeded or failed.
    """

    document_id: str
    status: JobStatus = JobStatus.PENDING
    started_at: datetime = field(default_factory=_now)
    finished_at: datetime | None = None
    error_kind: ErrorKind | None = None
    error_message: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status is not JobStatus.PENDING

    def succeed(self) -> "ProcessingJob":
        self._ensure_pending(JobStatus.SUCCEEDED)
        return replace(self, status=JobStatus.SUCCEEDED, finished_at=_now())

    def fail(self, kind: ErrorKind, message: str) -> "ProcessingJob":
        self._ensure_pending(JobStatus.FAILED)
        return replace(
            self,
            status=JobStatus.FAILED,
            finished_at=_now(),
            error_kind=kind,
            error_message=message,
        )

    def _ensure_pending(self, target: JobStatus) -> None:
        if self.is_terminal:
            raise InvalidTransitionError(
                f"Job for document {self.document_id} is already {self.status.value}, "
                f"cannot move to {target.value}"
            )


@dataclass(frozen=True)
class JobStatusView:
    """Poll-able status of a document."""

    document_id: str
    status: JobStatus
    has_result: bool
    has_summary: bool
    error_kind: str | None = None
    error_message: str | None = None

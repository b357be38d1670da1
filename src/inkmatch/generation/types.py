"""
types.py - Generation job model and failures

A job moves submitted -> running -> {succeeded, failed, timed_out}. Once it
is terminal no further polling happens.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class JobStatus(str, Enum):
    SUBMITTED = "submitted"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.SUCCEEDED, JobStatus.FAILED, JobStatus.TIMED_OUT)

    @classmethod
    def from_upstream(cls, status: object) -> JobStatus:
        """Map a Replicate prediction status onto the job lifecycle.

        Missing, unknown or non-string statuses count as still running.
        """
        if not isinstance(status, str):
            return cls.RUNNING
        return _UPSTREAM_STATUS.get(status, cls.RUNNING)


_UPSTREAM_STATUS = {
    "starting": JobStatus.SUBMITTED,
    "processing": JobStatus.RUNNING,
    "succeeded": JobStatus.SUCCEEDED,
    "failed": JobStatus.FAILED,
    "canceled": JobStatus.FAILED,
}


@dataclass
class GenerationJob:
    """Handle of one external generation job."""

    job_id: str
    poll_url: str
    status: JobStatus = JobStatus.SUBMITTED
    output_url: str | None = None
    error: str | None = None
    polls: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


class JobFailureReason(str, Enum):
    UPSTREAM = "upstream"
    TIMEOUT = "timeout"
    TRANSPORT = "transport"


class SubmissionError(Exception):
    """The job could not be created; the caller must not poll."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class JobError(Exception):
    """A submitted job ended without an output."""

    def __init__(self, reason: JobFailureReason, detail: str | None = None):
        super().__init__(f"Generation job {reason.value}: {detail}" if detail else f"Generation job {reason.value}")
        self.reason = reason
        self.detail = detail


__all__ = [
    "GenerationJob",
    "JobError",
    "JobFailureReason",
    "JobStatus",
    "SubmissionError",
]

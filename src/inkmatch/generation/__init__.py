"""
inkmatch.generation - External image generation

Modules:
    types: Job handle, statuses and failures
    clock: Injectable time source
    poller: Submit/poll state machine
    service: Degrade-to-None facade used by the tools
"""

from .clock import Clock, MonotonicClock
from .poller import JobPoller
from .service import ImageGenerator
from .types import GenerationJob, JobError, JobFailureReason, JobStatus, SubmissionError

__all__ = [
    "Clock",
    "GenerationJob",
    "ImageGenerator",
    "JobError",
    "JobFailureReason",
    "JobPoller",
    "JobStatus",
    "MonotonicClock",
    "SubmissionError",
]

"""
poller.py - Submit/poll driver for one external generation job

State machine:

    submit() ──ok──> SUBMITTED ──poll──> RUNNING ──poll──> SUCCEEDED  -> output URL
        │                 │                  │       └───> FAILED     -> JobError(upstream)
        │                 └──────────────────┴─elapsed >= timeout──> TIMED_OUT -> JobError(timeout)
        └──error──> SubmissionError (no job, never polled)

Polling runs at a fixed interval with no backoff or jitter. Elapsed time is
checked before every poll, so the timeout error is raised at or after the
bound, never earlier. All waiting goes through the injected `Clock`.
"""

from __future__ import annotations

from typing import Any

import httpx

from inkmatch.config.logging import get_logger

from .clock import Clock, MonotonicClock
from .types import GenerationJob, JobError, JobFailureReason, JobStatus, SubmissionError

logger = get_logger("inkmatch.generation.poller")

DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_TIMEOUT = 60.0


class JobPoller:
    """Drives Replicate predictions to completion.

    Usage:
        async with httpx.AsyncClient() as client:
            poller = JobPoller(client, api_url, token)
            job = await poller.submit(payload)
            image_url = await poller.await_result(job)
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_url: str,
        api_token: str,
        *,
        interval: float = DEFAULT_POLL_INTERVAL,
        timeout: float = DEFAULT_TIMEOUT,
        clock: Clock | None = None,
    ):
        self._client = client
        self.api_url = api_url
        self.interval = interval
        self.timeout = timeout
        self._clock = clock or MonotonicClock()
        self._headers = {"Authorization": f"Bearer {api_token}"}

    async def submit(self, payload: dict[str, Any]) -> GenerationJob:
        """Create the job. Any failure here means the caller must not poll."""
        try:
            response = await self._client.post(self.api_url, json=payload, headers=self._headers)
        except httpx.HTTPError as e:
            raise SubmissionError(f"Prediction request failed: {e}") from e

        if not response.is_success:
            raise SubmissionError(
                f"Prediction create failed: {response.text}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
            job = GenerationJob(job_id=str(data["id"]), poll_url=str(data["urls"]["get"]))
        except (ValueError, KeyError, TypeError) as e:
            raise SubmissionError(
                f"Malformed prediction response: {e}", status_code=response.status_code
            ) from e

        self._apply(job, data)
        logger.info("Generation job submitted", job_id=job.job_id, status=job.status.value)
        return job

    async def poll(self, job: GenerationJob) -> GenerationJob:
        """Query the job status once and apply it to the handle."""
        if job.is_terminal:
            return job

        job.polls += 1
        try:
            response = await self._client.get(job.poll_url, headers=self._headers)
        except httpx.HTTPError as e:
            job.status = JobStatus.FAILED
            job.error = str(e)
            raise JobError(JobFailureReason.TRANSPORT, str(e)) from e

        if not response.is_success:
            # Transient upstream trouble; the timeout still bounds the loop
            logger.warning(
                "Generation status request failed",
                job_id=job.job_id,
                status_code=response.status_code,
            )
            return job

        try:
            data = response.json()
        except ValueError as e:
            job.status = JobStatus.FAILED
            job.error = f"Malformed status response: {e}"
            raise JobError(JobFailureReason.TRANSPORT, job.error) from e

        self._apply(job, data)
        return job

    async def await_result(self, job: GenerationJob, timeout: float | None = None) -> str:
        """Poll until the job is terminal or the timeout elapses.

        Returns:
            The first output URL of a succeeded job

        Raises:
            JobError: upstream failure, timeout, or a broken status call
        """
        bound = self.timeout if timeout is None else timeout
        started = self._clock.now()

        while not job.is_terminal:
            if self._clock.now() - started >= bound:
                job.status = JobStatus.TIMED_OUT
                break
            await self.poll(job)
            if not job.is_terminal:
                await self._clock.sleep(self.interval)

        if job.status is JobStatus.SUCCEEDED and job.output_url:
            logger.info("Generation job succeeded", job_id=job.job_id, polls=job.polls)
            return job.output_url
        if job.status is JobStatus.TIMED_OUT:
            raise JobError(JobFailureReason.TIMEOUT, f"no result after {bound:g}s")
        raise JobError(JobFailureReason.UPSTREAM, job.error or "job finished without output")

    def _apply(self, job: GenerationJob, data: Any) -> None:
        if not isinstance(data, dict):
            return
        job.status = JobStatus.from_upstream(data.get("status"))
        if job.status is JobStatus.SUCCEEDED:
            job.output_url = _first_output(data.get("output"))
        elif job.status is JobStatus.FAILED:
            job.error = str(data.get("error") or data.get("status"))


def _first_output(output: Any) -> str | None:
    if isinstance(output, list):
        return str(output[0]) if output else None
    if isinstance(output, str) and output:
        return output
    return None


__all__ = ["DEFAULT_POLL_INTERVAL", "DEFAULT_TIMEOUT", "JobPoller"]

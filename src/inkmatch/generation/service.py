"""
service.py - Image generation with graceful degradation

`ImageGenerator.generate()` never raises for an external failure. A missing
API token, a rejected submission, an upstream-reported failure, a timeout or
an unexpected upstream body all collapse to `None` ("no image") with a logged
reason.
"""

from __future__ import annotations

from typing import Any

import httpx

from inkmatch.config.logging import get_logger
from inkmatch.config.settings import Settings

from .clock import Clock
from .poller import DEFAULT_POLL_INTERVAL, DEFAULT_TIMEOUT, JobPoller
from .types import JobError, SubmissionError

logger = get_logger("inkmatch.generation")


class ImageGenerator:
    """Turns a prediction payload into an image URL, or None."""

    def __init__(
        self,
        api_token: str | None,
        api_url: str,
        *,
        interval: float = DEFAULT_POLL_INTERVAL,
        timeout: float = DEFAULT_TIMEOUT,
        http_timeout: float = 30.0,
        clock: Clock | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_token = api_token
        self.api_url = api_url
        self.interval = interval
        self.timeout = timeout
        self.http_timeout = http_timeout
        self._clock = clock
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> ImageGenerator:
        return cls(
            settings.replicate_api_token,
            settings.replicate_api_url,
            interval=settings.poll_interval,
            timeout=settings.job_timeout,
            http_timeout=settings.http_timeout,
            **kwargs,
        )

    @property
    def enabled(self) -> bool:
        return bool(self.api_token)

    async def generate(self, payload: dict[str, Any]) -> str | None:
        if not self.api_token:
            logger.warning("REPLICATE_API_TOKEN not set, skipping image generation")
            return None

        async with httpx.AsyncClient(transport=self._transport, timeout=self.http_timeout) as client:
            poller = JobPoller(
                client,
                self.api_url,
                self.api_token,
                interval=self.interval,
                timeout=self.timeout,
                clock=self._clock,
            )
            try:
                job = await poller.submit(payload)
            except SubmissionError as e:
                logger.error("Image generation submit failed", error=str(e), status_code=e.status_code)
                return None
            except Exception:
                logger.exception("Image generation submit crashed")
                return None

            try:
                return await poller.await_result(job)
            except JobError as e:
                logger.error(
                    "Image generation failed",
                    job_id=job.job_id,
                    reason=e.reason.value,
                    error=e.detail,
                )
                return None
            except Exception:
                logger.exception("Image generation crashed", job_id=job.job_id)
                return None


__all__ = ["ImageGenerator"]

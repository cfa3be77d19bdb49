"""Polling of asynchronous platform jobs until they reach a terminal state."""

import asyncio
import time

import structlog

from ..models.job import Job
from .exceptions import BgChangeStackError

logger = structlog.get_logger()


class JobFailedError(BgChangeStackError):
    """A job reached the failed state."""

    def __init__(self, job_id: str, code: int, description: str, error_code: str):
        super().__init__(f"Error {error_code}, {description} [code: {code}]")
        self.job_id = job_id
        self.code = code
        self.description = description
        self.error_code = error_code


class JobTimeoutError(BgChangeStackError):
    """A job did not reach a terminal state within the allowed time."""


class JobPoller:
    """Wait for platform jobs with exponential backoff between fetches."""

    def __init__(
        self,
        operations,
        initial_delay: float = 1.0,
        max_delay: float = 15.0,
        backoff_factor: float = 2.0,
        max_wait: float | None = 900.0,
    ):
        """Initialize the poller.

        Args:
            operations: PlatformOperations used to fetch job state
            initial_delay: Delay before the second fetch (seconds)
            max_delay: Maximum delay between fetches (seconds)
            backoff_factor: Exponential backoff multiplier
            max_wait: Maximum time to wait for a terminal state, None to wait forever
        """
        self.operations = operations
        self.initial_delay = initial_delay
        self.max_delay = max_delay
        self.backoff_factor = backoff_factor
        self.max_wait = max_wait
        self.logger = logger.bind(component="job_poller")

    async def await_completion(self, job_id: str) -> Job:
        """Fetch the job until it is finished or failed.

        Args:
            job_id: Platform id of the job

        Returns:
            The finished Job

        Raises:
            JobFailedError: If the job failed
            JobTimeoutError: If max_wait elapsed first
        """
        start = time.monotonic()
        delay = self.initial_delay
        attempts = 0

        while True:
            attempts += 1
            job = await self.operations.fetch_job(job_id)

            if job.is_finished:
                self.logger.info("Job finished", job_id=job_id, attempts=attempts)
                return job

            if job.is_failed:
                details = job.error_details
                self.logger.error(
                    "Job failed",
                    job_id=job_id,
                    attempts=attempts,
                    error_code=details.error_code,
                    description=details.description,
                )
                raise JobFailedError(job_id, details.code, details.description, details.error_code)

            elapsed = time.monotonic() - start
            if self.max_wait is not None and elapsed + delay > self.max_wait:
                raise JobTimeoutError(
                    f"Job {job_id} still {job.status!r} after {elapsed:.1f}s "
                    f"({attempts} fetches, limit {self.max_wait}s)"
                )

            self.logger.debug("Job not done yet", job_id=job_id, status=job.status, delay=delay)
            await asyncio.sleep(delay)
            delay = min(delay * self.backoff_factor, self.max_delay)

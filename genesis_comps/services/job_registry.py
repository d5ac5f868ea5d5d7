"""Single-job admission control and the in-memory results log."""

from __future__ import annotations

import random
import string
import threading
import time
from typing import Any, Awaitable, Callable, Optional, Protocol

from loguru import logger

from genesis_comps.exceptions import JobConflict
from genesis_comps.models import Job, JobResult, JobStatus
from genesis_comps.utils.time import elapsed_ms, iso_timestamp, now_utc

_ID_ALPHABET = string.ascii_lowercase + string.digits


def new_job_id() -> str:
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))  # noqa: S311
    return f"job_{int(time.time() * 1000)}_{suffix}"


class JobRunner(Protocol):
    def run(self, job: Job) -> Awaitable[JobResult]: ...


class JobRegistry:
    """Owns the current job and the results log.

    ``try_acquire`` is the only way to create a job and is atomic, so at most
    one job is ever active.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.current_job: Optional[Job] = None
        self.results: list[JobResult] = []

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self.current_job is not None and self.current_job.is_active

    def try_acquire(self, location: str) -> Optional[Job]:
        with self._lock:
            if self.current_job is not None and self.current_job.is_active:
                return None
            self.current_job = Job(id=new_job_id(), location=location, started_at=now_utc())
            logger.info(f"Job {self.current_job.id} accepted for {location!r}")
            return self.current_job

    def acquire(self, location: str) -> Job:
        job = self.try_acquire(location)
        if job is None:
            raise JobConflict(self.current_job.id)
        return job

    def mark_running(self, job_id: str) -> None:
        with self._lock:
            job = self._job(job_id)
            job.status = JobStatus.RUNNING

    def complete(self, result: JobResult) -> None:
        with self._lock:
            job = self._job(result.job_id)
            job.status = JobStatus.COMPLETED
            job.completed_at = result.completed_at or now_utc()
            job.login_success = result.login_success
            job.search_success = result.search_success
            job.comparable_extraction_success = result.comparable_extraction_success
            job.overall_success = result.overall_success
            self.results.append(result)

    def fail(self, job_id: str, error: str) -> JobResult:
        with self._lock:
            job = self._job(job_id)
            job.status = JobStatus.FAILED
            job.completed_at = now_utc()
            job.error = error
            result = JobResult(
                job_id=job.id,
                location=job.location,
                error=error,
                completed_at=job.completed_at,
                duration_ms=elapsed_ms(job.started_at, job.completed_at),
            )
            self.results.append(result)
            return result

    def clear_results(self) -> None:
        with self._lock:
            self.results = []

    def snapshot(self) -> dict[str, Any]:
        """The ``automation`` block of the status endpoints."""
        with self._lock:
            job = self.current_job
            return {
                "isRunning": job is not None and job.is_active,
                "currentJob": job.to_json_dict() if job else None,
                "results": [r.to_json_dict() for r in self.results],
            }

    def _job(self, job_id: str) -> Job:
        if self.current_job is None or self.current_job.id != job_id:
            raise KeyError(f"Unknown job {job_id}")
        return self.current_job


async def run_job(
    registry: JobRegistry,
    job: Job,
    automation_factory: Callable[[], JobRunner],
) -> JobResult:
    """Run ``job`` to a terminal state; never raises."""
    log = logger.bind(job_id=job.id)
    log.info(f"Starting automation for job {job.id} with location: {job.location}")
    registry.mark_running(job.id)
    try:
        automation = automation_factory()
        result = await automation.run(job)
    except Exception as e:
        log.exception(f"Automation failed for job {job.id}: {e}")
        return registry.fail(job.id, str(e) or type(e).__name__)

    registry.complete(result)
    log.info(
        f"Automation completed for job {job.id} at {iso_timestamp()}. "
        f"Login: {result.login_success}, Search: {result.search_success}, "
        f"Comparable: {result.comparable_extraction_success}"
    )
    return result

"""Registry of the application's background jobs."""

import logging
from typing import Any

from mediavote.errors import NotFoundError
from mediavote.jobs.base import BackgroundJob
from mediavote.models.job import ScheduledJob

logger = logging.getLogger(__name__)


class JobScheduler:
    """Holds the background jobs so admins can list, trigger and cancel them."""

    def __init__(self):
        self._jobs: dict[str, BackgroundJob] = {}

    def register(self, job: BackgroundJob) -> BackgroundJob:
        if job.job_id in self._jobs:
            raise ValueError(f"Job {job.job_id} is already registered")
        self._jobs[job.job_id] = job
        return job

    def get(self, job_id: str) -> BackgroundJob:
        job = self._jobs.get(job_id)
        if job is None:
            raise NotFoundError(f"Job {job_id} not found")
        return job

    def list(self) -> list[ScheduledJob]:
        return [
            ScheduledJob(
                id=job.job_id,
                name=job.name,
                interval_seconds=job.interval_seconds,
                **job.status().model_dump(),
            )
            for job in self._jobs.values()
        ]

    async def run(self, job_id: str) -> Any:
        """Trigger a job immediately."""
        job = self.get(job_id)
        logger.info(f"Manually running job {job_id}")
        return await job.run_once()

    def cancel(self, job_id: str) -> ScheduledJob:
        job = self.get(job_id)
        job.cancel()
        return next(j for j in self.list() if j.id == job_id)

    def start_all(self) -> None:
        for job in self._jobs.values():
            job.start()

    async def stop_all(self) -> None:
        for job in self._jobs.values():
            await job.stop()

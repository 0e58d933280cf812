"""Tests for the background job base class and scheduler."""

import asyncio
import pytest

from mediavote.errors import NotFoundError
from mediavote.jobs.base import BackgroundJob
from mediavote.jobs.scheduler import JobScheduler


class CountingJob(BackgroundJob):
    job_id = "counting"
    name = "Counting Job"

    def __init__(self, interval_seconds: int = 0):
        super().__init__(interval_seconds)
        self.runs = 0

    async def _execute(self) -> int:
        self.runs += 1
        await asyncio.sleep(0)
        return self.runs


class FailingJob(CountingJob):
    job_id = "failing"

    async def _execute(self) -> int:
        self.runs += 1
        raise RuntimeError("boom")


class TestBackgroundJob:
    """Tests for the recurring loop."""

    async def test_loop_runs_until_stopped(self):
        job = CountingJob()
        job.start()
        for _ in range(20):
            await asyncio.sleep(0)
        await job.stop()

        runs = job.runs
        assert runs > 0
        await asyncio.sleep(0)
        assert job.runs == runs

    async def test_failed_run_keeps_loop_alive(self):
        """An exception is logged and the next interval runs again."""
        job = FailingJob()
        job.start()
        for _ in range(20):
            await asyncio.sleep(0)
        await job.stop()

        assert job.runs > 1
        assert job.running is False

    async def test_cancel_when_idle_is_ignored(self):
        job = CountingJob()
        job.cancel()
        assert job.cancel_requested is False


class TestJobScheduler:
    """Tests for the job registry."""

    async def test_register_and_list(self):
        scheduler = JobScheduler()
        scheduler.register(CountingJob(interval_seconds=60))

        jobs = scheduler.list()

        assert len(jobs) == 1
        assert jobs[0].id == "counting"
        assert jobs[0].name == "Counting Job"
        assert jobs[0].interval_seconds == 60
        assert jobs[0].running is False

    async def test_duplicate_registration(self):
        scheduler = JobScheduler()
        scheduler.register(CountingJob())
        with pytest.raises(ValueError):
            scheduler.register(CountingJob())

    async def test_run_now(self):
        scheduler = JobScheduler()
        scheduler.register(CountingJob())

        assert await scheduler.run("counting") == 1

    async def test_unknown_job(self):
        scheduler = JobScheduler()
        with pytest.raises(NotFoundError):
            await scheduler.run("missing")
        with pytest.raises(NotFoundError):
            scheduler.cancel("missing")

    async def test_start_and_stop_all(self):
        scheduler = JobScheduler()
        job = scheduler.register(CountingJob())

        scheduler.start_all()
        for _ in range(20):
            await asyncio.sleep(0)
        await scheduler.stop_all()

        assert job.runs > 0

"""Base class for recurring background jobs."""

import asyncio
import logging
from typing import Any

from mediavote.models.job import JobStatus

logger = logging.getLogger(__name__)


class BackgroundJob:
    """A job that runs on a fixed interval, one run at a time.

    Subclasses implement ``_execute`` and report progress through
    ``self.progress``/``self.total``. Long-running subclasses should check
    ``cancel_requested`` between items.
    """

    job_id: str = ""
    name: str = ""

    def __init__(self, interval_seconds: int):
        self.interval_seconds = interval_seconds
        self.progress = 0
        self.total = 0
        self._running = False
        self._cancel_requested = False
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._running

    @property
    def cancel_requested(self) -> bool:
        return self._cancel_requested

    def status(self) -> JobStatus:
        return JobStatus(running=self._running, progress=self.progress, total=self.total)

    def cancel(self) -> None:
        """Ask the current run to stop after the item it is working on."""
        if self._running:
            logger.info(f"Cancellation requested for job {self.job_id}")
            self._cancel_requested = True

    def _skipped(self) -> Any:
        return None

    async def _execute(self) -> Any:
        raise NotImplementedError

    async def run_once(self) -> Any:
        """Run the job now unless a previous run is still active."""
        if self._running:
            logger.info(f"Job {self.job_id} is already running, skipping this run")
            return self._skipped()

        self._running = True
        try:
            return await self._execute()
        finally:
            self._reset()

    def _reset(self) -> None:
        self._running = False
        self._cancel_requested = False
        self.progress = 0
        self.total = 0

    def start(self) -> None:
        """Start the recurring loop on the running event loop."""
        if self._task is None or self._task.done():
            logger.info(f"Starting job {self.job_id} every {self.interval_seconds}s")
            self._task = asyncio.create_task(self._loop(), name=self.job_id)

    async def stop(self) -> None:
        """Stop the recurring loop."""
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info(f"Stopped job {self.job_id}")

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.run_once()
            except Exception:
                logger.exception(f"Job {self.job_id} failed")

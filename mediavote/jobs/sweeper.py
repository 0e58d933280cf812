"""Expired deletion vote sweeper.

Resolves every deletion request whose voting window has closed. Requests
are handled one at a time; a request that fails is logged and left for the
next run, since ``resolve`` is idempotent.
"""

import logging

from mediavote.errors import StoreFailure
from mediavote.jobs.base import BackgroundJob
from mediavote.models.job import SweepFailure, SweepResult
from mediavote.services.deletion import DeletionService

logger = logging.getLogger(__name__)


class ExpiredVoteSweeper(BackgroundJob):
    """Background processor for deletion requests with expired voting periods."""

    job_id = "deletion-vote-processor"
    name = "Deletion Vote Processor"

    def __init__(self, lifecycle: DeletionService, interval_seconds: int = 300):
        super().__init__(interval_seconds)
        self.lifecycle = lifecycle

    def _skipped(self) -> SweepResult:
        return SweepResult(skipped=True)

    async def run_once(self) -> SweepResult:
        if not self.lifecycle.settings.enabled:
            logger.debug("Deletion feature is disabled, skipping vote processing")
            return SweepResult(disabled=True)
        return await super().run_once()

    async def _execute(self) -> SweepResult:
        try:
            expired = await self.lifecycle.find_expired_voting_requests()
        except StoreFailure:
            logger.exception("Could not load expired deletion requests")
            raise

        result = SweepResult(total=len(expired))
        self.total = len(expired)

        if not expired:
            logger.debug("No expired deletion requests to process")
            return result

        logger.info(f"Processing {len(expired)} deletion request(s) with expired voting periods")

        for request in expired:
            if self.cancel_requested:
                logger.info("Deletion vote processor cancelled")
                result.cancelled = True
                break

            try:
                resolved = await self.lifecycle.resolve(request.id)
                result.resolved.append(request.id)
                logger.info(
                    f"Processed deletion request {request.id} ({request.title}): "
                    f"{resolved.status.value}"
                )
            except Exception as e:
                result.failed.append(
                    SweepFailure(request_id=request.id, title=request.title, error=str(e))
                )
                logger.error(
                    f"Failed to process deletion request {request.id} ({request.title}): {e}"
                )
            self.progress += 1

        logger.info(
            f"Completed processing {self.progress}/{self.total} deletion requests "
            f"({len(result.failed)} failed)"
        )
        return result

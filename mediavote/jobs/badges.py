"""Top reviewer badge jobs.

Each run recomputes the leader for its window and makes them the single
holder of the badge.
"""

import logging
from datetime import datetime
from typing import Callable

from mediavote.jobs.base import BackgroundJob
from mediavote.models.badge import BadgeType, ReconcileResult
from mediavote.services.badges import BadgeService, month_start, year_start
from mediavote.services.reviews import ReviewService

logger = logging.getLogger(__name__)


class TopReviewerBadgeJob(BackgroundJob):
    """Reconcile a single-holder reviewer badge over a calendar window."""

    def __init__(
        self,
        job_id: str,
        name: str,
        badge_type: BadgeType,
        window_start: Callable[[datetime], datetime],
        badges: BadgeService,
        reviews: ReviewService,
        interval_seconds: int = 3600,
    ):
        super().__init__(interval_seconds)
        self.job_id = job_id
        self.name = name
        self.badge_type = badge_type
        self.window_start = window_start
        self.badges = badges
        self.reviews = reviews

    async def _execute(self) -> ReconcileResult:
        start = self.window_start(self.reviews.clock())
        self.total = 1

        async def leader():
            return await self.reviews.aggregate_leader(start)

        result = await self.badges.reconcile(self.badge_type, leader)
        self.progress = 1
        logger.info(
            f"{self.name}: leader={result.leader_id} count={result.leader_count} "
            f"revoked={len(result.revoked)}"
        )
        return result


def top_reviewer_month_job(
    badges: BadgeService, reviews: ReviewService, interval_seconds: int = 3600
) -> TopReviewerBadgeJob:
    return TopReviewerBadgeJob(
        "top-reviewer-month",
        "Top Reviewer of the Month",
        BadgeType.TOP_REVIEWER_MONTH,
        month_start,
        badges,
        reviews,
        interval_seconds,
    )


def top_reviewer_year_job(
    badges: BadgeService, reviews: ReviewService, interval_seconds: int = 3600
) -> TopReviewerBadgeJob:
    return TopReviewerBadgeJob(
        "top-reviewer-year",
        "Top Reviewer of the Year",
        BadgeType.TOP_REVIEWER_YEAR,
        year_start,
        badges,
        reviews,
        interval_seconds,
    )

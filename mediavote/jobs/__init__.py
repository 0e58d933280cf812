from mediavote.jobs.badges import TopReviewerBadgeJob, top_reviewer_month_job, top_reviewer_year_job
from mediavote.jobs.base import BackgroundJob
from mediavote.jobs.scheduler import JobScheduler
from mediavote.jobs.sweeper import ExpiredVoteSweeper

__all__ = [
    "BackgroundJob",
    "ExpiredVoteSweeper",
    "JobScheduler",
    "TopReviewerBadgeJob",
    "top_reviewer_month_job",
    "top_reviewer_year_job",
]

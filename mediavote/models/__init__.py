"""Pydantic models for MediaVote."""

from mediavote.models.deletion import (
    MediaType,
    DeletionRequestStatus,
    DeletionRequestCreate,
    DeletionRequest,
    DeletionRequestPage,
    DeletionVoteCreate,
    DeletionVote,
    PageInfo,
    OPEN_STATUSES,
)
from mediavote.models.badge import (
    BadgeType,
    BadgeCategory,
    BadgeDefinition,
    BadgeAward,
    UserBadge,
    ReconcileResult,
    BADGE_DEFINITIONS,
    COMMUNITY_BADGES,
    REVIEW_MILESTONES,
)
from mediavote.models.review import (
    MediaReviewCreate,
    MediaReview,
    Leader,
)
from mediavote.models.auth import (
    Permission,
    AuthUser,
    UserCreate,
    AuthSessionResponse,
)
from mediavote.models.job import (
    JobStatus,
    ScheduledJob,
    SweepFailure,
    SweepResult,
)

__all__ = [
    # Deletion models
    "MediaType",
    "DeletionRequestStatus",
    "DeletionRequestCreate",
    "DeletionRequest",
    "DeletionRequestPage",
    "DeletionVoteCreate",
    "DeletionVote",
    "PageInfo",
    "OPEN_STATUSES",
    # Badge models
    "BadgeType",
    "BadgeCategory",
    "BadgeDefinition",
    "BadgeAward",
    "UserBadge",
    "ReconcileResult",
    "BADGE_DEFINITIONS",
    "COMMUNITY_BADGES",
    "REVIEW_MILESTONES",
    # Review models
    "MediaReviewCreate",
    "MediaReview",
    "Leader",
    # Auth models
    "Permission",
    "AuthUser",
    "UserCreate",
    "AuthSessionResponse",
    # Job models
    "JobStatus",
    "ScheduledJob",
    "SweepFailure",
    "SweepResult",
]

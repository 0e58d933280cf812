"""Badge models for MediaVote."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, Field


class BadgeType(str, Enum):
    """Badge identifiers."""
    # Review milestones
    REVIEWS_WRITTEN_1 = "REVIEWS_WRITTEN_1"
    REVIEWS_WRITTEN_10 = "REVIEWS_WRITTEN_10"
    REVIEWS_WRITTEN_50 = "REVIEWS_WRITTEN_50"
    REVIEWS_WRITTEN_100 = "REVIEWS_WRITTEN_100"

    # Community badges
    COMMUNITY_HERO = "COMMUNITY_HERO"
    TOP_REVIEWER_MONTH = "TOP_REVIEWER_MONTH"
    TOP_REVIEWER_YEAR = "TOP_REVIEWER_YEAR"


class BadgeCategory(str, Enum):
    REVIEWS = "reviews"
    COMMUNITY = "community"


@dataclass(frozen=True)
class BadgeDefinition:
    """Display information for a badge type."""
    type: BadgeType
    display_name: str
    description: str
    icon: str
    category: BadgeCategory


BADGE_DEFINITIONS: dict[BadgeType, BadgeDefinition] = {
    BadgeType.REVIEWS_WRITTEN_1: BadgeDefinition(
        BadgeType.REVIEWS_WRITTEN_1, "First Review", "Wrote your first review", "✍️",
        BadgeCategory.REVIEWS,
    ),
    BadgeType.REVIEWS_WRITTEN_10: BadgeDefinition(
        BadgeType.REVIEWS_WRITTEN_10, "Reviewer", "Wrote 10 reviews", "📝",
        BadgeCategory.REVIEWS,
    ),
    BadgeType.REVIEWS_WRITTEN_50: BadgeDefinition(
        BadgeType.REVIEWS_WRITTEN_50, "Prolific Reviewer", "Wrote 50 reviews", "📖",
        BadgeCategory.REVIEWS,
    ),
    BadgeType.REVIEWS_WRITTEN_100: BadgeDefinition(
        BadgeType.REVIEWS_WRITTEN_100, "Top Reviewer", "Wrote 100 reviews", "⭐",
        BadgeCategory.REVIEWS,
    ),
    BadgeType.COMMUNITY_HERO: BadgeDefinition(
        BadgeType.COMMUNITY_HERO, "Community Hero", "Recognized by the admins", "🦸",
        BadgeCategory.COMMUNITY,
    ),
    BadgeType.TOP_REVIEWER_MONTH: BadgeDefinition(
        BadgeType.TOP_REVIEWER_MONTH, "Top Reviewer of the Month",
        "Wrote the most reviews this month", "🥇", BadgeCategory.COMMUNITY,
    ),
    BadgeType.TOP_REVIEWER_YEAR: BadgeDefinition(
        BadgeType.TOP_REVIEWER_YEAR, "Top Reviewer of the Year",
        "Wrote the most reviews this year", "🏆", BadgeCategory.COMMUNITY,
    ),
}

# Milestone thresholds checked whenever a review is written
REVIEW_MILESTONES: list[tuple[int, BadgeType]] = [
    (1, BadgeType.REVIEWS_WRITTEN_1),
    (10, BadgeType.REVIEWS_WRITTEN_10),
    (50, BadgeType.REVIEWS_WRITTEN_50),
    (100, BadgeType.REVIEWS_WRITTEN_100),
]

COMMUNITY_BADGES = frozenset({
    BadgeType.COMMUNITY_HERO,
    BadgeType.TOP_REVIEWER_MONTH,
    BadgeType.TOP_REVIEWER_YEAR,
})


class UserBadge(BaseModel):
    """Badge held by a user, joined with its definition.

    ``metadata`` is an opaque string (JSON by convention) and is not
    validated here.
    """
    id: str = Field(..., alias="_id")
    user_id: str
    badge_type: BadgeType
    metadata: str | None = None
    earned_at: datetime
    display_name: str = ""
    description: str = ""
    icon: str = ""
    category: BadgeCategory | None = None

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }

    @classmethod
    def from_doc(cls, doc: dict) -> "UserBadge":
        doc = dict(doc)
        doc["_id"] = str(doc["_id"])
        definition = BADGE_DEFINITIONS.get(BadgeType(doc["badge_type"]))
        if definition:
            doc.setdefault("display_name", definition.display_name)
            doc.setdefault("description", definition.description)
            doc.setdefault("icon", definition.icon)
            doc.setdefault("category", definition.category)
        return cls(**doc)


class BadgeAward(BaseModel):
    """Admin request to award a community badge."""
    user_id: str = Field(..., min_length=1, max_length=128)
    badge_type: BadgeType

    model_config = {"extra": "forbid"}


class ReconcileResult(BaseModel):
    """Outcome of one badge reconciliation run."""
    badge_type: BadgeType
    leader_id: str | None = None
    leader_count: int = 0
    revoked: list[str] = Field(default_factory=list)
    awarded: bool = False

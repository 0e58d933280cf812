"""Badge service: awarding, revoking and reconciling user badges."""

import json
import logging
from datetime import datetime
from typing import Awaitable, Callable
from motor.motor_asyncio import AsyncIOMotorDatabase

from mediavote.errors import ForbiddenError
from mediavote.models.auth import AuthUser, Permission
from mediavote.models.badge import (
    COMMUNITY_BADGES,
    REVIEW_MILESTONES,
    BadgeType,
    ReconcileResult,
    UserBadge,
)
from mediavote.models.review import Leader
from mediavote.services.auth import has_permission
from mediavote.utils.helpers import utcnow

logger = logging.getLogger(__name__)

LeaderFn = Callable[[], Awaitable[Leader | None]]


def month_start(now: datetime) -> datetime:
    """Midnight on the first day of ``now``'s month."""
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def year_start(now: datetime) -> datetime:
    """Midnight on January 1st of ``now``'s year."""
    return now.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)


class BadgeService:
    """Service for user badges.

    Awards are idempotent: the unique (user_id, badge_type) index plus an
    upsert means awarding a held badge is a no-op, not an error.
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        clock: Callable[[], datetime] | None = None,
    ):
        self.db = db
        self.collection = db.user_badges
        self.clock = clock or utcnow

    async def award_badge(
        self,
        user_id: str,
        badge_type: BadgeType,
        metadata: str | None = None,
    ) -> UserBadge | None:
        """Award a badge, returning None if the user already holds it."""
        now = self.clock()
        result = await self.collection.update_one(
            {"user_id": user_id, "badge_type": badge_type.value},
            {"$setOnInsert": {"metadata": metadata, "earned_at": now}},
            upsert=True,
        )
        if result.upserted_id is None:
            return None

        logger.info(f"Badge {badge_type.value} awarded to {user_id}")
        return UserBadge.from_doc({
            "_id": result.upserted_id,
            "user_id": user_id,
            "badge_type": badge_type.value,
            "metadata": metadata,
            "earned_at": now,
        })

    async def award_community_badge(
        self,
        user_id: str,
        badge_type: BadgeType,
        awarded_by: AuthUser,
    ) -> UserBadge | None:
        """Admin award of a community badge."""
        if not has_permission(awarded_by, Permission.MANAGE_BADGES):
            raise ForbiddenError("Only admins can award community badges")
        if badge_type not in COMMUNITY_BADGES:
            raise ValueError(f"{badge_type.value} is not a community badge")

        metadata = json.dumps({"awarded_by": awarded_by.user_id})
        return await self.award_badge(user_id, badge_type, metadata=metadata)

    async def revoke_badge(self, user_id: str, badge_type: BadgeType) -> bool:
        result = await self.collection.delete_one(
            {"user_id": user_id, "badge_type": badge_type.value}
        )
        if result.deleted_count:
            logger.info(f"Badge {badge_type.value} removed from {user_id}")
        return result.deleted_count > 0

    async def get_badge_holders(self, badge_type: BadgeType) -> list[str]:
        return await self.collection.distinct("user_id", {"badge_type": badge_type.value})

    async def get_user_badges(self, user_id: str) -> list[UserBadge]:
        """Get a user's badges with their definitions, newest first."""
        badges = []
        async for doc in self.collection.find({"user_id": user_id}).sort("earned_at", -1):
            badges.append(UserBadge.from_doc(doc))
        return badges

    async def check_review_milestones(self, user_id: str) -> list[BadgeType]:
        """Award every review milestone the user has reached."""
        review_count = await self.db.media_reviews.count_documents({"user_id": user_id})
        awarded = []
        for threshold, badge_type in REVIEW_MILESTONES:
            if review_count < threshold:
                break
            badge = await self.award_badge(
                user_id, badge_type, metadata=json.dumps({"count": review_count})
            )
            if badge:
                awarded.append(badge_type)
        return awarded

    async def reconcile(self, badge_type: BadgeType, compute_leader: LeaderFn) -> ReconcileResult:
        """Make the current leader the only holder of ``badge_type``.

        Does nothing when there is no leader. Otherwise every other holder
        loses the badge and the leader is awarded it if not already held.
        """
        leader = await compute_leader()
        if leader is None:
            logger.info(f"No qualifying events for {badge_type.value}, leaving holders unchanged")
            return ReconcileResult(badge_type=badge_type)

        result = ReconcileResult(
            badge_type=badge_type,
            leader_id=leader.user_id,
            leader_count=leader.count,
        )

        for holder in await self.get_badge_holders(badge_type):
            if holder != leader.user_id and await self.revoke_badge(holder, badge_type):
                result.revoked.append(holder)

        badge = await self.award_badge(
            leader.user_id, badge_type, metadata=json.dumps({"count": leader.count})
        )
        result.awarded = badge is not None
        if badge:
            logger.info(
                f"{badge_type.value} awarded to {leader.user_id} with {leader.count} qualifying events"
            )
        return result

    async def delete_user_badges(self, user_id: str) -> int:
        result = await self.collection.delete_many({"user_id": user_id})
        return result.deleted_count

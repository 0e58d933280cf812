"""User removal with cascade over deletion, badge and review data."""

import logging
from motor.motor_asyncio import AsyncIOMotorDatabase

from mediavote.errors import NotFoundError
from mediavote.services.badges import BadgeService
from mediavote.services.deletion import DeletionService
from mediavote.services.reviews import ReviewService
from mediavote.services.voting import VotingService

logger = logging.getLogger(__name__)


class UserService:
    """Service for removing users and everything they own."""

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        lifecycle: DeletionService | None = None,
    ):
        self.db = db
        self.lifecycle = lifecycle or DeletionService(db)
        self.voting = VotingService(db, self.lifecycle)
        self.badges = BadgeService(db)
        self.reviews = ReviewService(db)

    async def delete_user(self, user_id: str) -> dict[str, int]:
        """Delete a user.

        The user's own requests go first, with their votes. Votes the user
        cast on other requests are then withdrawn one by one so those
        requests' counters stay accurate.
        """
        if not await self.db.users.find_one({"user_id": user_id}):
            raise NotFoundError("User not found")

        summary = {
            "requests": await self.lifecycle.delete_requests_by_user(user_id),
            "votes": await self.voting.remove_user_votes(user_id),
            "badges": await self.badges.delete_user_badges(user_id),
            "reviews": await self.reviews.delete_user_reviews(user_id),
        }
        await self.db.sessions.delete_many({"user_id": user_id})
        await self.db.users.delete_one({"user_id": user_id})

        logger.info(f"Deleted user {user_id}: {summary}")
        return summary

"""Review service: the qualifying events for reviewer badges."""

from datetime import datetime
from typing import Callable
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from mediavote.models.review import Leader, MediaReview, MediaReviewCreate
from mediavote.utils.helpers import utcnow


class ReviewService:
    """Service for media reviews."""

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        clock: Callable[[], datetime] | None = None,
    ):
        self.db = db
        self.collection = db.media_reviews
        self.clock = clock or utcnow

    async def add_review(self, user_id: str, review_data: MediaReviewCreate) -> MediaReview:
        """Write a review. Each user reviews a media item once."""
        review_doc = {
            "user_id": user_id,
            "media_id": review_data.media_id,
            "media_type": review_data.media_type.value,
            "rating": review_data.rating,
            "content": review_data.content,
            "created_at": self.clock(),
        }

        try:
            result = await self.collection.insert_one(review_doc)
        except DuplicateKeyError:
            raise ValueError("You have already reviewed this media")

        review_doc["_id"] = str(result.inserted_id)
        return MediaReview(**review_doc)

    async def count_user_reviews(self, user_id: str) -> int:
        return await self.collection.count_documents({"user_id": user_id})

    async def get_user_reviews(self, user_id: str, limit: int = 50, skip: int = 0) -> list[MediaReview]:
        """Get a user's reviews, most recent first."""
        reviews = []
        cursor = self.collection.find({"user_id": user_id}).sort("created_at", -1).skip(skip).limit(limit)
        async for doc in cursor:
            doc["_id"] = str(doc["_id"])
            reviews.append(MediaReview(**doc))
        return reviews

    async def aggregate_leader(self, window_start: datetime) -> Leader | None:
        """User with the most reviews written since ``window_start``.

        Ties go to the lowest user id so repeated runs agree.
        """
        pipeline = [
            {"$match": {"created_at": {"$gte": window_start}}},
            {"$group": {"_id": "$user_id", "count": {"$sum": 1}}},
            {"$sort": {"count": -1, "_id": 1}},
            {"$limit": 1},
        ]

        async for doc in self.collection.aggregate(pipeline):
            if doc["count"] > 0:
                return Leader(user_id=doc["_id"], count=doc["count"])
        return None

    async def delete_user_reviews(self, user_id: str) -> int:
        result = await self.collection.delete_many({"user_id": user_id})
        return result.deleted_count

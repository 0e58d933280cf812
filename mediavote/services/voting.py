"""Voting service for deletion requests with atomic counter updates."""

import logging
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from mediavote.errors import NotFoundError, VotingClosedError, translate_store_errors
from mediavote.models.deletion import DeletionRequest, DeletionVote
from mediavote.services.deletion import DeletionService, to_object_id
from mediavote.tally import Decision, early_decision

logger = logging.getLogger(__name__)


def _bucket(vote: bool) -> str:
    return "votes_for" if vote else "votes_against"


def counter_delta(previous: bool | None, vote: bool) -> dict[str, int]:
    """Counter increments for moving a user's vote from ``previous`` to ``vote``."""
    if previous is None:
        return {_bucket(vote): 1}
    if previous == vote:
        return {}
    return {_bucket(vote): 1, _bucket(previous): -1}


class VotingService:
    """Service for casting and removing deletion votes.

    A unique (deletion_request_id, user_id) index keeps one vote per user.
    The vote upsert returns the previous value atomically, and the counters
    are moved with ``$inc``, so concurrent votes on the same request never
    lose an increment.
    """

    def __init__(self, db: AsyncIOMotorDatabase, lifecycle: DeletionService | None = None):
        self.db = db
        self.votes_collection = db.deletion_votes
        self.requests_collection = db.deletion_requests
        self.lifecycle = lifecycle or DeletionService(db)

    @property
    def clock(self):
        return self.lifecycle.clock

    async def _get_request(self, request_id: str) -> DeletionRequest:
        doc = await self.requests_collection.find_one({"_id": to_object_id(request_id)})
        if not doc:
            raise NotFoundError()
        return DeletionRequest.from_doc(doc)

    async def _upsert_vote(self, request_oid: ObjectId, user_id: str, vote: bool) -> dict | None:
        """Insert or update the vote row, returning the row as it was before."""
        for attempt in range(2):
            try:
                return await self.votes_collection.find_one_and_update(
                    {"deletion_request_id": request_oid, "user_id": user_id},
                    {
                        "$set": {"vote": vote},
                        "$setOnInsert": {"created_at": self.clock()},
                    },
                    upsert=True,
                    return_document=ReturnDocument.BEFORE,
                )
            except DuplicateKeyError:
                # Two concurrent first votes by the same user; the retry updates.
                if attempt:
                    raise
        return None

    async def _apply_delta(self, request_oid: ObjectId, delta: dict[str, int]) -> None:
        await self.requests_collection.update_one(
            {"_id": request_oid},
            {"$inc": delta, "$set": {"updated_at": self.clock()}},
        )

    async def _restore_vote_row(self, query: dict, previous: dict | None) -> None:
        """Put a vote row back the way it was after a failed counter update."""
        try:
            if previous is None:
                await self.votes_collection.delete_one(query)
            else:
                await self.votes_collection.replace_one(query, previous, upsert=True)
        except PyMongoError as e:
            logger.error(
                f"Could not restore vote row {query} after a failed counter update; "
                f"recount the request to repair it: {e}"
            )

    @translate_store_errors
    async def cast_vote(self, request_id: str, user_id: str, vote: bool) -> DeletionVote:
        """Cast or change a vote. True votes for deletion, False to keep.

        Re-casting the same value changes nothing; flipping moves one unit
        from the old bucket to the new one.
        """
        request = await self._get_request(request_id)
        if not request.is_voting_active_at(self.clock()):
            raise VotingClosedError()

        request_oid = ObjectId(request.id)
        query = {"deletion_request_id": request_oid, "user_id": user_id}
        previous = await self._upsert_vote(request_oid, user_id, vote)
        delta = counter_delta(previous["vote"] if previous else None, vote)

        if delta:
            try:
                await self._apply_delta(request_oid, delta)
            except PyMongoError:
                await self._restore_vote_row(query, previous)
                raise
            logger.info(
                f"Vote {'cast' if previous is None else 'changed'} on deletion request "
                f"{request_id} by {user_id}: {'for' if vote else 'against'}"
            )
            if self.lifecycle.settings.eager_resolution:
                await self._resolve_if_decided(request_id)

        vote_doc = await self.votes_collection.find_one(query)
        return DeletionVote.from_doc(vote_doc)

    @translate_store_errors
    async def remove_vote(self, request_id: str, user_id: str) -> None:
        """Withdraw a user's vote while voting is still open."""
        request = await self._get_request(request_id)
        request_oid = ObjectId(request.id)
        query = {"deletion_request_id": request_oid, "user_id": user_id}

        if not await self.votes_collection.find_one(query):
            raise NotFoundError("Vote not found")
        if not request.is_voting_active_at(self.clock()):
            raise VotingClosedError("Cannot remove vote from a closed deletion request")

        deleted = await self.votes_collection.find_one_and_delete(query)
        if deleted is None:
            raise NotFoundError("Vote not found")

        try:
            await self._apply_delta(request_oid, {_bucket(deleted["vote"]): -1})
        except PyMongoError:
            await self._restore_vote_row(query, deleted)
            raise
        logger.info(f"Vote removed from deletion request {request_id} by {user_id}")

    async def _resolve_if_decided(self, request_id: str) -> None:
        """Resolve ahead of the window close when no remaining vote can change the outcome."""
        request = await self._get_request(request_id)
        user_count = await self.db.users.count_documents({})
        eligible = max(user_count, request.total_votes) if user_count else None

        decision = early_decision(
            request.votes_for,
            request.votes_against,
            self.lifecycle.settings.required_vote_percentage,
            eligible_voters=eligible,
        )
        if decision != Decision.UNDECIDED:
            logger.info(f"Deletion request {request_id} decided early ({decision.value})")
            await self.lifecycle.resolve(request_id)

    @translate_store_errors
    async def get_vote(self, request_id: str, user_id: str) -> DeletionVote | None:
        """Get a user's vote on a request."""
        if not ObjectId.is_valid(request_id):
            return None

        vote_doc = await self.votes_collection.find_one({
            "deletion_request_id": ObjectId(request_id),
            "user_id": user_id,
        })
        return DeletionVote.from_doc(vote_doc) if vote_doc else None

    @translate_store_errors
    async def get_request_votes(self, request_id: str) -> list[DeletionVote]:
        """Get all votes for a request."""
        if not ObjectId.is_valid(request_id):
            return []

        votes = []
        cursor = self.votes_collection.find(
            {"deletion_request_id": ObjectId(request_id)}
        ).sort("created_at", 1)
        async for vote_doc in cursor:
            votes.append(DeletionVote.from_doc(vote_doc))
        return votes

    @translate_store_errors
    async def remove_user_votes(self, user_id: str) -> int:
        """Delete every vote by a user, keeping the parent counters in step.

        Counters are decremented on decided requests too, so the stored
        tally of an approved, rejected or completed request always matches
        its remaining vote rows. The decision itself is never revisited.
        """
        removed = 0
        vote_ids = await self.votes_collection.distinct("_id", {"user_id": user_id})
        for vote_id in vote_ids:
            query = {"_id": vote_id}
            deleted = await self.votes_collection.find_one_and_delete(query)
            if deleted is None:
                continue
            try:
                await self._apply_delta(deleted["deletion_request_id"], {_bucket(deleted["vote"]): -1})
            except PyMongoError:
                await self._restore_vote_row(query, deleted)
                raise
            removed += 1
        return removed

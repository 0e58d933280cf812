"""Deletion request lifecycle.

Owns every status transition of a deletion request:

    pending -> voting -> approved | rejected
    approved -> completed
    pending | voting -> cancelled

``resolve`` is the only place an outcome is decided, whether it is called by
the expired-vote sweeper or by an early decisive vote. Transitions are
conditional updates on the current status, so a request that has already
left ``voting`` is never processed twice. Executing an approved request
first sets an ``execution_claim`` on it, so the media deleter runs for at
most one caller at a time; a failed deletion clears the claim again.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Callable
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from mediavote.config import DeletionSettings, get_settings
from mediavote.errors import (
    DuplicateRequestError,
    ForbiddenError,
    InvalidStateError,
    MediaDeletionError,
    NotFoundError,
    StoreFailure,
    translate_store_errors,
)
from mediavote.models.auth import AuthUser, Permission
from mediavote.models.deletion import (
    OPEN_STATUSES,
    DeletionRequest,
    DeletionRequestCreate,
    DeletionRequestPage,
    DeletionRequestStatus,
    MediaType,
    PageInfo,
)
from mediavote.services.auth import has_permission
from mediavote.services.media_deletion import LibraryMediaDeleter, MediaDeleter
from mediavote.tally import Decision, decide, percentage
from mediavote.utils.helpers import utcnow

logger = logging.getLogger(__name__)

# Attempts at the optimistic status update before giving up on a request
MAX_RESOLVE_ATTEMPTS = 5


def to_object_id(request_id: str) -> ObjectId:
    if not ObjectId.is_valid(request_id):
        raise NotFoundError()
    return ObjectId(request_id)


class DeletionService:
    """Service for the deletion request state machine."""

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        settings: DeletionSettings | None = None,
        media_deleter: MediaDeleter | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.db = db
        self.collection = db.deletion_requests
        self.votes_collection = db.deletion_votes
        self.settings = settings or get_settings().deletion()
        self.media_deleter = media_deleter or LibraryMediaDeleter(db)
        self.clock = clock or utcnow

    async def _find(self, request_id: str) -> dict:
        doc = await self.collection.find_one({"_id": to_object_id(request_id)})
        if not doc:
            raise NotFoundError()
        return doc

    @translate_store_errors
    async def get_request(self, request_id: str) -> DeletionRequest:
        """Get a deletion request by ID."""
        return DeletionRequest.from_doc(await self._find(request_id))

    @translate_store_errors
    async def list_requests(
        self,
        status: DeletionRequestStatus | None = None,
        take: int = 20,
        skip: int = 0,
    ) -> DeletionRequestPage:
        """List deletion requests, newest first."""
        query = {"status": status.value} if status else {}
        total = await self.collection.count_documents(query)

        results = []
        cursor = self.collection.find(query).sort("created_at", -1).skip(skip).limit(take)
        async for doc in cursor:
            results.append(DeletionRequest.from_doc(doc))

        return DeletionRequestPage(
            page_info=PageInfo(
                pages=math.ceil(total / take) if take else 0,
                page_size=take,
                results=total,
                page=(skip // take) + 1 if take else 1,
            ),
            results=results,
        )

    @translate_store_errors
    async def find_open_request(
        self,
        media_id: int,
        media_type: MediaType,
    ) -> DeletionRequest | None:
        """Find the pending or voting request for a media item, if any."""
        doc = await self.collection.find_one({
            "media_id": media_id,
            "media_type": media_type.value,
            "status": {"$in": [s.value for s in OPEN_STATUSES]},
        })
        return DeletionRequest.from_doc(doc) if doc else None

    @translate_store_errors
    async def create_request(
        self,
        data: DeletionRequestCreate,
        requested_by: AuthUser,
    ) -> DeletionRequest:
        """Open a deletion request and start its voting window.

        The request goes straight to VOTING; PENDING is never entered here.
        """
        if not self.settings.enabled:
            raise ForbiddenError("Deletion feature is not enabled")

        if not (
            self.settings.allow_non_admin_requests
            or has_permission(requested_by, Permission.MANAGE_REQUESTS)
        ):
            raise ForbiddenError("You do not have permission to request media deletion")

        existing = await self.find_open_request(data.media_id, data.media_type)
        if existing:
            raise DuplicateRequestError(existing.id)

        now = self.clock()
        request_doc = {
            "media_id": data.media_id,
            "media_type": data.media_type.value,
            "tmdb_id": data.tmdb_id,
            "title": data.title or "Unknown",
            "poster_path": data.poster_path or None,
            "status": DeletionRequestStatus.VOTING.value,
            "reason": data.reason or None,
            "requested_by": requested_by.user_id,
            "voting_ends_at": now + timedelta(hours=self.settings.voting_duration_hours),
            "votes_for": 0,
            "votes_against": 0,
            "processed_at": None,
            "processed_by": None,
            "executed_at": None,
            "executed_by": None,
            "execution_claim": None,
            "created_at": now,
            "updated_at": now,
        }

        result = await self.collection.insert_one(request_doc)
        request_doc["_id"] = result.inserted_id

        logger.info(
            f"Deletion request {result.inserted_id} created for {data.media_type.value} "
            f"\"{request_doc['title']}\" ({data.tmdb_id}) by {requested_by.user_id}"
        )
        return DeletionRequest.from_doc(request_doc)

    @translate_store_errors
    async def resolve(self, request_id: str) -> DeletionRequest:
        """Close voting and apply the approval threshold.

        A request that is no longer voting is returned unchanged. The status
        update only matches the tally it was decided on; if a vote lands in
        between, the decision is recomputed.
        """
        oid = to_object_id(request_id)

        for _ in range(MAX_RESOLVE_ATTEMPTS):
            doc = await self._find(request_id)
            if doc["status"] != DeletionRequestStatus.VOTING.value:
                logger.debug(f"Deletion request {request_id} already {doc['status']}, skipping")
                return DeletionRequest.from_doc(doc)

            votes_for = doc.get("votes_for", 0)
            votes_against = doc.get("votes_against", 0)
            decision = decide(votes_for, votes_against, self.settings.required_vote_percentage)
            now = self.clock()

            updated = await self.collection.find_one_and_update(
                {
                    "_id": oid,
                    "status": DeletionRequestStatus.VOTING.value,
                    "votes_for": votes_for,
                    "votes_against": votes_against,
                },
                {
                    "$set": {
                        "status": decision.value,
                        "processed_at": now,
                        "processed_by": None,
                        "updated_at": now,
                    }
                },
                return_document=ReturnDocument.AFTER,
            )
            if updated is None:
                continue

            logger.info(
                f"Deletion request {request_id} ({doc['title']}) {decision.value}: "
                f"{percentage(votes_for, votes_against):.1f}% for deletion "
                f"({votes_for} for, {votes_against} against, "
                f"{self.settings.required_vote_percentage}% required)"
            )

            if decision == Decision.APPROVED and self.settings.auto_delete_on_approval:
                return await self._auto_delete(updated)
            return DeletionRequest.from_doc(updated)

        raise StoreFailure(f"Could not resolve deletion request {request_id}: tally kept changing")

    async def _auto_delete(self, doc: dict) -> DeletionRequest:
        """Execute an approved request; on failure it stays APPROVED."""
        try:
            return await self._execute(doc, executed_by=None)
        except MediaDeletionError as e:
            logger.error(
                f"Auto-deletion failed for deletion request {doc['_id']} ({doc['title']}), "
                f"left approved for manual follow-up: {e}"
            )
            return DeletionRequest.from_doc(doc)
        except InvalidStateError:
            logger.info(f"Deletion request {doc['_id']} is already being executed, skipping auto-deletion")
            return DeletionRequest.from_doc(await self._find(str(doc["_id"])))

    async def _delete_media(self, doc: dict) -> None:
        media_type = MediaType(doc["media_type"])
        try:
            deleted = await self.media_deleter.delete_media(doc["media_id"], media_type)
        except Exception as e:
            raise MediaDeletionError(
                f"Media deletion failed for {media_type.value}/{doc['media_id']}: {e}"
            ) from e
        if not deleted:
            raise MediaDeletionError(
                f"Media deletion was refused for {media_type.value}/{doc['media_id']}"
            )

    async def _claim_execution(self, doc: dict) -> ObjectId:
        """Mark an approved request as being executed; only one caller wins."""
        claim = ObjectId()
        claimed = await self.collection.find_one_and_update(
            {
                "_id": doc["_id"],
                "status": DeletionRequestStatus.APPROVED.value,
                "execution_claim": None,
            },
            {"$set": {"execution_claim": claim, "updated_at": self.clock()}},
        )
        if claimed is None:
            current = await self._find(str(doc["_id"]))
            if current["status"] == DeletionRequestStatus.APPROVED.value:
                raise InvalidStateError("Deletion of this request is already in progress")
            raise InvalidStateError("Request must be approved before deletion")
        return claim

    async def _release_execution(self, doc: dict, claim: ObjectId) -> None:
        await self.collection.update_one(
            {"_id": doc["_id"], "execution_claim": claim},
            {"$set": {"execution_claim": None}},
        )

    async def _execute(self, doc: dict, executed_by: str | None) -> DeletionRequest:
        claim = await self._claim_execution(doc)
        try:
            await self._delete_media(doc)
        except MediaDeletionError:
            await self._release_execution(doc, claim)
            raise

        now = self.clock()
        updated = await self.collection.find_one_and_update(
            {"_id": doc["_id"], "execution_claim": claim},
            {
                "$set": {
                    "status": DeletionRequestStatus.COMPLETED.value,
                    "execution_claim": None,
                    "executed_at": now,
                    "executed_by": executed_by,
                    "updated_at": now,
                }
            },
            return_document=ReturnDocument.AFTER,
        )
        if updated is None:
            raise StoreFailure(f"Lost the execution claim on deletion request {doc['_id']}")

        logger.info(
            f"Deletion request {doc['_id']} ({doc['title']}) completed"
            + (f" by {executed_by}" if executed_by else " automatically")
        )
        return DeletionRequest.from_doc(updated)

    @translate_store_errors
    async def execute_deletion(self, request_id: str, executed_by: AuthUser) -> DeletionRequest:
        """Delete the media of an approved request (admin)."""
        if not has_permission(executed_by, Permission.MANAGE_REQUESTS):
            raise ForbiddenError("Only admins can execute media deletion")

        doc = await self._find(request_id)
        if doc["status"] != DeletionRequestStatus.APPROVED.value:
            raise InvalidStateError("Request must be approved before deletion")

        return await self._execute(doc, executed_by=executed_by.user_id)

    @translate_store_errors
    async def cancel(self, request_id: str, cancelled_by: AuthUser) -> DeletionRequest:
        """Cancel a pending or voting request (requester or admin)."""
        doc = await self._find(request_id)

        is_requester = doc["requested_by"] == cancelled_by.user_id
        if not is_requester and not has_permission(cancelled_by, Permission.MANAGE_REQUESTS):
            raise ForbiddenError("Only the requester or an admin can cancel this deletion request")

        if doc["status"] not in [s.value for s in OPEN_STATUSES]:
            raise InvalidStateError(f"Cannot cancel a {doc['status']} request")

        now = self.clock()
        updated = await self.collection.find_one_and_update(
            {"_id": doc["_id"], "status": {"$in": [s.value for s in OPEN_STATUSES]}},
            {
                "$set": {
                    "status": DeletionRequestStatus.CANCELLED.value,
                    "processed_at": now,
                    "processed_by": cancelled_by.user_id,
                    "updated_at": now,
                }
            },
            return_document=ReturnDocument.AFTER,
        )
        if updated is None:
            raise InvalidStateError("Request left voting before it could be cancelled")

        logger.info(f"Deletion request {request_id} cancelled by {cancelled_by.user_id}")
        return DeletionRequest.from_doc(updated)

    @translate_store_errors
    async def find_expired_voting_requests(self, now: datetime | None = None) -> list[DeletionRequest]:
        """Voting requests whose window closed before ``now``."""
        now = now or self.clock()
        requests = []
        cursor = self.collection.find({
            "status": DeletionRequestStatus.VOTING.value,
            "voting_ends_at": {"$lt": now},
        }).sort("voting_ends_at", 1)
        async for doc in cursor:
            requests.append(DeletionRequest.from_doc(doc))
        return requests

    @translate_store_errors
    async def recount_from_votes(self, request_id: str) -> DeletionRequest:
        """Rebuild the denormalized counters from the vote records."""
        doc = await self._find(request_id)

        pipeline = [
            {"$match": {"deletion_request_id": doc["_id"]}},
            {"$group": {"_id": "$vote", "count": {"$sum": 1}}},
        ]
        counts = {True: 0, False: 0}
        async for row in self.votes_collection.aggregate(pipeline):
            counts[bool(row["_id"])] = row["count"]

        if (doc.get("votes_for", 0), doc.get("votes_against", 0)) != (counts[True], counts[False]):
            logger.warning(
                f"Vote counter drift on deletion request {request_id}: "
                f"stored {doc.get('votes_for', 0)}/{doc.get('votes_against', 0)}, "
                f"recounted {counts[True]}/{counts[False]}"
            )

        updated = await self.collection.find_one_and_update(
            {"_id": doc["_id"]},
            {"$set": {"votes_for": counts[True], "votes_against": counts[False]}},
            return_document=ReturnDocument.AFTER,
        )
        return DeletionRequest.from_doc(updated)

    @translate_store_errors
    async def delete_requests_by_user(self, user_id: str) -> int:
        """Remove a user's requests together with their votes."""
        request_ids = await self.collection.distinct("_id", {"requested_by": user_id})
        if not request_ids:
            return 0
        await self.votes_collection.delete_many({"deletion_request_id": {"$in": request_ids}})
        result = await self.collection.delete_many({"_id": {"$in": request_ids}})
        return result.deleted_count

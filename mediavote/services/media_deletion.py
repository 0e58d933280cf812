"""Media deletion collaborators.

The lifecycle only needs ``delete_media(media_id, media_type) -> bool``;
removing files from download managers or disk is the job of whatever
implementation the host wires in.
"""

import logging
from typing import Protocol
from motor.motor_asyncio import AsyncIOMotorDatabase

from mediavote.models.deletion import MediaType

logger = logging.getLogger(__name__)


class MediaDeleter(Protocol):
    """Removes a media item from the library."""

    async def delete_media(self, media_id: int, media_type: MediaType) -> bool:
        ...


class LibraryMediaDeleter:
    """Removes the media record from the library collection.

    A record that is already gone counts as deleted.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db.media

    async def delete_media(self, media_id: int, media_type: MediaType) -> bool:
        result = await self.collection.delete_one({
            "_id": media_id,
            "media_type": media_type.value,
        })
        if result.deleted_count == 0:
            logger.warning(
                f"Media {media_type.value}/{media_id} not found in library, treating as deleted"
            )
        else:
            logger.info(f"Media {media_type.value}/{media_id} removed from library")
        return True

"""MongoDB database connection and setup."""

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import IndexModel, ASCENDING, DESCENDING
from typing import AsyncGenerator
import logging
import certifi

from mediavote.config import get_settings

logger = logging.getLogger(__name__)


class Database:
    """MongoDB database manager."""

    client: AsyncIOMotorClient | None = None
    db: AsyncIOMotorDatabase | None = None

    @classmethod
    async def connect(cls) -> None:
        """Connect to MongoDB and set up indexes."""
        settings = get_settings()

        client_options: dict = {
            "serverSelectionTimeoutMS": 30000,
            "connectTimeoutMS": 20000,
            "socketTimeoutMS": 20000,
        }

        # Force CA bundle usage on hosted clusters to avoid TLS trust issues.
        if settings.mongodb_url.startswith("mongodb+srv://"):
            client_options["tls"] = True
            client_options["tlsCAFile"] = certifi.where()

        cls.client = AsyncIOMotorClient(settings.mongodb_url, **client_options)
        cls.db = cls.client[settings.mongodb_database]

        # Verify connectivity before proceeding to index creation.
        await cls.client.admin.command("ping")
        logger.info(f"Connected to MongoDB database: {settings.mongodb_database}")
        await cls.create_indexes()

    @classmethod
    async def disconnect(cls) -> None:
        """Disconnect from MongoDB."""
        if cls.client:
            cls.client.close()
            cls.client = None
            cls.db = None
            logger.info("Disconnected from MongoDB")

    @classmethod
    async def create_indexes(cls) -> None:
        """Create necessary indexes for all collections."""
        if cls.db is None:
            raise RuntimeError("Database not connected")

        await cls.db.deletion_requests.create_indexes([
            IndexModel([("status", ASCENDING), ("voting_ends_at", ASCENDING)]),
            IndexModel([
                ("media_id", ASCENDING),
                ("media_type", ASCENDING),
                ("status", ASCENDING),
            ]),
            IndexModel([("tmdb_id", ASCENDING)]),
            IndexModel([("created_at", DESCENDING)]),
            IndexModel([("requested_by", ASCENDING)]),
        ])

        # One vote per user per request
        await cls.db.deletion_votes.create_indexes([
            IndexModel(
                [("deletion_request_id", ASCENDING), ("user_id", ASCENDING)],
                unique=True,
                name="request_user_unique",
            ),
            IndexModel([("user_id", ASCENDING)], name="vote_user_lookup"),
        ])

        await cls.db.user_badges.create_indexes([
            IndexModel(
                [("user_id", ASCENDING), ("badge_type", ASCENDING)],
                unique=True,
                name="user_badge_unique",
            ),
            IndexModel([("badge_type", ASCENDING)]),
        ])

        await cls.db.media_reviews.create_indexes([
            IndexModel([("created_at", DESCENDING), ("user_id", ASCENDING)]),
            IndexModel(
                [("user_id", ASCENDING), ("media_id", ASCENDING), ("media_type", ASCENDING)],
                unique=True,
                name="user_media_review_unique",
            ),
        ])

        await cls.db.users.create_indexes([
            IndexModel([("user_id", ASCENDING)], unique=True),
        ])

        await cls.db.sessions.create_indexes([
            IndexModel([("token", ASCENDING)], unique=True),
            IndexModel([("expires_at", ASCENDING)], expireAfterSeconds=0),
            IndexModel([("user_id", ASCENDING)]),
        ])

        logger.info("Database indexes created successfully")

    @classmethod
    def get_db(cls) -> AsyncIOMotorDatabase:
        """Get the database instance."""
        if cls.db is None:
            raise RuntimeError("Database not connected. Call Database.connect() first.")
        return cls.db


async def get_database() -> AsyncGenerator[AsyncIOMotorDatabase, None]:
    """Dependency for getting database instance."""
    yield Database.get_db()

"""Pytest configuration and fixtures for MediaVote tests."""

import os
from datetime import datetime, timedelta
from typing import AsyncGenerator
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from motor.motor_asyncio import AsyncIOMotorDatabase

# Set test environment before importing app modules
if os.environ.get("TEST_MONGODB_URL"):
    os.environ["MONGODB_URL"] = os.environ["TEST_MONGODB_URL"]
os.environ["MONGODB_DATABASE"] = "mediavote_test"
os.environ["TMDB_API_KEY"] = ""
os.environ["SCHEDULER_ENABLED"] = "false"

from mediavote.config import DeletionSettings
from mediavote.database import Database
from mediavote.main import app
from mediavote.models.auth import AuthUser, Permission, UserCreate
from mediavote.models.deletion import DeletionRequestCreate, MediaType
from mediavote.services.auth import AuthService
from mediavote.services.badges import BadgeService
from mediavote.services.deletion import DeletionService
from mediavote.services.reviews import ReviewService
from mediavote.services.voting import VotingService

COLLECTIONS = [
    "deletion_requests",
    "deletion_votes",
    "user_badges",
    "media_reviews",
    "media",
    "users",
    "sessions",
]


class FakeClock:
    """Settable clock returning naive UTC datetimes."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class RecordingDeleter:
    """Media deleter that records calls and can be told to fail."""

    def __init__(self):
        self.deleted: list[tuple[int, MediaType]] = []
        self.fail = False

    async def delete_media(self, media_id: int, media_type: MediaType) -> bool:
        if self.fail:
            raise RuntimeError("library unavailable")
        self.deleted.append((media_id, media_type))
        return True


@pytest_asyncio.fixture(scope="function")
async def db() -> AsyncGenerator[AsyncIOMotorDatabase, None]:
    """Get test database and clean up after each test.

    Runs against the MongoDB at TEST_MONGODB_URL when set, otherwise
    against an in-memory mongomock database.
    """
    if os.environ.get("TEST_MONGODB_URL"):
        await Database.connect()
    else:
        from mongomock_motor import AsyncMongoMockClient

        Database.client = AsyncMongoMockClient()
        Database.db = Database.client["mediavote_test"]
        await Database.create_indexes()

    database = Database.get_db()

    yield database

    for name in COLLECTIONS:
        await database[name].delete_many({})

    if os.environ.get("TEST_MONGODB_URL"):
        await Database.disconnect()
    else:
        Database.client = None
        Database.db = None


@pytest_asyncio.fixture
async def client(db: AsyncIOMotorDatabase) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for API testing."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def clock() -> FakeClock:
    """Clock fixed at a whole second so stored datetimes compare exactly."""
    return FakeClock(datetime(2026, 3, 14, 12, 0, 0))


@pytest.fixture
def deletion_settings() -> DeletionSettings:
    return DeletionSettings()


@pytest.fixture
def media_deleter() -> RecordingDeleter:
    return RecordingDeleter()


@pytest_asyncio.fixture
async def deletion_service(
    db: AsyncIOMotorDatabase,
    deletion_settings: DeletionSettings,
    media_deleter: RecordingDeleter,
    clock: FakeClock,
) -> DeletionService:
    """Create deletion lifecycle service for testing."""
    return DeletionService(db, deletion_settings, media_deleter=media_deleter, clock=clock)


@pytest_asyncio.fixture
async def voting_service(db: AsyncIOMotorDatabase, deletion_service: DeletionService) -> VotingService:
    """Create voting service sharing the lifecycle's settings and clock."""
    return VotingService(db, deletion_service)


@pytest_asyncio.fixture
async def badge_service(db: AsyncIOMotorDatabase, clock: FakeClock) -> BadgeService:
    return BadgeService(db, clock=clock)


@pytest_asyncio.fixture
async def review_service(db: AsyncIOMotorDatabase, clock: FakeClock) -> ReviewService:
    return ReviewService(db, clock=clock)


@pytest_asyncio.fixture
async def auth_service(db: AsyncIOMotorDatabase) -> AuthService:
    return AuthService(db)


@pytest.fixture
def alice() -> AuthUser:
    return AuthUser(user_id="alice", display_name="Alice")


@pytest.fixture
def admin() -> AuthUser:
    return AuthUser(user_id="admin", display_name="Admin", permissions=[Permission.ADMIN])


@pytest.fixture
def inception() -> DeletionRequestCreate:
    return DeletionRequestCreate(
        media_id=101,
        media_type=MediaType.MOVIE,
        tmdb_id=27205,
        title="Inception",
        poster_path="/9gk7adHYeDvHkCSEqAvQNLV5Ber.jpg",
        reason="Nobody has watched it in a year",
    )


@pytest_asyncio.fixture
async def user_headers(auth_service: AuthService) -> dict[str, dict[str, str]]:
    """Registered users with live sessions, keyed by user id."""
    users = [
        UserCreate(user_id="alice", display_name="Alice"),
        UserCreate(user_id="bob", display_name="Bob"),
        UserCreate(user_id="charlie", display_name="Charlie"),
        UserCreate(user_id="admin", display_name="Admin", permissions=[Permission.ADMIN]),
    ]
    headers = {}
    for user in users:
        await auth_service.upsert_user(user)
        token, _ = await auth_service.create_session(user.user_id)
        headers[user.user_id] = {"X-Session-Token": token}
    return headers


@pytest.fixture
def mock_tmdb_movie_details():
    """Mock TMDB movie details response."""
    return {
        "id": 27205,
        "title": "Inception",
        "poster_path": "/9gk7adHYeDvHkCSEqAvQNLV5Ber.jpg",
        "release_date": "2010-07-16",
        "runtime": 148,
        "overview": "A thief who steals corporate secrets...",
    }


@pytest.fixture
def mock_tmdb_tv_details():
    """Mock TMDB TV details response."""
    return {
        "id": 1396,
        "name": "Breaking Bad",
        "poster_path": "/ggFHVNu6YYI5L9pCfOacjizRGt.jpg",
        "first_air_date": "2008-01-20",
    }

"""Session lookup and permission checks.

Identity is established by the host's sign-in flow; this service only
resolves session tokens to users and answers permission questions.
"""

import secrets
from datetime import datetime, timedelta
from motor.motor_asyncio import AsyncIOMotorDatabase

from mediavote.config import get_settings
from mediavote.models.auth import AuthUser, Permission, UserCreate
from mediavote.utils.helpers import utcnow


def has_permission(user: AuthUser, permission: Permission) -> bool:
    """Check a capability, treating ADMIN as holding every permission."""
    return Permission.ADMIN in user.permissions or permission in user.permissions


class AuthService:
    """Service for users and session management."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.users = db.users
        self.sessions = db.sessions

    async def upsert_user(self, user_data: UserCreate) -> AuthUser:
        """Create or update a user record."""
        now = utcnow()
        await self.users.update_one(
            {"user_id": user_data.user_id},
            {
                "$set": {
                    "display_name": user_data.display_name,
                    "permissions": [p.value for p in user_data.permissions],
                    "updated_at": now,
                },
                "$setOnInsert": {"created_at": now},
            },
            upsert=True,
        )
        return AuthUser(**user_data.model_dump())

    async def get_user(self, user_id: str) -> AuthUser | None:
        user_doc = await self.users.find_one({"user_id": user_id})
        if not user_doc:
            return None
        return AuthUser(
            user_id=user_doc["user_id"],
            display_name=user_doc.get("display_name"),
            permissions=user_doc.get("permissions", []),
        )

    async def count_users(self) -> int:
        return await self.users.count_documents({})

    async def create_session(self, user_id: str) -> tuple[str, datetime]:
        """Issue a session token for an existing user."""
        settings = get_settings()
        expires_at = utcnow() + timedelta(seconds=settings.auth_session_ttl_seconds)
        session_token = secrets.token_urlsafe(48)
        await self.sessions.insert_one(
            {
                "token": session_token,
                "user_id": user_id,
                "created_at": utcnow(),
                "expires_at": expires_at,
            }
        )
        return session_token, expires_at

    async def get_user_by_session(self, session_token: str) -> AuthUser | None:
        """Resolve authenticated user from app session token."""
        session_doc = await self.sessions.find_one({
            "token": session_token,
            "expires_at": {"$gt": utcnow()},
        })
        if not session_doc:
            return None
        return await self.get_user(session_doc["user_id"])

    async def logout(self, session_token: str) -> bool:
        """Invalidate a session token."""
        result = await self.sessions.delete_one({"token": session_token})
        return result.deleted_count > 0

"""Admin user management endpoints."""

from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from mediavote.database import get_database
from mediavote.errors import DeletionError
from mediavote.models.auth import AuthUser, Permission
from mediavote.routers.auth import require_permission
from mediavote.routers.errors import http_error
from mediavote.services.users import UserService

router = APIRouter(prefix="/users", tags=["users"])


def get_user_service(db: AsyncIOMotorDatabase = Depends(get_database)) -> UserService:
    """Dependency for user service."""
    return UserService(db)


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    user: AuthUser = Depends(require_permission(Permission.ADMIN)),
    service: UserService = Depends(get_user_service),
) -> dict[str, int]:
    """Delete a user with their requests, votes, badges and reviews."""
    try:
        return await service.delete_user(user_id)
    except DeletionError as e:
        raise http_error(e)

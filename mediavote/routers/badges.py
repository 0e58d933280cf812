"""Badge API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from mediavote.database import get_database
from mediavote.errors import DeletionError
from mediavote.models.auth import AuthUser, Permission
from mediavote.models.badge import BADGE_DEFINITIONS, BadgeAward, UserBadge
from mediavote.routers.auth import get_current_user, require_permission
from mediavote.routers.errors import http_error
from mediavote.services.badges import BadgeService

router = APIRouter(prefix="/badges", tags=["badges"])


def get_badge_service(db: AsyncIOMotorDatabase = Depends(get_database)) -> BadgeService:
    """Dependency for badge service."""
    return BadgeService(db)


@router.get("/definitions")
async def list_badge_definitions() -> list[dict]:
    """Get the badge catalogue."""
    return [
        {
            "type": definition.type.value,
            "display_name": definition.display_name,
            "description": definition.description,
            "icon": definition.icon,
            "category": definition.category.value,
        }
        for definition in BADGE_DEFINITIONS.values()
    ]


@router.get("/me", response_model=list[UserBadge])
async def get_my_badges(
    user: AuthUser = Depends(get_current_user),
    service: BadgeService = Depends(get_badge_service),
) -> list[UserBadge]:
    """Get the current user's badges, newest first."""
    return await service.get_user_badges(user.user_id)


@router.get("/users/{user_id}", response_model=list[UserBadge])
async def get_user_badges(
    user_id: str,
    service: BadgeService = Depends(get_badge_service),
) -> list[UserBadge]:
    """Get a user's badges, newest first."""
    return await service.get_user_badges(user_id)


@router.post("/award", response_model=UserBadge, status_code=status.HTTP_201_CREATED)
async def award_badge(
    award: BadgeAward,
    user: AuthUser = Depends(require_permission(Permission.MANAGE_BADGES)),
    service: BadgeService = Depends(get_badge_service),
) -> UserBadge:
    """Award a community badge to a user."""
    try:
        badge = await service.award_community_badge(award.user_id, award.badge_type, user)
    except DeletionError as e:
        raise http_error(e)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    if badge is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User already has this badge",
        )
    return badge

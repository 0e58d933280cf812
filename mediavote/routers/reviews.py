"""Media review API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from mediavote.database import get_database
from mediavote.models.auth import AuthUser
from mediavote.models.review import MediaReview, MediaReviewCreate
from mediavote.routers.auth import get_current_user
from mediavote.services.badges import BadgeService
from mediavote.services.reviews import ReviewService

router = APIRouter(prefix="/reviews", tags=["reviews"])


def get_review_service(db: AsyncIOMotorDatabase = Depends(get_database)) -> ReviewService:
    """Dependency for review service."""
    return ReviewService(db)


def get_badge_service(db: AsyncIOMotorDatabase = Depends(get_database)) -> BadgeService:
    """Dependency for badge service."""
    return BadgeService(db)


@router.post("", response_model=MediaReview, status_code=status.HTTP_201_CREATED)
async def create_review(
    review_data: MediaReviewCreate,
    user: AuthUser = Depends(get_current_user),
    reviews: ReviewService = Depends(get_review_service),
    badges: BadgeService = Depends(get_badge_service),
) -> MediaReview:
    """Write a review and award any review milestone reached."""
    try:
        review = await reviews.add_review(user.user_id, review_data)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    await badges.check_review_milestones(user.user_id)
    return review


@router.get("/users/{user_id}", response_model=list[MediaReview])
async def get_user_reviews(
    user_id: str,
    limit: int = Query(default=50, ge=1, le=100),
    skip: int = Query(default=0, ge=0),
    service: ReviewService = Depends(get_review_service),
) -> list[MediaReview]:
    """Get a user's reviews, most recent first."""
    return await service.get_user_reviews(user_id, limit=limit, skip=skip)

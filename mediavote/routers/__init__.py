"""API routers for MediaVote."""

from mediavote.routers.auth import router as auth_router
from mediavote.routers.badges import router as badges_router
from mediavote.routers.deletion import router as deletion_router
from mediavote.routers.jobs import router as jobs_router
from mediavote.routers.reviews import router as reviews_router
from mediavote.routers.users import router as users_router

__all__ = [
    "auth_router",
    "badges_router",
    "deletion_router",
    "jobs_router",
    "reviews_router",
    "users_router",
]

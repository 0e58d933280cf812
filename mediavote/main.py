"""FastAPI application entry point for MediaVote."""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from motor.motor_asyncio import AsyncIOMotorDatabase

from mediavote.config import Settings, get_settings
from mediavote.database import Database
from mediavote.jobs import (
    ExpiredVoteSweeper,
    JobScheduler,
    top_reviewer_month_job,
    top_reviewer_year_job,
)
from mediavote.routers import (
    auth_router,
    badges_router,
    deletion_router,
    jobs_router,
    reviews_router,
    users_router,
)
from mediavote.services.badges import BadgeService
from mediavote.services.deletion import DeletionService
from mediavote.services.reviews import ReviewService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def build_scheduler(db: AsyncIOMotorDatabase, settings: Settings) -> JobScheduler:
    """Register the application's background jobs."""
    scheduler = JobScheduler()
    scheduler.register(
        ExpiredVoteSweeper(
            DeletionService(db, settings.deletion()),
            interval_seconds=settings.deletion_sweep_interval_seconds,
        )
    )

    badges = BadgeService(db)
    reviews = ReviewService(db)
    scheduler.register(
        top_reviewer_month_job(badges, reviews, settings.badge_reconcile_interval_seconds)
    )
    scheduler.register(
        top_reviewer_year_job(badges, reviews, settings.badge_reconcile_interval_seconds)
    )
    return scheduler


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager.

    Handles startup and shutdown events.
    """
    settings = get_settings()

    # Startup
    logger.info("Starting MediaVote API...")
    await Database.connect()

    scheduler = build_scheduler(Database.get_db(), settings)
    app.state.scheduler = scheduler
    if settings.scheduler_enabled:
        scheduler.start_all()
    else:
        logger.info("Background job scheduler disabled")
    logger.info("MediaVote API started successfully")

    yield

    # Shutdown
    logger.info("Shutting down MediaVote API...")
    await scheduler.stop_all()
    await Database.disconnect()
    logger.info("MediaVote API shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Community voting on media deletion, with reviewer badges",
        version="1.0.0",
        lifespan=lifespan,
        debug=settings.debug,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(auth_router, prefix="/api")
    app.include_router(deletion_router, prefix="/api")
    app.include_router(badges_router, prefix="/api")
    app.include_router(reviews_router, prefix="/api")
    app.include_router(users_router, prefix="/api")
    app.include_router(jobs_router, prefix="/api")

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        try:
            # Check database connection
            db = Database.get_db()
            await db.command("ping")
            return {
                "status": "healthy",
                "database": "connected",
            }
        except Exception as e:
            return {
                "status": "unhealthy",
                "database": "disconnected",
                "error": str(e),
            }

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "mediavote.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )

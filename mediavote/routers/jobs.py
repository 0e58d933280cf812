"""Admin endpoints for background jobs."""

from fastapi import APIRouter, Depends, HTTPException, Request, status

from mediavote.errors import DeletionError
from mediavote.jobs.scheduler import JobScheduler
from mediavote.models.auth import AuthUser, Permission
from mediavote.models.job import ScheduledJob
from mediavote.routers.auth import require_permission
from mediavote.routers.errors import http_error

router = APIRouter(prefix="/admin/jobs", tags=["jobs"])


def get_scheduler(request: Request) -> JobScheduler:
    """Dependency for the scheduler owned by the application lifespan."""
    scheduler = getattr(request.app.state, "scheduler", None)
    if scheduler is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Job scheduler is not running",
        )
    return scheduler


@router.get("", response_model=list[ScheduledJob])
async def list_jobs(
    user: AuthUser = Depends(require_permission(Permission.ADMIN)),
    scheduler: JobScheduler = Depends(get_scheduler),
) -> list[ScheduledJob]:
    """List registered jobs with their progress."""
    return scheduler.list()


@router.post("/{job_id}/run")
async def run_job(
    job_id: str,
    user: AuthUser = Depends(require_permission(Permission.ADMIN)),
    scheduler: JobScheduler = Depends(get_scheduler),
) -> dict:
    """Run a job now and return its result."""
    try:
        result = await scheduler.run(job_id)
    except DeletionError as e:
        raise http_error(e)
    return {"job_id": job_id, "result": result.model_dump(mode="json") if result is not None else None}


@router.post("/{job_id}/cancel", response_model=ScheduledJob)
async def cancel_job(
    job_id: str,
    user: AuthUser = Depends(require_permission(Permission.ADMIN)),
    scheduler: JobScheduler = Depends(get_scheduler),
) -> ScheduledJob:
    """Ask a running job to stop."""
    try:
        return scheduler.cancel(job_id)
    except DeletionError as e:
        raise http_error(e)

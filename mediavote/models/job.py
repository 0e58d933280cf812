"""Background job status models."""

from pydantic import BaseModel, Field


class JobStatus(BaseModel):
    """Progress of a background job."""
    running: bool = False
    progress: int = 0
    total: int = 0


class ScheduledJob(BaseModel):
    """Registered background job as exposed to admins."""
    id: str
    name: str
    interval_seconds: int
    running: bool = False
    progress: int = 0
    total: int = 0


class SweepFailure(BaseModel):
    """A deletion request the sweeper could not resolve."""
    request_id: str
    title: str
    error: str


class SweepResult(BaseModel):
    """Summary of one sweep of expired voting windows."""
    disabled: bool = False
    skipped: bool = False
    cancelled: bool = False
    total: int = 0
    resolved: list[str] = Field(default_factory=list)
    failed: list[SweepFailure] = Field(default_factory=list)

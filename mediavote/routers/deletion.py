"""Deletion request API endpoints."""

from typing import AsyncGenerator
from fastapi import APIRouter, Depends, Query, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from mediavote.database import get_database
from mediavote.errors import DeletionError
from mediavote.models.auth import AuthUser, Permission
from mediavote.models.deletion import (
    DeletionRequest,
    DeletionRequestCreate,
    DeletionRequestPage,
    DeletionRequestStatus,
    DeletionVote,
    DeletionVoteCreate,
)
from mediavote.routers.auth import get_current_user, require_permission
from mediavote.routers.errors import http_error
from mediavote.services.deletion import DeletionService
from mediavote.services.external_api import TMDBClient
from mediavote.services.voting import VotingService

router = APIRouter(prefix="/deletion-requests", tags=["deletion"])


def get_deletion_service(db: AsyncIOMotorDatabase = Depends(get_database)) -> DeletionService:
    """Dependency for deletion lifecycle service."""
    return DeletionService(db)


def get_voting_service(
    db: AsyncIOMotorDatabase = Depends(get_database),
    lifecycle: DeletionService = Depends(get_deletion_service),
) -> VotingService:
    """Dependency for deletion voting service."""
    return VotingService(db, lifecycle)


async def get_tmdb_client() -> AsyncGenerator[TMDBClient, None]:
    """Dependency for a TMDB client closed after the request."""
    client = TMDBClient()
    try:
        yield client
    finally:
        await client.close()


@router.get("", response_model=DeletionRequestPage)
async def list_deletion_requests(
    filter_status: DeletionRequestStatus | None = Query(default=None, alias="status"),
    take: int = Query(default=20, ge=1, le=100),
    skip: int = Query(default=0, ge=0),
    user: AuthUser = Depends(get_current_user),
    service: DeletionService = Depends(get_deletion_service),
) -> DeletionRequestPage:
    """List deletion requests, newest first."""
    try:
        return await service.list_requests(filter_status, take=take, skip=skip)
    except DeletionError as e:
        raise http_error(e)


@router.post("", response_model=DeletionRequest, status_code=status.HTTP_201_CREATED)
async def create_deletion_request(
    request_data: DeletionRequestCreate,
    user: AuthUser = Depends(get_current_user),
    service: DeletionService = Depends(get_deletion_service),
    tmdb: TMDBClient = Depends(get_tmdb_client),
) -> DeletionRequest:
    """Open a deletion request and start its voting window.

    Title and poster are fetched from TMDB when the client does not send them.
    """
    if not request_data.title:
        title, poster_path = await tmdb.media_snapshot(request_data.tmdb_id, request_data.media_type)
        request_data = request_data.model_copy(
            update={"title": title, "poster_path": request_data.poster_path or poster_path}
        )

    try:
        return await service.create_request(request_data, user)
    except DeletionError as e:
        raise http_error(e)


@router.get("/{request_id}", response_model=DeletionRequest)
async def get_deletion_request(
    request_id: str,
    user: AuthUser = Depends(get_current_user),
    service: DeletionService = Depends(get_deletion_service),
) -> DeletionRequest:
    """Get a deletion request with its tally."""
    try:
        return await service.get_request(request_id)
    except DeletionError as e:
        raise http_error(e)


@router.post("/{request_id}/vote", response_model=DeletionVote)
async def cast_deletion_vote(
    request_id: str,
    vote_data: DeletionVoteCreate,
    user: AuthUser = Depends(get_current_user),
    service: VotingService = Depends(get_voting_service),
) -> DeletionVote:
    """Cast or change the current user's vote."""
    try:
        return await service.cast_vote(request_id, user.user_id, vote_data.vote)
    except DeletionError as e:
        raise http_error(e)


@router.delete("/{request_id}/vote", status_code=status.HTTP_204_NO_CONTENT)
async def remove_deletion_vote(
    request_id: str,
    user: AuthUser = Depends(get_current_user),
    service: VotingService = Depends(get_voting_service),
) -> None:
    """Withdraw the current user's vote."""
    try:
        await service.remove_vote(request_id, user.user_id)
    except DeletionError as e:
        raise http_error(e)


@router.get("/{request_id}/vote", response_model=DeletionVote | None)
async def get_my_deletion_vote(
    request_id: str,
    user: AuthUser = Depends(get_current_user),
    service: VotingService = Depends(get_voting_service),
) -> DeletionVote | None:
    """Get the current user's vote, or null when they have not voted."""
    try:
        return await service.get_vote(request_id, user.user_id)
    except DeletionError as e:
        raise http_error(e)


@router.get("/{request_id}/votes", response_model=list[DeletionVote])
async def get_deletion_votes(
    request_id: str,
    user: AuthUser = Depends(get_current_user),
    service: VotingService = Depends(get_voting_service),
) -> list[DeletionVote]:
    """Get all votes on a request."""
    try:
        return await service.get_request_votes(request_id)
    except DeletionError as e:
        raise http_error(e)


@router.post("/{request_id}/cancel", response_model=DeletionRequest)
async def cancel_deletion_request(
    request_id: str,
    user: AuthUser = Depends(get_current_user),
    service: DeletionService = Depends(get_deletion_service),
) -> DeletionRequest:
    """Cancel a pending or voting request (requester or admin)."""
    try:
        return await service.cancel(request_id, user)
    except DeletionError as e:
        raise http_error(e)


@router.post("/{request_id}/execute", response_model=DeletionRequest)
async def execute_deletion_request(
    request_id: str,
    user: AuthUser = Depends(require_permission(Permission.MANAGE_REQUESTS)),
    service: DeletionService = Depends(get_deletion_service),
) -> DeletionRequest:
    """Delete the media of an approved request."""
    try:
        return await service.execute_deletion(request_id, user)
    except DeletionError as e:
        raise http_error(e)


@router.post("/{request_id}/recount", response_model=DeletionRequest)
async def recount_deletion_votes(
    request_id: str,
    user: AuthUser = Depends(require_permission(Permission.MANAGE_REQUESTS)),
    service: DeletionService = Depends(get_deletion_service),
) -> DeletionRequest:
    """Rebuild a request's vote counters from its vote records."""
    try:
        return await service.recount_from_votes(request_id)
    except DeletionError as e:
        raise http_error(e)

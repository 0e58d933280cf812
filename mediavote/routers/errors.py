"""HTTP mapping for deletion workflow errors."""

from fastapi import HTTPException, status

from mediavote.errors import (
    DeletionError,
    DuplicateRequestError,
    ForbiddenError,
    InvalidStateError,
    MediaDeletionError,
    NotFoundError,
    StoreFailure,
    VotingClosedError,
)

ERROR_STATUS: dict[type[DeletionError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    DuplicateRequestError: status.HTTP_409_CONFLICT,
    InvalidStateError: status.HTTP_400_BAD_REQUEST,
    VotingClosedError: status.HTTP_400_BAD_REQUEST,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    StoreFailure: status.HTTP_503_SERVICE_UNAVAILABLE,
    MediaDeletionError: status.HTTP_502_BAD_GATEWAY,
}


def http_error(e: DeletionError) -> HTTPException:
    """Build the HTTPException for a workflow error."""
    status_code = ERROR_STATUS.get(type(e), status.HTTP_400_BAD_REQUEST)
    if isinstance(e, DuplicateRequestError):
        return HTTPException(
            status_code=status_code,
            detail={"message": e.message, "existing_request_id": e.existing_request_id},
        )
    return HTTPException(status_code=status_code, detail=e.message)

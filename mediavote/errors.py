"""Domain errors for the deletion voting engine."""

import functools
from typing import Awaitable, Callable, TypeVar

from pymongo.errors import PyMongoError

T = TypeVar("T")


class DeletionError(Exception):
    """Base class for deletion workflow errors."""

    default_message = "Deletion request error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class NotFoundError(DeletionError):
    default_message = "Deletion request not found"


class DuplicateRequestError(DeletionError):
    """An open deletion request already exists for the media."""

    default_message = "An open deletion request already exists for this media"

    def __init__(self, existing_request_id: str, message: str | None = None):
        super().__init__(message)
        self.existing_request_id = existing_request_id


class InvalidStateError(DeletionError):
    default_message = "Deletion request is not in the correct status"


class VotingClosedError(DeletionError):
    default_message = "Voting period has ended for this deletion request"


class ForbiddenError(DeletionError):
    default_message = "You are not authorized to perform this action"


class StoreFailure(DeletionError):
    default_message = "Storage operation failed"


class MediaDeletionError(DeletionError):
    default_message = "Media deletion failed"


def translate_store_errors(
    func: Callable[..., Awaitable[T]],
) -> Callable[..., Awaitable[T]]:
    """Re-raise pymongo errors from a service coroutine as StoreFailure."""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs) -> T:
        try:
            return await func(*args, **kwargs)
        except PyMongoError as e:
            raise StoreFailure(f"{func.__name__} failed: {e}") from e

    return wrapper

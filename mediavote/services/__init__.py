"""Services for MediaVote."""

from mediavote.services.auth import AuthService
from mediavote.services.badges import BadgeService
from mediavote.services.deletion import DeletionService
from mediavote.services.external_api import TMDBClient
from mediavote.services.media_deletion import LibraryMediaDeleter, MediaDeleter
from mediavote.services.reviews import ReviewService
from mediavote.services.users import UserService
from mediavote.services.voting import VotingService

__all__ = [
    "AuthService",
    "BadgeService",
    "DeletionService",
    "LibraryMediaDeleter",
    "MediaDeleter",
    "ReviewService",
    "TMDBClient",
    "UserService",
    "VotingService",
]

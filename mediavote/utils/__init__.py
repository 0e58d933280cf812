"""Utility functions for MediaVote."""

from mediavote.utils.helpers import utcnow

__all__ = ["utcnow"]

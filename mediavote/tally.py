"""Vote tally arithmetic for deletion requests.

Pure functions over (votes_for, votes_against). ``decide`` is the single
threshold rule used by resolution, whether triggered by the sweeper or by a
decisive vote.
"""

from enum import Enum


class Decision(str, Enum):
    """Outcome of applying the approval threshold to a tally."""
    APPROVED = "approved"
    REJECTED = "rejected"
    UNDECIDED = "undecided"


def total(votes_for: int, votes_against: int) -> int:
    return votes_for + votes_against


def percentage(votes_for: int, votes_against: int) -> float:
    """Percentage of votes in favour of deletion, 0 when nobody voted."""
    count = total(votes_for, votes_against)
    if count == 0:
        return 0.0
    return votes_for * 100 / count


def decide(votes_for: int, votes_against: int, required_percentage: float) -> Decision:
    """Final decision for a closed voting window.

    Approved iff the for-percentage reaches the required percentage; an empty
    tally is 0% and therefore rejected.
    """
    if total(votes_for, votes_against) > 0 and (
        percentage(votes_for, votes_against) >= required_percentage
    ):
        return Decision.APPROVED
    return Decision.REJECTED


def early_decision(
    votes_for: int,
    votes_against: int,
    required_percentage: float,
    eligible_voters: int | None = None,
) -> Decision:
    """Decision that can no longer change however the remaining voters act.

    Without a known electorate nothing is certain before the window closes.
    Remaining voters may vote either way or abstain, so the reachable
    percentages span [for / (total + remaining), (for + remaining) / (total + remaining)]
    plus the current percentage when everyone left abstains.
    """
    if eligible_voters is None:
        return Decision.UNDECIDED

    cast = total(votes_for, votes_against)
    remaining = max(eligible_voters - cast, 0)

    current = decide(votes_for, votes_against, required_percentage)
    if remaining == 0:
        return current

    worst = decide(votes_for, votes_against + remaining, required_percentage)
    best = decide(votes_for + remaining, votes_against, required_percentage)

    if current == worst == best:
        return current
    return Decision.UNDECIDED

"""
Chronological navigation through the (optionally policy-filtered) votes.

Everything is recomputed from scratch on each call: there are a few thousand votes at most.
"""
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from votemap.model import Vote, Votes
from votemap.votes import filtered_votes, filtered_votes_on_date


@dataclass(frozen=True)
class Neighbours:
    previous: Optional[Vote]
    next: Optional[Vote]


NO_NEIGHBOURS = Neighbours(None, None)


def chronological_order(policy_id: Optional[int], votes: Votes) -> List[Vote]:
    # sorted() is stable, so votes on the same day keep their insertion order
    return sorted(filtered_votes(policy_id, votes), key=lambda vote: vote.date)


def neighbours(policy_id: Optional[int], votes: Votes) -> Neighbours:
    ordered = chronological_order(policy_id, votes)
    index = next((i for i, vote in enumerate(ordered) if vote.id == votes.selected), None)

    # the selected vote can be filtered out by the active policy
    if index is None:
        return NO_NEIGHBOURS

    return Neighbours(
        previous=ordered[index - 1] if index > 0 else None,
        next=ordered[index + 1] if index + 1 < len(ordered) else None,
    )


def first_vote_on_date(policy_id: Optional[int], votes: Votes, on_date: date) -> Optional[Vote]:
    """ The first vote of the day in chronological order, which for a single day is insertion order. """
    on_that_day = filtered_votes_on_date(policy_id, votes, on_date)
    return on_that_day[0] if on_that_day else None

import dataclasses
import logging
from datetime import date
from typing import List, Optional, Tuple

from votemap.model import Vote, Votes
from votemap.remote_data import RemoteSlot

logger = logging.getLogger(__name__)


def selected(votes: Votes) -> Optional[Vote]:
    vote = votes.data.get(votes.selected)
    if vote is None:
        logger.warning("Selected vote %s is missing from the cache", votes.selected)
    return vote


def set_selected(votes: Votes, vote_id: int) -> Votes:
    return dataclasses.replace(votes, selected=vote_id)


def update_vote_events(votes: Votes, vote_id: int, slot: RemoteSlot) -> Votes:
    vote = votes.data.get(vote_id)
    if vote is None:
        logger.warning("Ignoring vote events for unknown vote %s", vote_id)
        return votes

    data = dict(votes.data)
    data[vote_id] = dataclasses.replace(vote, vote_events=slot)
    return dataclasses.replace(votes, data=data)


def filtered_votes(policy_id: Optional[int], votes: Votes) -> List[Vote]:
    """ All votes in insertion order, restricted to one policy if policy_id is given. """
    if policy_id is None:
        return list(votes.data.values())
    return [vote for vote in votes.data.values() if vote.has_policy(policy_id)]


def filtered_votes_on_date(policy_id: Optional[int], votes: Votes, on_date: date) -> List[Vote]:
    return [vote for vote in filtered_votes(policy_id, votes) if vote.date == on_date]


def first_and_last_vote_years(policy_id: Optional[int], votes: Votes) -> Tuple[int, int]:
    """
    Returns the range of years to show in the date picker.
    Without any matching vote this falls back to the current year for both ends.
    """
    years = [vote.date.year for vote in filtered_votes(policy_id, votes)]
    if not years:
        this_year = date.today().year
        return this_year, this_year
    return min(years), max(years)

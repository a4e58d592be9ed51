"""
Turns the json documents served by the votes API into model objects.

Malformed documents raise DecodeError. Whether that fails a whole load or only drops one entry is decided here:
- a broken vote summary is dropped, unless it is the latest vote (the one that gets selected initially).
- a broken vote event in a vote-events response is dropped.
- anything else that is broken fails the load.
"""
import logging
from datetime import date, datetime
from typing import Any, Dict, List

from votemap.model import Policy, Vote, VoteEvent, VoteOption, Votes
from votemap.remote_data import NOT_ASKED, RemoteSlot, Success

logger = logging.getLogger(__name__)

VOTE_OPTION_TOKENS = {
    "aye": VoteOption.YES,
    "tellaye": VoteOption.YES,
    "no": VoteOption.NO,
    "tellno": VoteOption.NO,
    "both": VoteOption.BOTH,
    "absent": VoteOption.ABSENT,
}


class DecodeError(ValueError):
    pass


def decode_vote_option(token: Any) -> VoteOption:
    if not isinstance(token, str) or token not in VOTE_OPTION_TOKENS:
        raise DecodeError(f"unknown vote option: {token!r}")
    return VOTE_OPTION_TOKENS[token]


def decode_vote_event(data: Any) -> VoteEvent:
    return VoteEvent(
        person_id=_int_field(data, "person_id"),
        name=_str_field(data, "name"),
        party=_str_field(data, "party"),
        option=decode_vote_option(_field(data, "option")),
    )


def decode_vote_events(data: Any, strict: bool = False) -> List[VoteEvent]:
    """
    Decodes a list of vote events. Unless strict, events that fail to decode are skipped.
    """
    if not isinstance(data, list):
        raise DecodeError(f"expected a list of vote events, got {type(data).__name__}")

    events = []
    for item in data:
        try:
            events.append(decode_vote_event(item))
        except DecodeError as e:
            if strict:
                raise
            logger.warning("Dropping vote event %s: %s", item, e)
    return events


def decode_policy(data: Any) -> Policy:
    return Policy(_int_field(data, "id"), _str_field(data, "title"))


def decode_date(value: Any) -> date:
    if not isinstance(value, str):
        raise DecodeError(f"expected an ISO-8601 date, got {value!r}")
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value).date()
    except ValueError:
        raise DecodeError(f"not an ISO-8601 date: {value!r}")


def decode_vote_summary(data: Any, vote_events: RemoteSlot = NOT_ASKED) -> Vote:
    text = _str_field(data, "text")
    policy_title = _optional_str_field(data, "policy_title")

    policy_ids = data.get("policy_ids") or []
    if not isinstance(policy_ids, list) or not all(_is_int(p) for p in policy_ids):
        raise DecodeError(f"policy_ids should be a list of ints, got {policy_ids!r}")

    return Vote(
        id=_int_field(data, "id"),
        policy_title_or_text=policy_title if policy_title else text,
        text=text,
        policy_ids=tuple(policy_ids),
        actions_yes=_optional_str_field(data, "actions_yes"),
        actions_no=_optional_str_field(data, "actions_no"),
        date=decode_date(_field(data, "date")),
        vote_events=vote_events,
    )


def decode_vote_with_events(data: Any) -> Vote:
    events = decode_vote_events(_field(data, "vote_events"), strict=True)
    return decode_vote_summary(data, Success(events))


def decode_initial_data(data: Any) -> Votes:
    """
    Decodes the initial-data document into a Votes cache with the latest vote selected.
    """
    latest = decode_vote_with_events(_field(data, "latestVote"))

    summaries = _field(data, "votes")
    if not isinstance(summaries, list):
        raise DecodeError("votes should be a list")

    votes_by_id: Dict[int, Vote] = {}
    for summary in summaries:
        try:
            vote = decode_vote_summary(summary)
        except DecodeError as e:
            logger.warning("Dropping vote %s: %s", _describe(summary), e)
            continue
        votes_by_id[vote.id] = vote

    # the latest vote comes with its events, so it wins over its summary
    votes_by_id[latest.id] = latest

    policies = _field(data, "policies")
    if not isinstance(policies, list):
        raise DecodeError("policies should be a list")
    policies_by_id = {policy.id: policy for policy in (decode_policy(p) for p in policies)}

    logger.info("Decoded %d votes and %d policies", len(votes_by_id), len(policies_by_id))
    return Votes(selected=latest.id, data=votes_by_id, policies=policies_by_id)


def _field(data: Any, name: str) -> Any:
    if not isinstance(data, dict):
        raise DecodeError(f"expected an object with field {name}, got {type(data).__name__}")
    if name not in data:
        raise DecodeError(f"missing field: {name}")
    return data[name]


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _int_field(data: Any, name: str) -> int:
    value = _field(data, name)
    if not _is_int(value):
        raise DecodeError(f"field {name} should be an int, got {value!r}")
    return value


def _str_field(data: Any, name: str) -> str:
    value = _field(data, name)
    if not isinstance(value, str):
        raise DecodeError(f"field {name} should be a string, got {value!r}")
    return value


def _optional_str_field(data: Any, name: str):
    value = data.get(name) if isinstance(data, dict) else None
    if value is not None and not isinstance(value, str):
        raise DecodeError(f"field {name} should be a string or null, got {value!r}")
    return value


def _describe(summary: Any) -> str:
    return str(summary.get("id")) if isinstance(summary, dict) else repr(summary)

"""
The state machine of the vote browser.

update() takes the current Model and one event, and returns the next Model plus the commands to perform.
Commands are plain descriptions (fetch this, render that); performing them is up to the caller, see
votemap.application.VoteBrowser. Completed fetches come back in as ordinary events.

Two rules keep fetching in check:
- a vote's events are fetched only while its slot is NotAsked, the slot is set to Loading when the fetch is issued.
- neighbours are prefetched only after the chart reports it has settled, so prefetching doesn't compete with the
  layout of the vote on screen.
"""
import dataclasses
import logging
from dataclasses import dataclass
from datetime import date
from typing import FrozenSet, List, Optional, Tuple

from votemap.chart import ChartPayload, encode_chart_payload
from votemap.model import Votes
from votemap.navigation import first_vote_on_date, neighbours
from votemap.remote_data import LOADING, NOT_ASKED, Failure, Loading, NotAsked, RemoteSlot, Success
from votemap.votes import filtered_votes, first_and_last_vote_years, selected, set_selected, update_vote_events

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Model:
    votes: RemoteSlot = NOT_ASKED
    displayed_vote_id: Optional[int] = None  # lags behind votes.selected until the selected vote's events arrive
    hovered_person_id: Optional[int] = None
    selected_person_id: Optional[int] = None
    filtered_policy_id: Optional[int] = None
    date_picker_date: Optional[date] = None
    person_search_query: str = ""


# Events

@dataclass(frozen=True)
class InitialDataReceived:
    result: RemoteSlot


@dataclass(frozen=True)
class VoteEventsReceived:
    vote_id: int
    result: RemoteSlot


@dataclass(frozen=True)
class VoteSelected:
    vote_id: int


@dataclass(frozen=True)
class PreviousVoteSelected:
    pass


@dataclass(frozen=True)
class NextVoteSelected:
    pass


@dataclass(frozen=True)
class DateChanged:
    date: Optional[date]


@dataclass(frozen=True)
class PolicyFilterChanged:
    policy_id: Optional[int]


@dataclass(frozen=True)
class PersonHovered:
    person_id: int


@dataclass(frozen=True)
class PersonUnhovered:
    person_id: int


@dataclass(frozen=True)
class PersonClicked:
    person_id: int


@dataclass(frozen=True)
class PersonSelectionCleared:
    pass


@dataclass(frozen=True)
class PersonSearchChanged:
    query: str


@dataclass(frozen=True)
class PersonPicked:
    person_id: int


@dataclass(frozen=True)
class ChartSettled:
    pass


# Commands

@dataclass(frozen=True)
class FetchInitialData:
    pass


@dataclass(frozen=True)
class FetchVoteEvents:
    vote_id: int


@dataclass(frozen=True)
class RenderChart:
    payload: ChartPayload


Commands = List[object]


def init() -> Tuple[Model, Commands]:
    return Model(votes=LOADING), [FetchInitialData()]


def update(model: Model, event) -> Tuple[Model, Commands]:
    handler = _HANDLERS.get(type(event))
    if handler is None:
        raise TypeError(f"unknown event: {event!r}")
    return handler(model, event)


def _on_initial_data(model: Model, event: InitialDataReceived):
    if not isinstance(model.votes, (NotAsked, Loading)):
        logger.warning("Ignoring initial data, votes were already %s", type(model.votes).__name__)
        return model, []

    if isinstance(event.result, Failure):
        logger.error("Loading initial data failed: %s", event.result.error)
        return dataclasses.replace(model, votes=event.result), []

    votes: Votes = event.result.value
    return _select(model, votes, votes.selected)


def _on_vote_events(model: Model, event: VoteEventsReceived):
    votes = _loaded_votes(model)
    if votes is None:
        logger.warning("Ignoring vote events for %s, votes aren't loaded", event.vote_id)
        return model, []
    if event.vote_id not in votes.data:
        logger.warning("Ignoring vote events for unknown vote %s", event.vote_id)
        return model, []
    if votes.data[event.vote_id].vote_events == event.result:
        logger.debug("Vote events for %s are unchanged", event.vote_id)
        return model, []

    if isinstance(event.result, Failure):
        logger.warning("Fetching vote events for %s failed: %s", event.vote_id, event.result.error)

    votes = update_vote_events(votes, event.vote_id, event.result)
    model = dataclasses.replace(model, votes=Success(votes))

    if event.vote_id != votes.selected:
        # a prefetch or a stale response, keep it for later
        logger.debug("Stored vote events for %s in the background", event.vote_id)
        return model, []

    return _render(model, restart_simulation=True)


def _on_vote_selected(model: Model, event: VoteSelected):
    votes = _loaded_votes(model)
    if votes is None:
        return model, []
    return _select(model, votes, event.vote_id)


def _on_previous_vote(model: Model, event: PreviousVoteSelected):
    return _select_neighbour(model, lambda n: n.previous)


def _on_next_vote(model: Model, event: NextVoteSelected):
    return _select_neighbour(model, lambda n: n.next)


def _select_neighbour(model: Model, pick):
    votes = _loaded_votes(model)
    if votes is None:
        return model, []
    neighbour = pick(neighbours(model.filtered_policy_id, votes))
    if neighbour is None:
        return model, []
    return _select(model, votes, neighbour.id)


def _on_date_changed(model: Model, event: DateChanged):
    model = dataclasses.replace(model, date_picker_date=event.date)
    votes = _loaded_votes(model)
    if votes is None or event.date is None:
        return model, []

    vote = first_vote_on_date(model.filtered_policy_id, votes, event.date)
    if vote is None:
        logger.info("No votes on %s", event.date)
        return model, []
    return _select(model, votes, vote.id)


def _on_policy_filter_changed(model: Model, event: PolicyFilterChanged):
    return dataclasses.replace(model, filtered_policy_id=event.policy_id), []


def _on_person_hovered(model: Model, event: PersonHovered):
    return dataclasses.replace(model, hovered_person_id=event.person_id), []


def _on_person_unhovered(model: Model, event: PersonUnhovered):
    # an unhover can arrive after the hover of the next person
    if model.hovered_person_id != event.person_id:
        return model, []
    return dataclasses.replace(model, hovered_person_id=None), []


def _on_person_clicked(model: Model, event: PersonClicked):
    return _select_person(model, event.person_id)


def _on_person_selection_cleared(model: Model, event: PersonSelectionCleared):
    return _select_person(model, None)


def _on_person_search_changed(model: Model, event: PersonSearchChanged):
    return dataclasses.replace(model, person_search_query=event.query), []


def _on_person_picked(model: Model, event: PersonPicked):
    return _select_person(dataclasses.replace(model, person_search_query=""), event.person_id)


def _on_chart_settled(model: Model, event: ChartSettled):
    votes = _loaded_votes(model)
    if votes is None:
        return model, []

    commands = []
    around = neighbours(model.filtered_policy_id, votes)
    for vote in (around.previous, around.next):
        if vote is not None and isinstance(vote.vote_events, NotAsked):
            logger.debug("Prefetching vote events for %s", vote.id)
            votes = update_vote_events(votes, vote.id, LOADING)
            commands.append(FetchVoteEvents(vote.id))

    return dataclasses.replace(model, votes=Success(votes)), commands


_HANDLERS = {
    InitialDataReceived: _on_initial_data,
    VoteEventsReceived: _on_vote_events,
    VoteSelected: _on_vote_selected,
    PreviousVoteSelected: _on_previous_vote,
    NextVoteSelected: _on_next_vote,
    DateChanged: _on_date_changed,
    PolicyFilterChanged: _on_policy_filter_changed,
    PersonHovered: _on_person_hovered,
    PersonUnhovered: _on_person_unhovered,
    PersonClicked: _on_person_clicked,
    PersonSelectionCleared: _on_person_selection_cleared,
    PersonSearchChanged: _on_person_search_changed,
    PersonPicked: _on_person_picked,
    ChartSettled: _on_chart_settled,
}


def _loaded_votes(model: Model) -> Optional[Votes]:
    return model.votes.value if isinstance(model.votes, Success) else None


def _select(model: Model, votes: Votes, vote_id: int):
    if vote_id not in votes.data:
        logger.warning("Can't select unknown vote %s", vote_id)
        return model, []

    votes = set_selected(votes, vote_id)
    slot = votes.data[vote_id].vote_events
    commands = []

    if isinstance(slot, NotAsked):
        logger.debug("Fetching vote events for %s", vote_id)
        votes = update_vote_events(votes, vote_id, LOADING)
        commands.append(FetchVoteEvents(vote_id))

    model = dataclasses.replace(model, votes=Success(votes), date_picker_date=None)

    if isinstance(slot, Success):
        return _render(model, restart_simulation=True)

    # Loading: the response will render it. Failure: nothing to show, we don't retry.
    return model, commands


def _select_person(model: Model, person_id: Optional[int]):
    model = dataclasses.replace(model, selected_person_id=person_id)
    if _loaded_votes(model) is None:
        return model, []
    return _render(model, restart_simulation=False)


def _render(model: Model, restart_simulation: bool):
    payload = encode_chart_payload(selected(model.votes.value), model.selected_person_id, restart_simulation)
    if payload is None:
        return model, []
    return dataclasses.replace(model, displayed_vote_id=payload.vote_id), [RenderChart(payload)]


# Views for the widgets around the chart

@dataclass(frozen=True)
class DatePickerConfig:
    min_year: int
    max_year: int
    selected_date: Optional[date]
    enabled_dates: FrozenSet[date]

    def is_disabled(self, day: date) -> bool:
        return day not in self.enabled_dates


@dataclass(frozen=True)
class PersonOption:
    person_id: int
    name: str
    party: str


def date_picker_config(model: Model) -> Optional[DatePickerConfig]:
    """ Days without a vote (under the active policy filter) can't be picked. """
    votes = _loaded_votes(model)
    if votes is None:
        return None

    min_year, max_year = first_and_last_vote_years(model.filtered_policy_id, votes)
    current = selected(votes)
    selected_date = model.date_picker_date
    if selected_date is None and current is not None:
        selected_date = current.date

    return DatePickerConfig(
        min_year=min_year,
        max_year=max_year,
        selected_date=selected_date,
        enabled_dates=frozenset(vote.date for vote in filtered_votes(model.filtered_policy_id, votes)),
    )


def person_options(model: Model) -> List[PersonOption]:
    votes = _loaded_votes(model)
    current = selected(votes) if votes is not None else None
    if current is None or not isinstance(current.vote_events, Success):
        return []

    query = model.person_search_query.strip().lower()
    options = [PersonOption(e.person_id, e.name, e.party) for e in current.vote_events.value
               if query in e.name.lower()]
    return sorted(options, key=lambda option: option.name)

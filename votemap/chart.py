from dataclasses import dataclass
from typing import Dict, List, Optional

from votemap.colours import border_colour, display_colour
from votemap.model import Vote, VoteEvent
from votemap.remote_data import Success


@dataclass(frozen=True)
class ChartNode:
    person_id: int
    name: str
    colour: str
    border_colour: Optional[str]
    option: str


@dataclass(frozen=True)
class ChartPayload:
    vote_id: int
    nodes: List[ChartNode]
    restart_simulation: bool


def encode_chart_payload(vote: Optional[Vote], selected_person_id: Optional[int],
                         restart_simulation: bool) -> Optional[ChartPayload]:
    """
    Builds the payload for the chart renderer. Returns None when the vote events of the vote aren't available.
    restart_simulation tells the renderer to lay out the nodes from scratch instead of only re-colouring them.
    """
    if vote is None or not isinstance(vote.vote_events, Success):
        return None

    nodes = [to_chart_node(event, selected_person_id) for event in vote.vote_events.value]
    return ChartPayload(vote.id, nodes, restart_simulation)


def to_chart_node(event: VoteEvent, selected_person_id: Optional[int]) -> ChartNode:
    return ChartNode(
        person_id=event.person_id,
        name=event.name,
        colour=display_colour(event, selected_person_id),
        border_colour=border_colour(event, selected_person_id),
        option=event.option.token,
    )


def chart_payload_to_json(payload: ChartPayload) -> Dict:
    return {
        "voteEvents": [chart_node_to_json(node) for node in payload.nodes],
        "restartSimulation": payload.restart_simulation,
    }


def chart_node_to_json(node: ChartNode) -> Dict:
    return {
        "personId": node.person_id,
        "name": node.name,
        "colour": node.colour,
        "borderColour": node.border_colour,
        "option": node.option,
    }

"""
The data model behind the vote browser.

- votes: one recorded ballot each, with a date, optional policy tags and a lazily fetched list of vote events.
- vote events: how one person voted on one vote (aye/no/both/absent).
- policies: topics that votes can be tagged with.
"""

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, List, Optional, Tuple

from votemap.remote_data import RemoteSlot, NOT_ASKED

SPEAKER_PARTIES = ("speaker", "deputy speaker")


class VoteOption(Enum):
	YES = "YES"
	NO = "NO"
	BOTH = "BOTH"
	ABSENT = "ABSENT"

	@property
	def token(self) -> str:
		""" Lower-cased name, as sent to the chart. """
		return self.name.lower()


@dataclass(frozen=True)
class VoteEvent:
	person_id: int
	name: str
	party: str
	option: VoteOption

	@property
	def is_speaker(self) -> bool:
		return self.party.lower() in SPEAKER_PARTIES


@dataclass(frozen=True)
class Policy:
	id: int
	title: str


@dataclass(frozen=True)
class Vote:
	id: int
	policy_title_or_text: str
	text: str  # the motion text, policy_title_or_text falls back to this one
	policy_ids: Tuple[int, ...]
	actions_yes: Optional[str]  # what a yes vote means, when the source describes it
	actions_no: Optional[str]
	date: date
	vote_events: RemoteSlot = NOT_ASKED

	def has_policy(self, policy_id: int) -> bool:
		return policy_id in self.policy_ids


@dataclass(frozen=True)
class Votes:
	"""
	All votes we know of, keyed by id, plus the id of the selected vote.
	Votes are never removed; only the vote_events slot of a vote gets replaced.
	"""
	selected: int
	data: Dict[int, Vote]
	policies: Dict[int, Policy] = field(default_factory=dict)

	def __post_init__(self):
		if self.selected not in self.data:
			raise ValueError(f"selected vote {self.selected} is not among the known votes")

	def policies_of(self, vote: Vote) -> List[Policy]:
		""" Policies of a vote; unknown policy ids are skipped. """
		return [self.policies[policy_id] for policy_id in vote.policy_ids if policy_id in self.policies]


@dataclass
class VoteCounts:
	""" Counts the vote events of one vote by option and by party """
	vote_id: int
	events: List[VoteEvent]

	def count_by_option(self) -> Dict[VoteOption, int]:
		counts = Counter(event.option for event in self.events)
		return {option: counts.get(option, 0) for option in VoteOption}

	def count_by_party(self) -> Dict[str, Counter]:
		by_party = defaultdict(Counter)
		for event in self.events:
			by_party[event.party][event.option] += 1
		return dict(by_party)

	def total_votes(self) -> int:
		return len(self.events)

import asyncio
import json
import logging
import sys
from argparse import ArgumentParser
from datetime import date

from votemap.application import VoteBrowser
from votemap.config import Config, create_config_from_env
from votemap.controller import (
    ChartSettled,
    DateChanged,
    NextVoteSelected,
    PersonClicked,
    PersonHovered,
    PersonPicked,
    PersonSearchChanged,
    PersonSelectionCleared,
    PersonUnhovered,
    PolicyFilterChanged,
    PreviousVoteSelected,
    VoteSelected,
    date_picker_config,
    person_options,
)
from votemap.infra.api import AsyncVotesGateway, VotesHttpGateway, create_session
from votemap.model import VoteCounts
from votemap.navigation import neighbours
from votemap.remote_data import Failure, Success, value_or_none
from votemap.votes import filtered_votes, selected

logger = logging.getLogger(__name__)

QUIT = "quit"
SHOW = "show"

BROWSE_HELP = """commands:
  next | prev                 go to the next / previous vote
  select <vote id>            go to a vote
  date <yyyy-mm-dd> | none    go to the first vote on a date
  policy <policy id> | none   only navigate through votes of a policy
  hover <person id> | unhover <person id>
  click <person id> | clear   select / unselect a person
  search <text>               list people of the vote matching text
  pick <person id>            select a person from the search results
  show                        describe the current vote
  quit"""


def setup_logging(log_level: str):
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.WARNING))
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s', '%H:%M:%S'))
    root_logger.addHandler(handler)

    # Suppress third-party noise
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('requests').setLevel(logging.WARNING)
    logging.getLogger('aiohttp').setLevel(logging.WARNING)


def main():
    parser = ArgumentParser("votemap", "votemap <subcommand> [options]", "Browse recorded parliamentary votes")
    subparsers = parser.add_subparsers(title="votemap")

    browse = subparsers.add_parser('browse', help="Browse votes interactively, chart payloads are written to stdout")
    browse.set_defaults(func=lambda args, config: browse_votes(config))

    vote = subparsers.add_parser('vote', help="Print how people voted on a vote")
    vote.add_argument('vote_id', type=int)
    vote.set_defaults(func=lambda args, config: print_vote_counts(config, args.vote_id))

    policies = subparsers.add_parser('policies', help="Print the policies and their number of votes")
    policies.set_defaults(func=lambda args, config: print_policies(config))

    args = parser.parse_args()
    if not hasattr(args, 'func'):
        parser.print_help()
        return

    config = create_config_from_env()
    setup_logging(config.log_level)
    sys.exit(args.func(args, config) or 0)


def parse_command(line: str):
    """
    Translates a line typed in the browse session into a controller event, or QUIT / SHOW.
    Returns None for empty lines and raises ValueError for anything it doesn't understand.
    """
    parts = line.strip().split(maxsplit=1)
    if not parts:
        return None
    command, argument = parts[0].lower(), (parts[1].strip() if len(parts) > 1 else "")

    if command in (QUIT, "exit"):
        return QUIT
    if command == SHOW:
        return SHOW
    if command == "next":
        return NextVoteSelected()
    if command in ("prev", "previous"):
        return PreviousVoteSelected()
    if command == "select":
        return VoteSelected(_int_argument(command, argument))
    if command == "date":
        return DateChanged(None if argument == "none" else date.fromisoformat(argument))
    if command == "policy":
        return PolicyFilterChanged(None if argument == "none" else _int_argument(command, argument))
    if command == "hover":
        return PersonHovered(_int_argument(command, argument))
    if command == "unhover":
        return PersonUnhovered(_int_argument(command, argument))
    if command == "click":
        return PersonClicked(_int_argument(command, argument))
    if command == "clear":
        return PersonSelectionCleared()
    if command == "search":
        return PersonSearchChanged(argument)
    if command == "pick":
        return PersonPicked(_int_argument(command, argument))
    raise ValueError(f"unknown command: {command}")


def _int_argument(command, argument):
    try:
        return int(argument)
    except ValueError:
        raise ValueError(f"{command} needs a numeric id, got '{argument}'")


def browse_votes(config: Config):
    return asyncio.run(_browse(config))


async def _browse(config: Config):
    async with create_session(config) as session:
        def render(payload):
            print(json.dumps(payload), flush=True)
            # nothing is laid out here, so the chart is settled as soon as it is written
            browser.dispatch(ChartSettled())

        browser = VoteBrowser(AsyncVotesGateway(config, session), render)
        browser.start()
        runner = asyncio.create_task(browser.run())
        await browser.wait_until_idle()

        if isinstance(browser.model.votes, Failure):
            logger.error("Could not load the votes: %s", browser.model.votes.error)
            browser.stop()
            await runner
            return 1

        print(BROWSE_HELP, file=sys.stderr)
        loop = asyncio.get_running_loop()
        while True:
            line = await loop.run_in_executor(None, sys.stdin.readline)
            if not line:
                break
            try:
                event = parse_command(line)
            except ValueError as e:
                print(e, file=sys.stderr)
                continue

            if event == QUIT:
                break
            if event == SHOW:
                print(describe_current_vote(browser.model), file=sys.stderr)
            elif event is not None:
                browser.dispatch(event)
                await browser.wait_until_idle()
                if isinstance(event, PersonSearchChanged):
                    for option in person_options(browser.model):
                        print(f"{option.person_id}\t{option.name} ({option.party})", file=sys.stderr)

        browser.stop()
        await runner
    return 0


def describe_current_vote(model) -> str:
    votes = value_or_none(model.votes)
    vote = selected(votes) if votes is not None else None
    if vote is None:
        return "no vote selected"

    around = neighbours(model.filtered_policy_id, votes)
    picker = date_picker_config(model)
    lines = [
        f"vote {vote.id} on {vote.date.isoformat()}: {vote.policy_title_or_text}",
        "policies: " + (", ".join(policy.title for policy in votes.policies_of(vote)) or "-"),
        f"previous: {around.previous.id if around.previous else '-'}, next: {around.next.id if around.next else '-'}",
        f"years: {picker.min_year}-{picker.max_year}",
        f"events: {type(vote.vote_events).__name__}",
    ]
    if isinstance(vote.vote_events, Success):
        counts = VoteCounts(vote.id, vote.vote_events.value).count_by_option()
        lines.append(", ".join(f"{option.token}: {count}" for option, count in counts.items()))
    return "\n".join(lines)


def print_vote_counts(config: Config, vote_id: int):
    result = VotesHttpGateway(config).fetch_vote_events(vote_id)
    if isinstance(result, Failure):
        logger.error("Could not fetch vote %s: %s", vote_id, result.error)
        return 1

    counts = VoteCounts(vote_id, result.value)
    print(f"# vote {vote_id}: {counts.total_votes()} votes")
    for option, count in counts.count_by_option().items():
        print(f"{option.token}: {count}")
    for party, counter in sorted(counts.count_by_party().items()):
        print("       -", party, ", ".join(f"{option.token}: {count}" for option, count in counter.items()))
    return 0


def print_policies(config: Config):
    result = VotesHttpGateway(config).fetch_initial_data()
    if isinstance(result, Failure):
        logger.error("Could not fetch the votes: %s", result.error)
        return 1

    votes = result.value
    for policy in sorted(votes.policies.values(), key=lambda p: p.title):
        print(f"{policy.id}\t{policy.title} ({len(filtered_votes(policy.id, votes))} votes)")
    return 0


if __name__ == "__main__":
    main()

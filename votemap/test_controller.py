import unittest
from datetime import date

from votemap.controller import (
    ChartSettled,
    DateChanged,
    FetchInitialData,
    FetchVoteEvents,
    InitialDataReceived,
    Model,
    NextVoteSelected,
    PersonClicked,
    PersonHovered,
    PersonPicked,
    PersonSearchChanged,
    PersonSelectionCleared,
    PersonUnhovered,
    PolicyFilterChanged,
    PreviousVoteSelected,
    RenderChart,
    VoteEventsReceived,
    VoteSelected,
    date_picker_config,
    init,
    person_options,
    update,
)
from votemap.model import Vote, VoteEvent, VoteOption, Votes
from votemap.remote_data import LOADING, NOT_ASKED, Failure, Loading, Success

CLIMATE = 1

EVENTS = [
    VoteEvent(10, "Jane Smith", "Labour", VoteOption.YES),
    VoteEvent(11, "John Doe", "Conservative", VoteOption.NO),
    VoteEvent(12, "Lindsay Hoyle", "Speaker", VoteOption.ABSENT),
]


def vote(vote_id, on_date, policy_ids=(), events=NOT_ASKED):
    return Vote(vote_id, f"Vote {vote_id}", f"Vote {vote_id}", tuple(policy_ids), None, None, on_date, events)


def three_votes(selected=3, v1=NOT_ASKED, v2=NOT_ASKED, v3=NOT_ASKED):
    return Votes(selected=selected, data={
        1: vote(1, date(2020, 1, 1), [CLIMATE], v1),
        2: vote(2, date(2020, 2, 1), [], v2),
        3: vote(3, date(2020, 3, 1), [CLIMATE], v3),
    })


def loaded(votes, **kwargs):
    return Model(votes=Success(votes), **kwargs)


def renders(commands):
    return [c for c in commands if isinstance(c, RenderChart)]


def fetches(commands):
    return [c for c in commands if isinstance(c, FetchVoteEvents)]


def slot_of(model, vote_id):
    return model.votes.value.data[vote_id].vote_events


class TestInitialLoad(unittest.TestCase):

    def test_init_fetches_initial_data(self):
        model, commands = init()

        self.assertIsInstance(model.votes, Loading)
        self.assertEqual([FetchInitialData()], commands)

    def test_initial_data_with_events_renders_immediately(self):
        model, commands = update(init()[0], InitialDataReceived(Success(three_votes(v3=Success(EVENTS)))))

        self.assertEqual([], fetches(commands))
        self.assertEqual(1, len(renders(commands)))
        self.assertTrue(renders(commands)[0].payload.restart_simulation)
        self.assertEqual(3, model.displayed_vote_id)

    def test_initial_data_without_events_fetches_them(self):
        model, commands = update(init()[0], InitialDataReceived(Success(three_votes())))

        self.assertEqual([FetchVoteEvents(3)], commands)
        self.assertIsInstance(slot_of(model, 3), Loading)
        self.assertIsNone(model.displayed_vote_id)

    def test_initial_data_failure(self):
        failure = Failure("boom")

        model, commands = update(init()[0], InitialDataReceived(failure))

        self.assertEqual(failure, model.votes)
        self.assertEqual([], commands)

    def test_initial_data_is_installed_only_once(self):
        model, _ = update(init()[0], InitialDataReceived(Success(three_votes(v3=Success(EVENTS)))))

        again, commands = update(model, InitialDataReceived(Success(three_votes(selected=1))))

        self.assertIs(model, again)
        self.assertEqual([], commands)


class TestVoteSelection(unittest.TestCase):

    def test_selecting_vote_without_events_fetches_once(self):
        model, commands = update(loaded(three_votes(v3=Success(EVENTS))), VoteSelected(2))

        self.assertEqual([FetchVoteEvents(2)], commands)
        self.assertEqual(2, model.votes.value.selected)
        self.assertIsInstance(slot_of(model, 2), Loading)

        # events for 2 arrive while 2 is still selected
        model, commands = update(model, VoteEventsReceived(2, Success(EVENTS)))

        self.assertEqual(1, len(commands))
        self.assertEqual(2, commands[0].payload.vote_id)
        self.assertTrue(commands[0].payload.restart_simulation)
        self.assertEqual(2, model.displayed_vote_id)

    def test_selecting_loading_vote_does_not_fetch_again(self):
        model, _ = update(loaded(three_votes()), VoteSelected(2))
        model, _ = update(model, VoteSelected(1))

        model, commands = update(model, VoteSelected(2))

        self.assertEqual([], commands)
        self.assertIsInstance(slot_of(model, 2), Loading)

    def test_selecting_vote_with_events_renders_with_restart(self):
        model, commands = update(loaded(three_votes(v1=Success(EVENTS)), selected_person_id=10), VoteSelected(1))

        self.assertEqual(1, len(commands))
        payload = commands[0].payload
        self.assertTrue(payload.restart_simulation)
        self.assertEqual(1, payload.vote_id)
        self.assertEqual("#000000", payload.nodes[0].border_colour)

    def test_failed_vote_is_not_fetched_again(self):
        model, commands = update(loaded(three_votes(v1=Failure("timeout"))), VoteSelected(1))

        self.assertEqual([], commands)
        self.assertEqual(1, model.votes.value.selected)
        self.assertEqual(Failure("timeout"), slot_of(model, 1))

    def test_selecting_unknown_vote_is_ignored(self):
        model = loaded(three_votes())

        self.assertEqual((model, []), update(model, VoteSelected(42)))

    def test_selecting_before_initial_load_is_ignored(self):
        model = init()[0]

        self.assertEqual((model, []), update(model, VoteSelected(1)))

    def test_previous_and_next(self):
        model, commands = update(loaded(three_votes(selected=2, v1=Success(EVENTS))), PreviousVoteSelected())

        self.assertEqual(1, model.votes.value.selected)
        self.assertEqual(1, len(renders(commands)))

        model, commands = update(model, NextVoteSelected())
        model, commands = update(model, NextVoteSelected())

        self.assertEqual(3, model.votes.value.selected)
        self.assertEqual([FetchVoteEvents(3)], commands)

    def test_next_at_the_end_is_ignored(self):
        model = loaded(three_votes(selected=3))

        self.assertEqual((model, []), update(model, NextVoteSelected()))

    def test_next_respects_policy_filter(self):
        model, commands = update(loaded(three_votes(selected=1), filtered_policy_id=CLIMATE), NextVoteSelected())

        self.assertEqual(3, model.votes.value.selected)
        self.assertEqual([FetchVoteEvents(3)], commands)


class TestVoteEventsResponses(unittest.TestCase):

    def test_response_for_other_vote_is_stored_without_render(self):
        model = loaded(three_votes(selected=2, v2=Success(EVENTS), v1=LOADING), displayed_vote_id=2)

        model, commands = update(model, VoteEventsReceived(1, Success(EVENTS[:1])))

        self.assertEqual([], commands)
        self.assertEqual(Success(EVENTS[:1]), slot_of(model, 1))
        self.assertEqual(2, model.votes.value.selected)
        self.assertEqual(2, model.displayed_vote_id)

    def test_stale_response_is_reused_later(self):
        model, _ = update(loaded(three_votes(v3=Success(EVENTS))), VoteSelected(2))
        model, _ = update(model, VoteSelected(3))
        model, commands = update(model, VoteEventsReceived(2, Success(EVENTS)))
        self.assertEqual([], commands)

        model, commands = update(model, VoteSelected(2))

        self.assertEqual([], fetches(commands))
        self.assertEqual(1, len(renders(commands)))

    def test_applying_same_response_twice(self):
        model, _ = update(loaded(three_votes(selected=2)), VoteSelected(1))

        once, _ = update(model, VoteEventsReceived(1, Success(EVENTS)))
        twice, commands = update(once, VoteEventsReceived(1, Success(EVENTS)))

        self.assertEqual(once.votes, twice.votes)
        self.assertEqual(once, twice)

    def test_same_response_for_selected_vote_renders_once(self):
        model, _ = update(loaded(three_votes()), VoteSelected(2))

        once, first = update(model, VoteEventsReceived(2, Success(EVENTS)))
        twice, second = update(once, VoteEventsReceived(2, Success(EVENTS)))

        self.assertEqual(1, len(renders(first)))
        self.assertEqual([], second)
        self.assertIs(once, twice)

    def test_failure_for_selected_vote_renders_nothing(self):
        model, _ = update(loaded(three_votes()), VoteSelected(2))

        model, commands = update(model, VoteEventsReceived(2, Failure("timeout")))

        self.assertEqual([], commands)
        self.assertEqual(Failure("timeout"), slot_of(model, 2))

    def test_response_for_unknown_vote_is_ignored(self):
        model = loaded(three_votes())

        self.assertEqual((model, []), update(model, VoteEventsReceived(42, Success(EVENTS))))

    def test_response_before_initial_data_is_ignored(self):
        model = init()[0]

        self.assertEqual((model, []), update(model, VoteEventsReceived(1, Success(EVENTS))))


class TestChartSettled(unittest.TestCase):

    def test_prefetches_neighbours(self):
        model, commands = update(loaded(three_votes(selected=2, v2=Success(EVENTS))), ChartSettled())

        self.assertEqual([FetchVoteEvents(1), FetchVoteEvents(3)], commands)
        self.assertIsInstance(slot_of(model, 1), Loading)
        self.assertIsInstance(slot_of(model, 3), Loading)

    def test_only_prefetches_neighbours_not_asked_yet(self):
        model = loaded(three_votes(selected=2, v1=LOADING, v2=Success(EVENTS), v3=Failure("timeout")))

        self.assertEqual([], update(model, ChartSettled())[1])

        model = loaded(three_votes(selected=2, v1=Success(EVENTS), v2=Success(EVENTS)))
        self.assertEqual([FetchVoteEvents(3)], update(model, ChartSettled())[1])

    def test_settling_twice_does_not_fetch_twice(self):
        model, _ = update(loaded(three_votes(selected=2, v2=Success(EVENTS))), ChartSettled())

        self.assertEqual([], update(model, ChartSettled())[1])

    def test_selection_change_does_not_prefetch(self):
        _, commands = update(loaded(three_votes(selected=3, v2=Success(EVENTS))), VoteSelected(2))

        self.assertEqual([], fetches(commands))

    def test_no_prefetch_when_filter_excludes_selected_vote(self):
        model = loaded(three_votes(selected=2, v2=Success(EVENTS)), filtered_policy_id=CLIMATE)

        self.assertEqual([], update(model, ChartSettled())[1])

    def test_settled_before_initial_data_is_ignored(self):
        model = init()[0]

        self.assertEqual((model, []), update(model, ChartSettled()))


class TestPeople(unittest.TestCase):

    def test_hover_and_unhover(self):
        model, commands = update(loaded(three_votes()), PersonHovered(10))
        self.assertEqual(10, model.hovered_person_id)
        self.assertEqual([], commands)

        model, commands = update(model, PersonUnhovered(10))
        self.assertIsNone(model.hovered_person_id)
        self.assertEqual([], commands)

    def test_stale_unhover_is_ignored(self):
        model, _ = update(loaded(three_votes()), PersonHovered(10))
        model, _ = update(model, PersonHovered(11))

        model, _ = update(model, PersonUnhovered(10))

        self.assertEqual(11, model.hovered_person_id)

    def test_click_renders_without_restart(self):
        model, commands = update(loaded(three_votes(v3=Success(EVENTS))), PersonClicked(12))

        self.assertEqual(12, model.selected_person_id)
        self.assertEqual(1, len(commands))
        payload = commands[0].payload
        self.assertFalse(payload.restart_simulation)
        self.assertEqual("#ffffff", payload.nodes[2].border_colour)

    def test_clear_selection_renders_without_restart(self):
        model, commands = update(loaded(three_votes(v3=Success(EVENTS)), selected_person_id=12),
                                 PersonSelectionCleared())

        self.assertIsNone(model.selected_person_id)
        self.assertFalse(commands[0].payload.restart_simulation)
        self.assertTrue(all(node.border_colour is None for node in commands[0].payload.nodes))

    def test_click_without_events_renders_nothing(self):
        model, commands = update(loaded(three_votes(v3=LOADING)), PersonClicked(12))

        self.assertEqual(12, model.selected_person_id)
        self.assertEqual([], commands)

    def test_person_search(self):
        model, commands = update(loaded(three_votes(v3=Success(EVENTS))), PersonSearchChanged("jO"))

        self.assertEqual([], commands)
        self.assertEqual(["John Doe"], [option.name for option in person_options(model)])

        model, commands = update(model, PersonPicked(11))

        self.assertEqual(11, model.selected_person_id)
        self.assertEqual("", model.person_search_query)
        self.assertFalse(commands[0].payload.restart_simulation)

    def test_person_options_sorted_by_name(self):
        options = person_options(loaded(three_votes(v3=Success(EVENTS))))

        self.assertEqual(["Jane Smith", "John Doe", "Lindsay Hoyle"], [option.name for option in options])

    def test_no_person_options_without_events(self):
        self.assertEqual([], person_options(loaded(three_votes())))
        self.assertEqual([], person_options(init()[0]))


class TestFilterAndDates(unittest.TestCase):

    def test_policy_filter_only_changes_the_filter(self):
        model = loaded(three_votes(v3=Success(EVENTS)))

        filtered, commands = update(model, PolicyFilterChanged(CLIMATE))

        self.assertEqual([], commands)
        self.assertEqual(CLIMATE, filtered.filtered_policy_id)
        self.assertEqual(model.votes, filtered.votes)

        cleared, commands = update(filtered, PolicyFilterChanged(None))
        self.assertEqual([], commands)
        self.assertIsNone(cleared.filtered_policy_id)

    def test_date_change_selects_vote_on_that_date(self):
        model, commands = update(loaded(three_votes(v3=Success(EVENTS))), DateChanged(date(2020, 2, 1)))

        self.assertEqual(2, model.votes.value.selected)
        self.assertEqual([FetchVoteEvents(2)], commands)
        self.assertIsNone(model.date_picker_date)

    def test_date_without_votes_keeps_selection(self):
        model, commands = update(loaded(three_votes()), DateChanged(date(2020, 2, 2)))

        self.assertEqual(3, model.votes.value.selected)
        self.assertEqual([], commands)
        self.assertEqual(date(2020, 2, 2), model.date_picker_date)

    def test_date_respects_policy_filter(self):
        model, commands = update(loaded(three_votes(), filtered_policy_id=CLIMATE), DateChanged(date(2020, 2, 1)))

        self.assertEqual(3, model.votes.value.selected)
        self.assertEqual([], commands)

    def test_cleared_date(self):
        model, commands = update(loaded(three_votes()), DateChanged(None))

        self.assertEqual(3, model.votes.value.selected)
        self.assertEqual([], commands)

    def test_date_picker_config(self):
        config = date_picker_config(loaded(three_votes()))

        self.assertEqual((2020, 2020), (config.min_year, config.max_year))
        self.assertEqual(date(2020, 3, 1), config.selected_date)
        self.assertFalse(config.is_disabled(date(2020, 2, 1)))
        self.assertTrue(config.is_disabled(date(2020, 2, 2)))

    def test_date_picker_config_with_policy_filter(self):
        config = date_picker_config(loaded(three_votes(), filtered_policy_id=CLIMATE))

        self.assertTrue(config.is_disabled(date(2020, 2, 1)))
        self.assertFalse(config.is_disabled(date(2020, 1, 1)))

    def test_no_date_picker_before_initial_load(self):
        self.assertIsNone(date_picker_config(init()[0]))


class TestUnknownEvent(unittest.TestCase):

    def test_unknown_event_raises(self):
        with self.assertRaises(TypeError):
            update(Model(), "not an event")


if __name__ == '__main__':
    unittest.main()

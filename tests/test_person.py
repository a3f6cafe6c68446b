"""Tests for the per-person disease state machine and movement."""

import pytest

from core.distributions import RandomSource
from core.events import Event, EventType, PersonTransition, Transition
from core.models import DAY, DiseaseState
from epidemic.handlers import TRANSITION_ROUTINES, handle_person_transition
from epidemic.person import Person
from epidemic.place import Place
from tests.conftest import housed_person, make_context, make_rules, pending_transitions


def progress_to(person, state, time=0.0):
    """Drive a person through the disease stages by calling them directly."""
    steps = [
        (DiseaseState.LATENT, person.infect),
        (DiseaseState.ASYMPTOMATIC, person.become_contagious),
        (DiseaseState.SYMPTOMATIC, person.feel_sick),
        (DiseaseState.BEDRIDDEN, person.go_to_bed),
        (DiseaseState.DEAD, person.die),
    ]
    for reached, step in steps:
        step(time)
        if reached == state:
            return
    raise ValueError(state)


class TestProgression:

    def test_new_person_is_uninfected_and_counted(self, context):
        person = Person(context)
        assert person.disease_state == DiseaseState.UNINFECTED
        assert context.counters[DiseaseState.UNINFECTED] == 1
        assert person.location is None

    def test_infect_moves_to_latent_and_schedules_next_stage(self, context):
        person = housed_person(context)
        person.infect(0.0)

        assert person.disease_state == DiseaseState.LATENT
        assert context.counters[DiseaseState.LATENT] == 1
        assert context.counters[DiseaseState.UNINFECTED] == 0
        assert pending_transitions(context, person) == [Transition.BECOME_CONTAGIOUS]
        assert context.events.peek_next_event().time == DAY

    def test_infect_is_idempotent(self, context):
        person = housed_person(context)
        person.infect(0.0)
        person.infect(0.5)

        assert context.counters[DiseaseState.LATENT] == 1
        assert pending_transitions(context, person) == [Transition.BECOME_CONTAGIOUS]

    def test_every_transition_has_a_routine(self):
        assert set(TRANSITION_ROUTINES) == set(Transition)

    def test_transition_event_runs_the_matching_routine(self, context):
        person = housed_person(context)
        event = Event(time=2.0, sequence=0, event_type=EventType.PERSON_TRANSITION,
                      data=PersonTransition(person, Transition.INFECT))

        handle_person_transition(event)

        assert person.disease_state == DiseaseState.LATENT
        assert context.events.peek_next_event().time == 2.0 + DAY

    def test_stale_infection_event_is_ignored(self, context):
        person = housed_person(context)
        person.infect(0.0)

        stale = Event(time=5.0, sequence=0, event_type=EventType.PERSON_TRANSITION,
                      data=PersonTransition(person, Transition.INFECT))
        handle_person_transition(stale)

        assert person.disease_state == DiseaseState.LATENT
        assert len(pending_transitions(context, person)) == 1

    def test_full_course_ending_in_death(self, context):
        home = Place(context, transmissivity=0.0)
        person = housed_person(context, home)
        person.infect(0.0)

        context.events.process_until(DAY)
        assert person.disease_state == DiseaseState.ASYMPTOMATIC
        assert home.contagious_count == 1

        context.events.run()

        assert person.disease_state == DiseaseState.DEAD
        assert context.events.current_time == 4 * DAY
        assert home.contagious_count == 0
        assert person not in home
        assert context.counters.snapshot() == {
            "uninfected": 0, "latent": 0, "asymptomatic": 0, "symptomatic": 0,
            "bedridden": 0, "recovered": 0, "dead": 1
        }

    def test_recovery_from_latent_never_touches_the_place(self):
        context = make_context(rules=make_rules(latent=1.0))
        home = Place(context, transmissivity=1.0)
        person = housed_person(context, home)
        housemate = housed_person(context, home)

        person.infect(0.0)
        context.events.run()

        assert person.disease_state == DiseaseState.RECOVERED
        assert home.contagious_count == 0
        assert housemate.infection_event is None
        assert housemate.disease_state == DiseaseState.UNINFECTED

    def test_recovery_while_contagious_lowers_the_place_count(self):
        context = make_context(rules=make_rules(asymptomatic=1.0))
        home = Place(context)
        person = housed_person(context, home)
        person.infect(0.0)

        context.events.process_until(DAY)
        assert home.contagious_count == 1

        context.events.run()

        assert person.disease_state == DiseaseState.RECOVERED
        assert home.contagious_count == 0

    @pytest.mark.parametrize("rules", [
        make_rules(latent=1.0, scatter_days=0.5),
        make_rules(asymptomatic=1.0, scatter_days=0.5),
        make_rules(symptomatic=1.0, scatter_days=0.5),
        make_rules(bedridden=1.0, bedridden_uses_own_recovery=True, scatter_days=0.5),
    ])
    def test_certain_recovery_means_nobody_dies(self, rules):
        context = make_context(rng=RandomSource(2024), rules=rules)
        home = Place(context, transmissivity=0.0)
        people = [housed_person(context, home) for _ in range(50)]
        for person in people:
            person.infect(0.0)

        context.events.run()

        assert all(p.disease_state == DiseaseState.RECOVERED for p in people)
        assert context.counters[DiseaseState.DEAD] == 0

    def test_out_of_order_transitions_are_rejected(self, context):
        person = housed_person(context)
        with pytest.raises(AssertionError):
            person.feel_sick(0.0)
        with pytest.raises(AssertionError):
            person.recover(0.0)

    def test_state_only_moves_forward(self):
        context = make_context(rng=RandomSource(5), rules=make_rules(
            asymptomatic=0.3, symptomatic=0.3, scatter_days=1.0))
        home = Place(context)
        people = [housed_person(context, home) for _ in range(30)]
        for person in people:
            person.infect(0.0)

        seen = {p: [p.disease_state] for p in people}

        def watch(event):
            person = event.data.person
            seen[person].append(person.disease_state)

        context.events.register_handler(EventType.PERSON_TRANSITION, watch)
        context.events.run()

        for states in seen.values():
            assert states == sorted(states)
            assert states[-1].is_terminal


class TestBedriddenRecoveryRule:

    def test_symptomatic_probability_is_used_by_default(self):
        context = make_context(rules=make_rules(symptomatic=1.0, bedridden=0.0))
        person = housed_person(context)
        progress_to(person, DiseaseState.BEDRIDDEN)

        assert pending_transitions(context, person)[-1] == Transition.RECOVER

    def test_bedridden_probability_when_configured(self):
        context = make_context(rules=make_rules(symptomatic=1.0, bedridden=0.0,
                                                bedridden_uses_own_recovery=True))
        person = housed_person(context)
        progress_to(person, DiseaseState.BEDRIDDEN)

        assert pending_transitions(context, person)[-1] == Transition.DIE


class TestMovement:

    def test_emplace_without_schedule_sets_home(self, context):
        home = Place(context)
        person = housed_person(context, home)

        assert person.home is home
        assert person.location is home
        assert person in home

    def test_only_one_home(self, context):
        person = housed_person(context)
        with pytest.raises(AssertionError):
            person.emplace(Place(context))

    def test_travel_moves_between_places(self, context):
        home, work = Place(context), Place(context)
        person = housed_person(context, home)

        person.travel_to(0.0, work)
        assert person.location is work
        assert person in work and person not in home

        person.go_home(1.0)
        assert person.location is home
        assert person in home and person not in work

    def test_contagious_traveller_moves_the_count(self, context):
        home, work = Place(context), Place(context)
        person = housed_person(context, home)
        progress_to(person, DiseaseState.ASYMPTOMATIC)

        person.travel_to(0.0, work)

        assert home.contagious_count == 0
        assert work.contagious_count == 1

    def test_bedridden_person_stays_home(self, context):
        home, work = Place(context), Place(context)
        person = housed_person(context, home)
        progress_to(person, DiseaseState.BEDRIDDEN)

        person.travel_to(0.0, work)

        assert person.location is home
        assert len(work) == 0
        assert home.contagious_count == 1

    def test_bedridden_person_away_can_go_home(self, context):
        home, work = Place(context), Place(context)
        person = housed_person(context, home)
        person.travel_to(0.0, work)
        progress_to(person, DiseaseState.BEDRIDDEN)
        assert work.contagious_count == 1

        person.go_home(1.0)

        assert person.location is home
        assert work.contagious_count == 0
        assert home.contagious_count == 1

    def test_dead_person_is_nowhere_and_goes_nowhere(self, context):
        home, work = Place(context), Place(context)
        person = housed_person(context, home)
        progress_to(person, DiseaseState.DEAD)

        assert person not in home
        assert home.contagious_count == 0

        person.travel_to(1.0, work)
        person.go_home(2.0)

        assert len(work) == 0
        assert person not in home
        assert home.contagious_count == 0

"""
People are the central actors in the simulation.

A person has a role, one home, a list of other places they visit on a
schedule, and a disease state that only ever moves forward.  Every state
change is a schedulable event service routine: it updates the population
statistics, tells the current place when contagiousness changes, and
schedules the next stage of the disease.
"""

import itertools
import logging
import math
from typing import Any, List, Optional, Tuple, TYPE_CHECKING

from core.context import SimulationContext
from core.events import EventHandle, EventType, PersonTransition, Transition
from core.models import DiseaseState

if TYPE_CHECKING:
    from epidemic.place import Place
    from epidemic.schedule import Schedule

logger = logging.getLogger(__name__)

_person_ids = itertools.count()


class Person:
    """
    One member of the simulated population.

    Construction deliberately does not put the person anywhere; setup must
    call ``emplace`` once with no schedule (the home) and once per visited
    place before simulation begins.
    """

    def __init__(self, context: SimulationContext, role: Any = None):
        self.person_id = next(_person_ids)
        self.context = context
        self.role = role

        self.home: Optional["Place"] = None
        self.location: Optional["Place"] = None
        self.commitments: List[Tuple["Place", "Schedule"]] = []

        self.disease_state = DiseaseState.UNINFECTED
        self._infection_event: Optional[EventHandle] = None

        context.counters.add(self.disease_state)

    # methods used during model construction, at time 0.0

    def emplace(self, place: "Place", schedule: Optional["Schedule"] = None) -> None:
        """
        Associate this person with a place.

        With a schedule, commits the person to visiting the place on that
        schedule.  Without one, the place becomes the person's home and
        the person is put there.
        """
        if schedule is not None:
            self.commitments.append((place, schedule))
            schedule.apply(self, place)
        else:
            assert self.home is None, "a person has only one home"
            self.home = place
            self.location = place
            place.arrive(0.0, self)

    # state queries

    @property
    def is_contagious(self) -> bool:
        return self.disease_state.is_contagious

    @property
    def infection_event(self) -> Optional[EventHandle]:
        """Handle of the pending infection event, if any."""
        return self._infection_event

    # exposure

    def schedule_infection(self, time: float, mean_delay: float) -> None:
        """
        Schedule (or reschedule) the time at which this person gets infected.

        Called by the current place whenever its number of contagious
        occupants changes.  Irrelevant unless the person is uninfected.  A
        non-finite mean delay means there is no exposure, so any pending
        infection is cancelled.
        """
        if self.disease_state != DiseaseState.UNINFECTED:
            return
        events = self.context.events

        if not math.isfinite(mean_delay) or mean_delay <= 0.0:
            events.cancel(self._infection_event)
            self._infection_event = None
            return

        when = time + self.context.rng.exponential(mean_delay)
        if events.is_pending(self._infection_event):
            events.reschedule(self._infection_event, when)
        else:
            self._infection_event = events.schedule(
                when,
                EventType.PERSON_TRANSITION,
                PersonTransition(self, Transition.INFECT)
            )

    # disease progression, each a schedulable event service routine

    def infect(self, time: float) -> None:
        """
        Infect this person.

        Moves the person to latent only if currently uninfected; there is
        no reinfection.
        """
        if self.disease_state != DiseaseState.UNINFECTED:
            return
        self.context.events.cancel(self._infection_event)
        self._infection_event = None

        rule = self.context.rules.latent
        duration = rule.duration(self.context.rng)
        self._set_state(DiseaseState.LATENT)

        if rule.recover(self.context.rng):
            self._schedule(time + duration, Transition.RECOVER)
        else:
            self._schedule(time + duration, Transition.BECOME_CONTAGIOUS)

    def become_contagious(self, time: float) -> None:
        """Latent → asymptomatic; the person starts spreading the disease."""
        assert self.disease_state == DiseaseState.LATENT, "not latent"
        rule = self.context.rules.asymptomatic
        duration = rule.duration(self.context.rng)
        self._set_state(DiseaseState.ASYMPTOMATIC)

        # tell place that I'm sick
        if self.location is not None:
            self.location.contagious(time, +1)

        if rule.recover(self.context.rng):
            self._schedule(time + duration, Transition.RECOVER)
        else:
            self._schedule(time + duration, Transition.FEEL_SICK)

    def feel_sick(self, time: float) -> None:
        """Asymptomatic → symptomatic."""
        assert self.disease_state == DiseaseState.ASYMPTOMATIC, "not asymptomatic"
        rule = self.context.rules.symptomatic
        duration = rule.duration(self.context.rng)
        self._set_state(DiseaseState.SYMPTOMATIC)

        if rule.recover(self.context.rng):
            self._schedule(time + duration, Transition.RECOVER)
        else:
            self._schedule(time + duration, Transition.GO_TO_BED)

    def go_to_bed(self, time: float) -> None:
        """Symptomatic → bedridden."""
        assert self.disease_state == DiseaseState.SYMPTOMATIC, "not symptomatic"
        rules = self.context.rules
        duration = rules.bedridden.duration(self.context.rng)
        self._set_state(DiseaseState.BEDRIDDEN)

        if rules.bedridden_recovery.recover(self.context.rng):
            self._schedule(time + duration, Transition.RECOVER)
        else:
            self._schedule(time + duration, Transition.DIE)

    def recover(self, time: float) -> None:
        """Any infected state → recovered and immune."""
        old_state = self.disease_state
        assert DiseaseState.LATENT <= old_state <= DiseaseState.BEDRIDDEN, \
            f"cannot recover from {old_state.label}"
        self._set_state(DiseaseState.RECOVERED)

        if old_state.is_contagious and self.location is not None:
            self.location.contagious(time, -1)

    def die(self, time: float) -> None:
        """Bedridden → dead; the person leaves wherever they are."""
        assert self.disease_state == DiseaseState.BEDRIDDEN, "not bedridden"

        # depart while still contagious so the place's count drops once
        if self.location is not None:
            self.location.depart(time, self)
        self._set_state(DiseaseState.DEAD)
        logger.debug(f"{self} died at t={time:.0f}s")

    # mobility

    def go_home(self, time: float) -> None:
        """Tell this person to go home."""
        self.travel_to(time, self.home)

    def travel_to(self, time: float, place: "Place") -> None:
        """
        Move this person to a place.

        Bedridden people never leave home, and the dead go nowhere; such
        trips are silently skipped.
        """
        if self.disease_state == DiseaseState.DEAD:
            return
        if self.disease_state == DiseaseState.BEDRIDDEN and place is not self.home:
            return
        assert self.location is not None, "person was never emplaced"
        self.location.depart(time, self)
        self.location = place
        place.arrive(time, self)

    # internals

    def _set_state(self, new_state: DiseaseState) -> None:
        self.context.counters.transition(self.disease_state, new_state)
        self.disease_state = new_state

    def _schedule(self, time: float, transition: Transition) -> EventHandle:
        return self.context.events.schedule(
            time, EventType.PERSON_TRANSITION, PersonTransition(self, transition)
        )

    def __repr__(self) -> str:
        role = getattr(self.role, "name", None)
        return f"Person({self.person_id}, {role}, {self.disease_state.label})"

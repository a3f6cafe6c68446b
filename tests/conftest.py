"""
Shared fixtures for the simulator tests.

ScriptedRandom stands in for RandomSource where a test needs to know exactly
what every draw returns.
"""

import math
from typing import Iterable, List, Optional

import pytest

from core.context import SimulationContext
from core.distributions import RandomSource
from core.events import EventManager, EventType
from core.models import DiseaseRules, InfectionRule
from epidemic.handlers import register_handlers
from epidemic.person import Person
from epidemic.place import Place


class ScriptedRandom:
    """
    Deterministic random source.

    Uniform draws come from ``uniforms`` in turn (repeating the last one),
    exponential draws return ``mean * exponential_factor`` and log-normal
    draws return ``median * exp(sigma * normal)``.
    """

    def __init__(self, uniforms: Iterable[float] = (0.5,), exponential_factor: float = 1.0,
                 normal: float = 0.0):
        self.uniforms: List[float] = list(uniforms)
        self.exponential_factor = exponential_factor
        self.normal = normal
        self.uniform_draws = 0

    def uniform(self) -> float:
        self.uniform_draws += 1
        if len(self.uniforms) > 1:
            return self.uniforms.pop(0)
        return self.uniforms[0]

    def chance(self, probability: float) -> bool:
        return self.uniform() < probability

    def exponential(self, mean: float) -> float:
        return mean * self.exponential_factor

    def log_normal(self, median: float, sigma: float) -> float:
        return median * math.exp(sigma * self.normal)

    def shuffle(self, items) -> None:
        pass


def make_rules(
    latent: float = 0.0,
    asymptomatic: float = 0.0,
    symptomatic: float = 0.0,
    bedridden: float = 0.0,
    median_days: float = 1.0,
    scatter_days: float = 0.0,
    bedridden_uses_own_recovery: bool = False
) -> DiseaseRules:
    """Rules with the given recovery probabilities and fixed stage lengths."""
    return DiseaseRules(
        latent=InfectionRule.from_description(median_days, scatter_days, latent),
        asymptomatic=InfectionRule.from_description(median_days, scatter_days, asymptomatic),
        symptomatic=InfectionRule.from_description(median_days, scatter_days, symptomatic),
        bedridden=InfectionRule.from_description(median_days, scatter_days, bedridden),
        bedridden_uses_own_recovery=bedridden_uses_own_recovery
    )


def make_context(rng=None, rules: Optional[DiseaseRules] = None,
                 keep_history: bool = False) -> SimulationContext:
    events = EventManager(keep_history=keep_history)
    register_handlers(events)
    return SimulationContext(
        events=events,
        rng=rng if rng is not None else ScriptedRandom(),
        rules=rules if rules is not None else make_rules()
    )


def housed_person(context: SimulationContext, home: Optional[Place] = None) -> Person:
    """A person living in ``home`` (a fresh place if None)."""
    person = Person(context)
    person.emplace(home if home is not None else Place(context, transmissivity=0.0))
    return person


def pending_transitions(context: SimulationContext, person: Person):
    """Transitions scheduled for a person, in firing order."""
    return [
        e.data.transition
        for e in context.events.get_events_by_type(EventType.PERSON_TRANSITION)
        if e.data.person is person
    ]


@pytest.fixture
def scripted_rng():
    return ScriptedRandom()


@pytest.fixture
def context(scripted_rng):
    return make_context(rng=scripted_rng)


@pytest.fixture
def seeded_context():
    return make_context(rng=RandomSource(1234))

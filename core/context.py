"""Shared simulation context handed to every entity that schedules or draws."""

from dataclasses import dataclass, field
from typing import Optional

from core.distributions import RandomSource
from core.events import EventManager
from core.models import DiseaseRules, PopulationCounters


@dataclass
class SimulationContext:
    """
    Everything the people, places and schedules of one run share.

    Attributes:
        events: The event manager (simulation clock and pending events)
        rng: The single random source of the run
        rules: Disease progression rules; required before anyone is infected
        counters: Live population per disease state
    """
    events: EventManager
    rng: RandomSource
    rules: Optional[DiseaseRules] = None
    counters: PopulationCounters = field(default_factory=PopulationCounters)

    @classmethod
    def create(
        cls,
        seed: Optional[int] = None,
        rules: Optional[DiseaseRules] = None,
        keep_history: bool = False
    ) -> "SimulationContext":
        return cls(
            events=EventManager(keep_history=keep_history),
            rng=RandomSource(seed),
            rules=rules
        )

"""
Core data models for the epidemic simulator.

This module defines simulated time units, the disease states a person moves
through, the statistical rules that time those moves, and the population
statistics table kept up to date by every transition.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, List
import math

from core.distributions import RandomSource


# Simulated time is measured in seconds.
SECOND = 1.0
MINUTE = 60.0 * SECOND
HOUR = 60.0 * MINUTE
DAY = 24.0 * HOUR


class DiseaseState(IntEnum):
    """
    Disease states, in the order people progress through them.

    The order also defines the columns of the statistics report.
    """
    UNINFECTED = 0
    LATENT = 1
    ASYMPTOMATIC = 2
    SYMPTOMATIC = 3
    BEDRIDDEN = 4
    RECOVERED = 5
    DEAD = 6

    @property
    def is_contagious(self) -> bool:
        """Asymptomatic through bedridden, inclusive."""
        return DiseaseState.ASYMPTOMATIC <= self <= DiseaseState.BEDRIDDEN

    @property
    def is_terminal(self) -> bool:
        return self in (DiseaseState.RECOVERED, DiseaseState.DEAD)

    @property
    def label(self) -> str:
        """Column name used in reports."""
        return self.name.lower()


@dataclass(frozen=True)
class InfectionRule:
    """
    Statistical description of one stage of the disease.

    Attributes:
        median: Median duration of the stage, in seconds
        sigma: Sigma of the log-normal duration distribution
        recovery: Probability of recovering instead of progressing
    """
    median: float
    sigma: float
    recovery: float = 0.0

    @classmethod
    def from_description(
        cls,
        median_days: float,
        scatter_days: float,
        recovery: float = 0.0
    ) -> "InfectionRule":
        """
        Build a rule from model-file units.

        The scatter is the distance in days from the median to one sigma
        above it, so ``sigma = ln((scatter + median) / median)``.
        """
        median = median_days * DAY
        scatter = scatter_days * DAY
        return cls(median=median, sigma=math.log((scatter + median) / median), recovery=recovery)

    def duration(self, rng: RandomSource) -> float:
        """Toss the dice to see how long this stage lasts."""
        return rng.log_normal(self.median, self.sigma)

    def recover(self, rng: RandomSource) -> bool:
        """Toss the dice to see if someone recovers under this rule."""
        return rng.chance(self.recovery)


@dataclass(frozen=True)
class DiseaseRules:
    """
    The four infection rules, one per disease stage.

    By default the bedridden stage decides recovery with the symptomatic
    rule's probability; set ``bedridden_uses_own_recovery`` to use the
    bedridden rule instead.
    """
    latent: InfectionRule
    asymptomatic: InfectionRule
    symptomatic: InfectionRule
    bedridden: InfectionRule
    bedridden_uses_own_recovery: bool = False

    @property
    def bedridden_recovery(self) -> InfectionRule:
        """Rule whose recovery probability decides bedridden → recovered."""
        if self.bedridden_uses_own_recovery:
            return self.bedridden
        return self.symptomatic


@dataclass
class PopulationCounters:
    """Live number of people in each disease state."""

    counts: Dict[DiseaseState, int] = field(
        default_factory=lambda: {state: 0 for state in DiseaseState}
    )

    def add(self, state: DiseaseState = DiseaseState.UNINFECTED) -> None:
        """Count a newly created person."""
        self.counts[state] += 1

    def transition(self, old: DiseaseState, new: DiseaseState) -> None:
        """Move one person from one state to another."""
        assert self.counts[old] > 0, f"no one is {old.label}"
        self.counts[old] -= 1
        self.counts[new] += 1

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    def as_row(self) -> List[int]:
        """Counts in report column order."""
        return [self.counts[state] for state in DiseaseState]

    def snapshot(self) -> Dict[str, int]:
        return {state.label: self.counts[state] for state in DiseaseState}

    def __getitem__(self, state: DiseaseState) -> int:
        return self.counts[state]

"""
Categories of places and the roles people play.

A PlaceKind describes a family of places (homes, workplaces, schools...)
sharing a size distribution and a transmissivity.  A Role describes a
fraction of the population and the kinds of places those people visit,
each with a schedule except the one home.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import logging
import math

from core.context import SimulationContext
from core.models import HOUR
from epidemic.person import Person
from epidemic.place import Place
from epidemic.schedule import Schedule

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up."""
    return int(math.floor(value + 0.5))


class PlaceKind:
    """
    A category of place.

    Args:
        name: Category name
        median: Median number of people associated with each place
        scatter: Scatter of place sizes (log-normal), in people
        transmissivity_per_hour: Infections per hour per contagious occupant
    """

    def __init__(self, name: str, median: float, scatter: float, transmissivity_per_hour: float):
        self.name = name
        self.median = median
        self.scatter = scatter
        self.transmissivity = transmissivity_per_hour / HOUR
        self.sigma = math.log((scatter + median) / median)

        # people associated with this kind, waiting to be given a place
        self._people: List[Tuple[Person, Optional[Schedule]]] = []
        self.places: List[Place] = []

        self._unfilled_place: Optional[Place] = None
        self._unfilled_capacity = 0

    def populate(self, person: Person, schedule: Optional[Schedule]) -> None:
        """
        Add a person to the population of this kind of place.

        The whole population of the kind must be known before any person
        is given a particular place, see distribute_people.
        """
        self._people.append((person, schedule))

    @property
    def pending_people(self) -> int:
        return len(self._people)

    def distribute_people(self, context: SimulationContext) -> None:
        """
        Give each associated person a concrete place of this kind.

        People are shuffled first to break correlations between roles and
        places, then poured into places whose sizes are drawn from the
        kind's log-normal distribution.  Places from an earlier
        distribution are forgotten, so each build gets its own places.
        """
        self.places = []
        self._unfilled_place = None
        self._unfilled_capacity = 0

        context.rng.shuffle(self._people)
        for person, schedule in self._people:
            person.emplace(self._find_place(context), schedule)
        logger.debug(f"Place kind {self.name}: {len(self._people)} people in {len(self.places)} places")
        self._people.clear()

    def _find_place(self, context: SimulationContext) -> Place:
        if self._unfilled_capacity <= 0:
            self._unfilled_capacity = round_half_up(context.rng.log_normal(self.median, self.sigma))
            self._unfilled_place = Place(context, kind=self, transmissivity=self.transmissivity)
            self.places.append(self._unfilled_place)
        self._unfilled_capacity -= 1
        return self._unfilled_place

    def describe(self) -> str:
        return (f"place {self.name} {self.median:g} {self.scatter:g} "
                f"{self.transmissivity * HOUR:g}")

    def __repr__(self) -> str:
        return f"PlaceKind({self.name})"


@dataclass
class Role:
    """
    A category of person.

    Attributes:
        name: Role name
        fraction: Relative share of the population (normalized over all roles)
        place_kinds: Kinds of places visited, in declaration order, each with
            its schedule; the entry with no schedule is the home
    """
    name: str
    fraction: float
    place_kinds: List[Tuple[PlaceKind, Optional[Schedule]]] = field(default_factory=list)
    number: int = 0

    @property
    def home_kind(self) -> Optional[PlaceKind]:
        for kind, schedule in self.place_kinds:
            if schedule is None:
                return kind
        return None

    def conflict_with(self, kind: PlaceKind, schedule: Optional[Schedule]) -> Optional[str]:
        """
        Explain why a place kind cannot be added to this role, if it can't.

        Returns:
            A short reason, or None if the entry is acceptable
        """
        for existing, existing_schedule in self.place_kinds:
            if existing is kind:
                return "place name reused?"
        for existing, existing_schedule in self.place_kinds:
            if existing_schedule is not None and existing_schedule.overlaps(schedule):
                return "schedule overlap?"
        if schedule is None and self.home_kind is not None:
            return "a second home?"
        return None

    def add_place_kind(self, kind: PlaceKind, schedule: Optional[Schedule] = None) -> None:
        reason = self.conflict_with(kind, schedule)
        if reason is not None:
            raise ValueError(f"{self.describe()} {kind.name}: {reason}")
        self.place_kinds.append((kind, schedule))

    def describe(self) -> str:
        return f"role {self.name} {self.fraction:g}"

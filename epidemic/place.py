"""
Places that people are associated with and may occupy.

A place tracks who is currently there and how many of them are contagious.
Whenever that number changes, every occupant's infection time is redrawn
from the new infection pressure.
"""

import itertools
import math
from typing import Any, Dict, List, TYPE_CHECKING

from core.context import SimulationContext

if TYPE_CHECKING:
    from epidemic.person import Person

_place_ids = itertools.count()


class Place:
    """
    A concrete place, an instance of some PlaceKind.

    Args:
        context: Shared simulation context
        kind: The category of place (may be None in hand-built models)
        transmissivity: Expected infections per second per contagious occupant
    """

    def __init__(self, context: SimulationContext, kind: Any = None, transmissivity: float = 0.0):
        self.place_id = next(_place_ids)
        self.context = context
        self.kind = kind
        self.transmissivity = transmissivity

        self.contagious_count = 0
        # dict keeps arrival order, so broadcasts draw in a reproducible order
        self._occupants: Dict["Person", None] = {}

    @property
    def occupants(self) -> List["Person"]:
        return list(self._occupants)

    def __contains__(self, person: "Person") -> bool:
        return person in self._occupants

    def __len__(self) -> int:
        return len(self._occupants)

    @property
    def mean_infection_delay(self) -> float:
        """Mean time until an occupant is infected; infinite if no exposure."""
        rate = self.contagious_count * self.transmissivity
        if rate <= 0.0:
            return math.inf
        return 1.0 / rate

    def arrive(self, time: float, person: "Person") -> None:
        """Make a person arrive at this place."""
        self._occupants[person] = None
        if person.is_contagious:
            self.contagious(time, +1)

    def depart(self, time: float, person: "Person") -> None:
        """Make a person depart from this place."""
        self._occupants.pop(person, None)
        if person.is_contagious:
            self.contagious(time, -1)

    def contagious(self, time: float, delta: int) -> None:
        """
        Signal that the number of contagious people here has changed.

        Called on arrival or departure of a contagious person, and when an
        occupant becomes contagious, recovers or dies.

        Args:
            time: When the change happens
            delta: +1 for one more contagious occupant, -1 for one less
        """
        self.contagious_count += delta
        assert self.contagious_count >= 0, f"negative contagious count at {self}"

        mean_delay = self.mean_infection_delay
        for person in list(self._occupants):
            person.schedule_infection(time, mean_delay)

    def __repr__(self) -> str:
        kind = getattr(self.kind, "name", None)
        return f"Place({self.place_id}, {kind}, {len(self._occupants)} occupants)"

"""
Population construction.

Turns roles and place kinds into people placed in concrete places: first
people are created per role (with initial infections picked at random),
then each place kind shuffles its people into individual places.
"""

from dataclasses import dataclass, field
from typing import List, Sequence
import logging

from core.context import SimulationContext
from core.models import DiseaseState
from epidemic.person import Person
from epidemic.place import Place
from population.roles import PlaceKind, Role, round_half_up

logger = logging.getLogger(__name__)


@dataclass
class Population:
    """Result of population construction."""
    people: List[Person] = field(default_factory=list)
    places: List[Place] = field(default_factory=list)
    roles: List[Role] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.people)

    @property
    def initially_infected(self) -> List[Person]:
        return [p for p in self.people if p.disease_state != DiseaseState.UNINFECTED]


def build_population(
    context: SimulationContext,
    roles: Sequence[Role],
    place_kinds: Sequence[PlaceKind],
    population: int,
    infected: int
) -> Population:
    """
    Create the whole population, divided up by roles, and put people in places.

    Each role gets ``round(fraction / sum_of_fractions * population)``
    people.  While people are being created, each one is infected at time
    0.0 with probability ``remaining_infected / remaining_population`` so
    that the expected number infected is exactly ``infected``.

    Args:
        context: Shared simulation context (rules must be set)
        roles: All roles of the model
        place_kinds: All place kinds of the model
        population: Total population to create
        infected: Number of initially infected people

    Returns:
        The people, places and roles created
    """
    if not roles:
        raise ValueError("no roles specified")

    result = Population(roles=list(roles))
    total_fraction = sum(r.fraction for r in roles)
    remaining_pop = population
    remaining_inf = infected

    for role in roles:
        role.number = round_half_up(role.fraction / total_fraction * population)

        for _ in range(role.number):
            person = Person(context, role)
            result.people.append(person)

            if remaining_pop > 0 and context.rng.uniform() < remaining_inf / remaining_pop:
                person.infect(0.0)
                remaining_inf -= 1
            remaining_pop -= 1

            # this does not create places yet
            for kind, schedule in role.place_kinds:
                kind.populate(person, schedule)

        logger.debug(f"Role {role.name}: {role.number} people")

    for kind in place_kinds:
        kind.distribute_people(context)
        result.places.extend(kind.places)

    logger.info(f"Built population of {result.size} in {len(result.places)} places, "
                f"{len(result.initially_infected)} initially infected")
    return result

"""
Recurring daily schedules for visiting places.

A schedule says that, every day, a person goes to some place at a start
time and stays there for a while, but only with a given likelihood on any
particular day.
"""

from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from core.events import EventType, PersonTravel, ScheduleTick
from core.models import DAY, HOUR

if TYPE_CHECKING:
    from epidemic.person import Person
    from epidemic.place import Place


@dataclass(frozen=True)
class Schedule:
    """
    Daily visit window.

    Attributes:
        start_time: Seconds after midnight when the visit starts
        duration: Length of the visit, in seconds
        likelihood: Probability the visit takes place on a given day
    """
    start_time: float
    duration: float
    likelihood: float = 1.0

    @classmethod
    def from_hours(cls, start: float, end: float, likelihood: float = 1.0) -> "Schedule":
        """Build a schedule from model-file hours, e.g. ``(8-17 0.9)``."""
        start_time = start * HOUR
        return cls(start_time=start_time, duration=end * HOUR - start_time, likelihood=likelihood)

    @property
    def end_time(self) -> float:
        return self.start_time + self.duration

    def overlaps(self, other: Optional["Schedule"]) -> bool:
        """Check whether two visit windows intersect (end points included)."""
        if other is None:
            return False
        if self.start_time <= other.start_time <= self.end_time:
            return True
        if other.start_time <= self.start_time <= other.end_time:
            return True
        return False

    def apply(self, person: "Person", place: "Place") -> None:
        """Commit a person to following this schedule for a place."""
        person.context.events.schedule(
            self.start_time, EventType.SCHEDULE_TICK, ScheduleTick(self, person, place)
        )

    def go(self, time: float, person: "Person", place: "Place") -> None:
        """
        Keep a person on schedule.

        This is a schedulable event service routine.  It always re-arms
        itself for tomorrow, then decides whether today's trip happens.
        """
        events = person.context.events
        events.schedule(time + DAY, EventType.SCHEDULE_TICK, ScheduleTick(self, person, place))

        if person.context.rng.chance(self.likelihood):
            person.travel_to(time, place)
            events.schedule(time + self.duration, EventType.PERSON_TRAVEL, PersonTravel(person))

    def __str__(self) -> str:
        return f"({self.start_time / HOUR:g}-{self.end_time / HOUR:g} {self.likelihood:g})"

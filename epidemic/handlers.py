"""
Event handlers for people, places and schedules.

Events carry a tagged payload (see core.events); these handlers interpret
each payload by calling the matching entity method with the event time.
"""

from core.events import Event, EventManager, EventType, PersonTransition, PersonTravel, ScheduleTick
from core.events import Transition
from epidemic.person import Person

# disease state routines, called as routine(person, time)
TRANSITION_ROUTINES = {
    Transition.INFECT: Person.infect,
    Transition.BECOME_CONTAGIOUS: Person.become_contagious,
    Transition.FEEL_SICK: Person.feel_sick,
    Transition.GO_TO_BED: Person.go_to_bed,
    Transition.RECOVER: Person.recover,
    Transition.DIE: Person.die,
}


def handle_person_transition(event: Event) -> None:
    data: PersonTransition = event.data
    TRANSITION_ROUTINES[data.transition](data.person, event.time)


def handle_person_travel(event: Event) -> None:
    data: PersonTravel = event.data
    if data.place is None:
        data.person.go_home(event.time)
    else:
        data.person.travel_to(event.time, data.place)


def handle_schedule_tick(event: Event) -> None:
    data: ScheduleTick = event.data
    data.schedule.go(event.time, data.person, data.place)


def register_handlers(event_manager: EventManager) -> None:
    """Register the people, place and schedule handlers with an event manager."""
    event_manager.register_handler(EventType.PERSON_TRANSITION, handle_person_transition)
    event_manager.register_handler(EventType.PERSON_TRAVEL, handle_person_travel)
    event_manager.register_handler(EventType.SCHEDULE_TICK, handle_schedule_tick)

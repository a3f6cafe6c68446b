"""Core simulation components."""

from core.models import *
from core.distributions import RandomSource
from core.events import EventManager, EventHandle, Event, EventType, Transition
from core.context import SimulationContext

__all__ = [
    'RandomSource',
    'EventManager',
    'EventHandle',
    'Event',
    'EventType',
    'Transition',
    'SimulationContext',
    'DiseaseState',
    'InfectionRule',
    'DiseaseRules',
    'PopulationCounters',
    'SECOND',
    'MINUTE',
    'HOUR',
    'DAY',
]

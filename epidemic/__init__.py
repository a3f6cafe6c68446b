"""
People, places and the schedules that move people between them.
"""

from .person import Person
from .place import Place
from .schedule import Schedule
from .handlers import register_handlers

__all__ = [
    'Person',
    'Place',
    'Schedule',
    'register_handlers'
]

"""
Population setup: roles, place kinds and the construction of people in places.
"""

from .roles import PlaceKind, Role
from .builder import Population, build_population

__all__ = [
    'PlaceKind',
    'Role',
    'Population',
    'build_population'
]

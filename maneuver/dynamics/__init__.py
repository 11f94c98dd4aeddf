"""Spacecraft state representation.

Example:
    >>> from maneuver.dynamics import SpacecraftState
    >>> state = SpacecraftState(apogee=23500.0)
"""

from maneuver.dynamics.state import FUEL_CAPACITY, SpacecraftState

__all__ = [
    "FUEL_CAPACITY",
    "SpacecraftState",
]

"""Simulation module for the maneuver levels.

Provides the tick-driven engine and the telemetry it publishes. Player or
autopilot code owns the loop and issues commands between ticks.

Example:
    >>> from maneuver.levels import get_level
    >>> from maneuver.simulation import ManeuverEngine, MissionRecorder
    >>>
    >>> engine = ManeuverEngine(get_level("trans_planetary_injection"))
    >>> recorder = MissionRecorder()
    >>> engine.begin_alignment()
    True
    >>> for _ in range(300):
    ...     recorder.record(engine.step())
"""

from maneuver.simulation.engine import RESET_MESSAGE, ManeuverEngine
from maneuver.simulation.telemetry import MissionRecorder, Telemetry

__all__ = [
    "RESET_MESSAGE",
    "ManeuverEngine",
    "MissionRecorder",
    "Telemetry",
]

"""Maneuver - Spacecraft maneuver training simulation.

This package provides a tick-driven simulation of three orbital maneuvers:
injection from a parking orbit, discrete orbit raising, and trans-planetary
injection. One engine runs all three, parameterized by a level configuration.

Example:
    >>> from maneuver import ManeuverEngine, get_level
    >>>
    >>> engine = ManeuverEngine(get_level("orbit_injection"))
    >>> engine.toggle_subsystem("ACS")
    True
    >>> engine.set_alignment(0.0)
    True
    >>> engine.set_armed(True)
    True
    >>> telemetry = engine.step()
    >>> print(f"Apogee: {telemetry.apogee:.0f} km, status: {telemetry.status.value}")
    Apogee: 400 km, status: armed
"""

__version__ = "0.1.0"

# Spacecraft state
from maneuver.dynamics import FUEL_CAPACITY, SpacecraftState

# Level configuration
from maneuver.levels import (
    LEVELS,
    AlignmentPolicy,
    LevelConfig,
    get_level,
    list_levels,
    orbit_injection,
    orbit_raising,
    trans_planetary_injection,
)

# Mission logic
from maneuver.mission import (
    Failure,
    HistorySnapshot,
    Message,
    MissionStage,
    MissionStateMachine,
    MissionStatus,
    StageTable,
    UndoController,
    Verdict,
    VerdictKind,
)

# Orbit
from maneuver.orbit import OrbitalIntegrator, OrbitModel, WindowPolicy, in_window

# Propulsion
from maneuver.propulsion import BurnAction, ContinuousBurn, DiscreteBurn, FuelLedger

# Simulation
from maneuver.simulation import ManeuverEngine, MissionRecorder, Telemetry

__all__ = [
    # Version
    "__version__",
    # State
    "FUEL_CAPACITY",
    "SpacecraftState",
    # Levels
    "LEVELS",
    "AlignmentPolicy",
    "LevelConfig",
    "get_level",
    "list_levels",
    "orbit_injection",
    "orbit_raising",
    "trans_planetary_injection",
    # Mission
    "Failure",
    "Message",
    "MissionStage",
    "StageTable",
    "MissionStatus",
    "MissionStateMachine",
    "Verdict",
    "VerdictKind",
    "HistorySnapshot",
    "UndoController",
    # Orbit
    "OrbitModel",
    "OrbitalIntegrator",
    "WindowPolicy",
    "in_window",
    # Propulsion
    "BurnAction",
    "ContinuousBurn",
    "DiscreteBurn",
    "FuelLedger",
    # Simulation
    "ManeuverEngine",
    "MissionRecorder",
    "Telemetry",
]

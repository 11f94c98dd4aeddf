"""Orbital motion and burn windows.

Example:
    >>> from maneuver.orbit import OrbitModel, OrbitalIntegrator, WindowPolicy
    >>>
    >>> integrator = OrbitalIntegrator(OrbitModel(warp_window=WindowPolicy(half_width=15.0)))
    >>> step = integrator.advance(350.0, apogee=400.0)
"""

from maneuver.orbit.integrator import (
    OrbitalIntegrator,
    OrbitModel,
    OrbitStep,
    angular_rate,
    display_velocity,
    wrap_anomaly,
)
from maneuver.orbit.window import (
    PERIGEE_WINDOW,
    WIDE_PERIGEE_WINDOW,
    WindowPolicy,
    in_window,
)

__all__ = [
    # Integrator
    "OrbitModel",
    "OrbitStep",
    "OrbitalIntegrator",
    "angular_rate",
    "display_velocity",
    "wrap_anomaly",
    # Windows
    "WindowPolicy",
    "PERIGEE_WINDOW",
    "WIDE_PERIGEE_WINDOW",
    "in_window",
]

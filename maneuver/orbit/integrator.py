"""Orbital position integrator for the maneuver levels.

This is a gameplay approximation, not a propagator. The craft moves along
its orbit at an angular rate shaped by two factors:

    rate = base_rate * size_factor * (1 + kepler_gain * cos(anomaly))

The Keplerian term makes the craft fast near perigee and slow near apogee,
and the size factor slows the whole orbit down as the apogee grows:

    size_factor = max(min_size_factor, size_numerator / (apogee + size_offset))

Time warp replaces the rate with a large constant and stops the craft exactly
on perigee as soon as it enters the warp window, which can be narrower than
the burn window.

The per-tick kernels are numba-compiled; the integrator advances by one
scheduler tick and never reads the wall clock, so identical tick sequences
give identical trajectories.

Example:
    >>> from maneuver.orbit import OrbitModel, OrbitalIntegrator, WindowPolicy
    >>>
    >>> integrator = OrbitalIntegrator(OrbitModel(base_rate=0.3, kepler_gain=0.8))
    >>> step = integrator.advance(180.0, apogee=0.0)
    >>> round(step.anomaly, 2)
    180.06
"""

import math
from dataclasses import dataclass
from typing import NamedTuple

from beartype import beartype
from numba import njit

from maneuver.orbit.window import PERIGEE_WINDOW, WindowPolicy

# =============================================================================
# Numba Kernels
# =============================================================================


@njit(cache=True)
def _wrap_degrees(angle: float) -> float:
    """Wrap angle into [0, 360)."""
    wrapped = angle % 360.0
    if wrapped >= 360.0:
        wrapped -= 360.0
    return wrapped


@njit(cache=True)
def _angular_rate_core(
    anomaly: float,
    apogee: float,
    base_rate: float,
    kepler_gain: float,
    size_numerator: float,
    size_offset: float,
    min_size_factor: float,
    boost_threshold: float,
    boost_factor: float,
) -> float:
    """Angular rate [deg/tick]. Non-positive numerator/threshold disable a term."""
    rate = base_rate

    if size_numerator > 0.0:
        size_factor = size_numerator / (apogee + size_offset)
        if size_factor < min_size_factor:
            size_factor = min_size_factor
        rate *= size_factor

    if boost_threshold > 0.0 and apogee > boost_threshold:
        rate *= boost_factor

    rads = anomaly * (math.pi / 180.0)
    return rate * (1.0 + kepler_gain * math.cos(rads))


# =============================================================================
# Configuration
# =============================================================================


@beartype
@dataclass(frozen=True)
class OrbitModel:
    """Parameters of the angular-rate approximation.

    Attributes:
        base_rate: Nominal angular rate [deg/tick]
        kepler_gain: Perigee/apogee speed contrast [-]
        size_numerator: Size damping numerator [km], None disables damping
        size_offset: Size damping offset added to apogee [km]
        min_size_factor: Floor on the size damping factor [-]
        boost_threshold: Apogee above which the rate is boosted [km], None disables
        boost_factor: Rate multiplier above the boost threshold [-]
        warp_rate: Time-warp angular rate [deg/tick], None disables warp
        warp_window: Band in which time warp stops on perigee
        fluctuation: Amplitude of the displayed speed oscillation [km/s]
    """
    base_rate: float = 0.5
    kepler_gain: float = 0.6
    size_numerator: float | None = None
    size_offset: float = 0.0
    min_size_factor: float = 0.0
    boost_threshold: float | None = None
    boost_factor: float = 1.0
    warp_rate: float | None = None
    warp_window: WindowPolicy = PERIGEE_WINDOW
    fluctuation: float = 0.0

    def __post_init__(self) -> None:
        if self.base_rate <= 0.0:
            raise ValueError(f"base_rate must be positive, got {self.base_rate}")
        if not 0.0 <= self.kepler_gain < 1.0:
            raise ValueError(f"kepler_gain must be in [0, 1), got {self.kepler_gain}")
        if self.warp_rate is not None and self.warp_rate <= 0.0:
            raise ValueError(f"warp_rate must be positive, got {self.warp_rate}")

    @property
    def supports_warp(self) -> bool:
        """Whether this orbit allows time warp to perigee."""
        return self.warp_rate is not None


# =============================================================================
# Integrator
# =============================================================================


class OrbitStep(NamedTuple):
    """Result of advancing the orbit by one tick.

    Attributes:
        anomaly: New orbital anomaly [deg]
        warping: Whether time warp is still active
        warp_arrived: True on the tick a warp stopped at perigee
    """
    anomaly: float
    warping: bool = False
    warp_arrived: bool = False


def angular_rate(anomaly: float, apogee: float, model: OrbitModel) -> float:
    """Angular rate at the current position [deg/tick]."""
    return _angular_rate_core(
        anomaly,
        apogee,
        model.base_rate,
        model.kepler_gain,
        model.size_numerator if model.size_numerator is not None else 0.0,
        model.size_offset,
        model.min_size_factor,
        model.boost_threshold if model.boost_threshold is not None else 0.0,
        model.boost_factor,
    )


def wrap_anomaly(angle: float) -> float:
    """Wrap an angle into [0, 360)."""
    return _wrap_degrees(angle)


def display_velocity(
    velocity: float,
    delta_v: float,
    anomaly: float,
    fluctuation: float,
) -> float:
    """Instantaneous speed shown to the player [km/s].

    Derived only; the simulation never reads it back.
    """
    return velocity + delta_v + fluctuation * math.cos(math.radians(anomaly))


@beartype
@dataclass(frozen=True)
class OrbitalIntegrator:
    """Advances the orbital anomaly once per tick.

    Attributes:
        model: Angular-rate parameters
    """
    model: OrbitModel

    def advance(self, anomaly: float, apogee: float, warping: bool = False) -> OrbitStep:
        """Advance by one tick.

        Args:
            anomaly: Current orbital anomaly [deg]
            apogee: Current apogee [km], drives size damping
            warping: Whether time warp is engaged

        Returns:
            OrbitStep with the new anomaly and warp state
        """
        if warping and self.model.warp_rate is not None:
            rate = self.model.warp_rate
        else:
            warping = False
            rate = angular_rate(anomaly, apogee, self.model)

        next_anomaly = wrap_anomaly(anomaly + rate)

        if warping and self.model.warp_window.contains(next_anomaly):
            return OrbitStep(anomaly=0.0, warping=False, warp_arrived=True)

        return OrbitStep(anomaly=next_anomaly, warping=warping)

    def ticks_per_revolution(self, apogee: float, limit: int = 1_000_000) -> int:
        """Count ticks for one full revolution from perigee at fixed apogee."""
        anomaly = 0.0
        travelled = 0.0
        for tick in range(1, limit + 1):
            rate = angular_rate(anomaly, apogee, self.model)
            travelled += rate
            anomaly = wrap_anomaly(anomaly + rate)
            if travelled >= 360.0:
                return tick
        raise ValueError(f"Orbit did not complete within {limit} ticks")

"""Spacecraft state for the maneuver simulation.

The state is deliberately small: an orbital position (anomaly), the two
progress metrics the levels care about (apogee and velocity), the fuel
reserve, and the auxiliary alignment value that gates burns.

Example:
    >>> from maneuver.dynamics import SpacecraftState
    >>>
    >>> state = SpacecraftState(apogee=400.0, velocity=7.2)
    >>> state.orbital_anomaly
    180.0
"""

from dataclasses import dataclass

from beartype import beartype

FUEL_CAPACITY: float = 100.0  # Full tanks [%]


@beartype
@dataclass
class SpacecraftState:
    """Mutable spacecraft state, advanced once per simulation tick.

    Attributes:
        orbital_anomaly: Position along the orbit [deg], 0 = perigee, 180 = apogee
        apogee: Apogee altitude [km]
        velocity: Orbital velocity [km/s]
        fuel: Remaining propellant [%]
        alignment: Pitch [deg] or alignment lock [%], depending on the level
        delta_v: Cumulative velocity gain from burns [km/s]
    """
    orbital_anomaly: float = 180.0
    apogee: float = 0.0
    velocity: float = 0.0
    fuel: float = FUEL_CAPACITY
    alignment: float = 0.0
    delta_v: float = 0.0

    def __post_init__(self) -> None:
        """Validate the invariants the rest of the simulation relies on."""
        if not 0.0 <= self.orbital_anomaly < 360.0:
            raise ValueError(
                f"Orbital anomaly must be in [0, 360), got {self.orbital_anomaly}"
            )
        if not 0.0 <= self.fuel <= FUEL_CAPACITY:
            raise ValueError(f"Fuel must be in [0, {FUEL_CAPACITY}], got {self.fuel}")

    def metric(self, name: str) -> float:
        """Read a progress metric by name ("apogee" or "velocity")."""
        if name == "apogee":
            return self.apogee
        if name == "velocity":
            return self.velocity
        raise ValueError(f"Unknown progress metric: {name!r}")

    def set_metric(self, name: str, value: float) -> None:
        """Write a progress metric by name ("apogee" or "velocity")."""
        if name == "apogee":
            self.apogee = value
        elif name == "velocity":
            self.velocity = value
        else:
            raise ValueError(f"Unknown progress metric: {name!r}")

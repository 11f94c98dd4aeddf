"""Burn window detection.

A burn window is an angular band centered on a point of the orbit (perigee
for every level in the game). Firing outside the window is allowed but
wasteful; the burn models decide how wasteful.

Example:
    >>> from maneuver.orbit import WindowPolicy
    >>>
    >>> window = WindowPolicy(half_width=15.0)
    >>> window.contains(350.0), window.contains(180.0)
    (True, False)
"""

from dataclasses import dataclass

from beartype import beartype
from numba import njit


@njit(cache=True)
def _angular_offset(anomaly: float, center: float) -> float:
    """Signed angular distance from center, in [-180, 180)."""
    return (anomaly - center + 180.0) % 360.0 - 180.0


@beartype
@dataclass(frozen=True)
class WindowPolicy:
    """Angular band in which a burn counts as correctly timed.

    The band is open: an anomaly exactly `half_width` away from the center is
    outside. With center 0 and half width 15 this is `a > 345 or a < 15`.

    Attributes:
        half_width: Half the band width [deg]
        center: Band center [deg], 0 = perigee
    """
    half_width: float = 15.0
    center: float = 0.0

    def __post_init__(self) -> None:
        if not 0.0 < self.half_width < 180.0:
            raise ValueError(f"half_width must be in (0, 180), got {self.half_width}")
        if not 0.0 <= self.center < 360.0:
            raise ValueError(f"center must be in [0, 360), got {self.center}")

    def offset(self, anomaly: float) -> float:
        """Signed angular distance of `anomaly` from the window center [deg]."""
        return _angular_offset(anomaly, self.center)

    def contains(self, anomaly: float) -> bool:
        """Check whether `anomaly` lies inside the window."""
        return abs(self.offset(anomaly)) < self.half_width


PERIGEE_WINDOW = WindowPolicy(half_width=15.0)
WIDE_PERIGEE_WINDOW = WindowPolicy(half_width=20.0)


def in_window(anomaly: float, policy: WindowPolicy = PERIGEE_WINDOW) -> bool:
    """Predicate form of `WindowPolicy.contains`."""
    return policy.contains(anomaly)

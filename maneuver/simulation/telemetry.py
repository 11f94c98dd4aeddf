"""Telemetry snapshots and mission recording.

The engine publishes one immutable Telemetry snapshot per tick. The
presentation layer only ever reads snapshots; it never reaches into the
engine's mutable state.
"""

from dataclasses import dataclass, field
from typing import NamedTuple

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from maneuver.mission.status import Failure, Message, MissionStatus


class Telemetry(NamedTuple):
    """Read-only view of the simulation after a tick."""
    tick: int                    # Ticks advanced since reset
    orbital_anomaly: float       # Position along the orbit [deg]
    apogee: float                # Apogee [km]
    velocity: float              # Orbital velocity [km/s]
    display_velocity: float      # Velocity shown to the player [km/s]
    fuel: float                  # Remaining fuel [%]
    alignment: float             # Pitch [deg] or lock progress [%]
    stage_index: int             # Index of the active stage
    stage_label: str             # Label of the active stage
    stage_target: float          # Target of the active stage
    metric: float                # Current progress metric
    status: MissionStatus        # Mission status
    failure: Failure | None      # Failure reason, if failed
    in_window: bool              # Whether the craft is inside the burn window
    burn_held: bool              # Whether a held burn is active
    armed: bool                  # Arm switch
    warping: bool                # Time warp engaged
    lockout: bool                # Ignition locked out after a misaligned attempt
    initialized: bool            # Orbit running (pre-flight checks passed)
    active_subsystems: tuple[str, ...]  # Subsystems switched on
    selected_burn: str | None    # Selected discrete burn key
    undo_available: bool         # Whether an undo is possible
    message: Message | None      # Latest player-facing message


@beartype
@dataclass
class MissionRecorder:
    """Collects telemetry snapshots over a run.

    Example:
        >>> recorder = MissionRecorder()
        >>> for _ in range(100):
        ...     recorder.record(engine.step())
        >>> df = recorder.to_dataframe()
    """
    frames: list[Telemetry] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.frames)

    def record(self, frame: Telemetry) -> None:
        """Append one snapshot."""
        self.frames.append(frame)

    def clear(self) -> None:
        """Drop all recorded snapshots."""
        self.frames.clear()

    @property
    def tick(self) -> NDArray[np.int64]:
        """Tick history."""
        return np.array([f.tick for f in self.frames], dtype=np.int64)

    @property
    def anomaly(self) -> NDArray[np.float64]:
        """Orbital anomaly history [deg]."""
        return np.array([f.orbital_anomaly for f in self.frames], dtype=np.float64)

    @property
    def apogee(self) -> NDArray[np.float64]:
        """Apogee history [km]."""
        return np.array([f.apogee for f in self.frames], dtype=np.float64)

    @property
    def velocity(self) -> NDArray[np.float64]:
        """Velocity history [km/s]."""
        return np.array([f.velocity for f in self.frames], dtype=np.float64)

    @property
    def fuel(self) -> NDArray[np.float64]:
        """Fuel history [%]."""
        return np.array([f.fuel for f in self.frames], dtype=np.float64)

    @property
    def statuses(self) -> list[MissionStatus]:
        """Status history."""
        return [f.status for f in self.frames]

    def to_dataframe(self):
        """Convert to Polars DataFrame."""
        import polars as pl

        return pl.DataFrame({
            "tick": self.tick,
            "anomaly": self.anomaly,
            "apogee": self.apogee,
            "velocity": self.velocity,
            "display_velocity": [f.display_velocity for f in self.frames],
            "fuel": self.fuel,
            "alignment": [f.alignment for f in self.frames],
            "stage_index": [f.stage_index for f in self.frames],
            "status": [f.status.value for f in self.frames],
            "failure": [f.failure.code if f.failure is not None else None for f in self.frames],
            "in_window": [f.in_window for f in self.frames],
            "burn_held": [f.burn_held for f in self.frames],
        })

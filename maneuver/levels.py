"""Level configuration and presets.

The three maneuver levels share one engine and differ only in the parts
plugged into it: orbit shape, window width, burn model, validator, stage
table, and alignment rules. Each preset below reproduces one level of the
game.

Example:
    >>> from maneuver.levels import get_level, list_levels
    >>>
    >>> list_levels()
    ['orbit_injection', 'orbit_raising', 'trans_planetary_injection']
    >>> config = get_level("orbit_raising")
    >>> config.stages[0].target
    40000.0
"""

from collections.abc import Callable
from dataclasses import dataclass

from beartype import beartype

from maneuver.dynamics.state import FUEL_CAPACITY, SpacecraftState
from maneuver.mission.stages import MissionStage, StageTable
from maneuver.mission.status import FUEL_DEPLETED, FUEL_EXHAUSTED, Failure
from maneuver.mission.validator import (
    CeilingValidator,
    ToleranceValidator,
    Validator,
    VelocityBandValidator,
)
from maneuver.orbit.integrator import OrbitModel
from maneuver.orbit.window import PERIGEE_WINDOW, WIDE_PERIGEE_WINDOW, WindowPolicy
from maneuver.propulsion.burn import BurnModel, ContinuousBurn, DiscreteBurn

# =============================================================================
# Alignment
# =============================================================================

LOCKOUT = "lockout"
FAIL = "fail"


@beartype
@dataclass(frozen=True)
class AlignmentPolicy:
    """Rules for the auxiliary alignment value that gates burns.

    Attributes:
        initial: Alignment at level start
        target: Required alignment
        tolerance: Allowed deviation from the target
        minimum: Lowest settable alignment
        maximum: Highest settable alignment
        ramp_rate: Alignment gained per tick while aligning (0 = manual only)
        misaligned: "lockout" blocks a misaligned ignite briefly, "fail" aborts
        lockout_ticks: Duration of a misalignment lockout [ticks]
        locked_during_burn: Whether alignment is frozen while a burn is held
        drift_on_stage: Whether stage completion knocks alignment out of tolerance
        drift_min: Smallest post-stage drift magnitude
        drift_span: Random extra drift on top of `drift_min`
    """
    initial: float = 0.0
    target: float = 0.0
    tolerance: float = 5.0
    minimum: float = -45.0
    maximum: float = 45.0
    ramp_rate: float = 0.0
    misaligned: str = LOCKOUT
    lockout_ticks: int = 60
    locked_during_burn: bool = True
    drift_on_stage: bool = False
    drift_min: float = 8.0
    drift_span: float = 12.0

    def __post_init__(self) -> None:
        if self.minimum > self.maximum:
            raise ValueError(f"minimum ({self.minimum}) exceeds maximum ({self.maximum})")
        if not self.minimum <= self.initial <= self.maximum:
            raise ValueError(f"initial alignment {self.initial} outside [{self.minimum}, {self.maximum}]")
        if self.misaligned not in (LOCKOUT, FAIL):
            raise ValueError(f"misaligned must be {LOCKOUT!r} or {FAIL!r}, got {self.misaligned!r}")
        if self.drift_on_stage and self.drift_min <= self.tolerance:
            raise ValueError("drift_min must exceed tolerance so drift always misaligns")

    def aligned(self, value: float) -> bool:
        """Check whether `value` is within tolerance of the target."""
        return abs(value - self.target) <= self.tolerance

    def clamp(self, value: float) -> float:
        """Clamp `value` to the settable range."""
        return min(self.maximum, max(self.minimum, value))


# =============================================================================
# Level Configuration
# =============================================================================


@beartype
@dataclass(frozen=True)
class LevelConfig:
    """Everything that distinguishes one maneuver level from another.

    Attributes:
        name: Registry key
        title: Display title
        metric: Progress metric, "apogee" or "velocity"
        stages: Ordered mission stages
        orbit: Angular-rate model
        window: Burn window
        burn: Burn model (continuous hold or discrete menu)
        validator: Decision table applied after a burn
        depletion: Failure recorded when the tanks run dry
        alignment: Alignment rules, None if the level has no alignment control
        subsystems: Names of toggleable subsystems
        required_subsystem: Subsystem that must be on to ignite
        requires_initialization: Freeze the orbit until the required subsystem
            is on and alignment is within tolerance
        requires_arming: Ignition needs the arm switch set
        undo_enabled: Discrete burns can be undone
        start_anomaly: Orbital anomaly at level start [deg]
        start_apogee: Apogee at level start [km]
        start_velocity: Velocity at level start [km/s]
        start_fuel: Fuel at level start [%]
        briefing: Message shown at level start
    """
    name: str
    title: str
    metric: str
    stages: StageTable
    orbit: OrbitModel
    window: WindowPolicy
    burn: BurnModel
    validator: Validator
    depletion: Failure
    alignment: AlignmentPolicy | None = None
    subsystems: tuple[str, ...] = ()
    required_subsystem: str | None = None
    requires_initialization: bool = False
    requires_arming: bool = False
    undo_enabled: bool = False
    start_anomaly: float = 180.0
    start_apogee: float = 0.0
    start_velocity: float = 0.0
    start_fuel: float = FUEL_CAPACITY
    briefing: str = ""

    def __post_init__(self) -> None:
        if self.metric not in ("apogee", "velocity"):
            raise ValueError(f"metric must be 'apogee' or 'velocity', got {self.metric!r}")
        if self.required_subsystem is not None and self.required_subsystem not in self.subsystems:
            raise ValueError(
                f"Required subsystem {self.required_subsystem!r} not in {list(self.subsystems)}"
            )
        if self.requires_initialization and (self.alignment is None or self.required_subsystem is None):
            raise ValueError("Initialization needs both an alignment policy and a required subsystem")
        if self.undo_enabled and not self.is_discrete:
            raise ValueError("Undo is only supported for discrete burns")

    @property
    def is_discrete(self) -> bool:
        """Whether burns are fired from a discrete menu."""
        return isinstance(self.burn, DiscreteBurn)

    def initial_state(self) -> SpacecraftState:
        """Spacecraft state at level start."""
        return SpacecraftState(
            orbital_anomaly=self.start_anomaly,
            apogee=self.start_apogee,
            velocity=self.start_velocity,
            fuel=self.start_fuel,
            alignment=self.alignment.initial if self.alignment is not None else 0.0,
            delta_v=0.0,
        )


# =============================================================================
# Presets
# =============================================================================


def orbit_injection() -> LevelConfig:
    """Held apogee-raising burns from a 400 km parking orbit.

    Three transfer stages, each accepted within a tolerance band on release.
    The attitude control system (ACS) must be on and pitch aligned before the
    orbit starts moving, and every completed stage knocks pitch out of
    alignment again.
    """
    return LevelConfig(
        name="orbit_injection",
        title="Injection",
        metric="apogee",
        stages=StageTable((
            MissionStage("Transfer 1", 16000.0, 2500.0),
            MissionStage("Transfer 2", 20000.0, 2000.0),
            MissionStage("Final Injection", 23500.0, 1000.0),
        )),
        orbit=OrbitModel(
            base_rate=0.5,
            kepler_gain=0.6,
            size_numerator=5000.0,
            size_offset=5000.0,
            fluctuation=1.5,
        ),
        window=PERIGEE_WINDOW,
        burn=ContinuousBurn(
            gain=80.0,
            fuel_rate=0.02,
            idle_fraction=0.1,
            out_of_window_efficiency=0.0,
            delta_v_gain=0.001,
        ),
        validator=ToleranceValidator(),
        depletion=Failure(FUEL_DEPLETED, "Propellant exhausted during the burn."),
        alignment=AlignmentPolicy(
            initial=-15.0,
            target=0.0,
            tolerance=5.0,
            minimum=-45.0,
            maximum=45.0,
            misaligned=LOCKOUT,
            drift_on_stage=True,
        ),
        subsystems=("ACS", "TM"),
        required_subsystem="ACS",
        requires_initialization=True,
        requires_arming=True,
        start_apogee=400.0,
        start_velocity=7.2,
        briefing="SYSTEM IDLE: ACTIVATE ACS & ALIGN PITCH",
    )


def orbit_raising() -> LevelConfig:
    """Discrete perigee burns raising apogee toward the TMI orbit.

    Each burn is picked from a menu; stages advance to the first target the
    new apogee has not yet reached. Anything above 300,000 km is fatal.
    """
    return LevelConfig(
        name="orbit_raising",
        title="Orbit Raising",
        metric="apogee",
        stages=StageTable((
            MissionStage("Burn 1", 40000.0),
            MissionStage("Burn 2", 71600.0),
            MissionStage("Burn 3", 100000.0),
            MissionStage("Burn 4", 192000.0),
            MissionStage("Final TMI Burn", 282000.0),
        )),
        orbit=OrbitModel(
            base_rate=0.8,
            kepler_gain=0.5,
            size_numerator=40000.0,
            size_offset=20000.0,
            min_size_factor=0.4,
            boost_threshold=90000.0,
            boost_factor=1.5,
            warp_rate=25.0,
            warp_window=PERIGEE_WINDOW,
        ),
        window=WIDE_PERIGEE_WINDOW,
        burn=DiscreteBurn(),
        validator=CeilingValidator(ceiling=300000.0),
        depletion=Failure(FUEL_DEPLETED, "Propellant tanks are empty. Mission aborted."),
        undo_enabled=True,
        start_apogee=23500.0,
        briefing="Strategy Tip: Use Small or Medium burns to save fuel. Strong burns are wasteful!",
    )


def trans_planetary_injection() -> LevelConfig:
    """Single held escape burn from parking orbit to Mars transfer.

    The navigation computer must lock on (alignment ramps to 100%) before
    ignition. The burn is judged on release: velocity must land in
    [11.1, 11.3] km/s while the craft is inside the perigee window.
    """
    return LevelConfig(
        name="trans_planetary_injection",
        title="Trans-Mars Injection",
        metric="velocity",
        stages=StageTable((MissionStage("Trans-Mars Injection", 11.2, 0.1),)),
        orbit=OrbitModel(base_rate=0.3, kepler_gain=0.8),
        window=PERIGEE_WINDOW,
        burn=ContinuousBurn(
            gain=0.015,
            fuel_rate=0.4,
            idle_fraction=1.0,
            out_of_window_efficiency=0.3,
        ),
        validator=VelocityBandValidator(minimum=11.1, maximum=11.3),
        depletion=Failure(FUEL_EXHAUSTED, "Ran out of fuel before reaching escape velocity."),
        alignment=AlignmentPolicy(
            initial=0.0,
            target=100.0,
            tolerance=0.0,
            minimum=0.0,
            maximum=100.0,
            ramp_rate=0.5,
            misaligned=FAIL,
            locked_during_burn=False,
        ),
        start_velocity=10.1,
        briefing="Align the navigation computer with the Mars vector, then burn at perigee.",
    )


LEVELS: dict[str, Callable[[], LevelConfig]] = {
    "orbit_injection": orbit_injection,
    "orbit_raising": orbit_raising,
    "trans_planetary_injection": trans_planetary_injection,
}


def list_levels() -> list[str]:
    """Names of all level presets, in play order."""
    return list(LEVELS)


def get_level(name: str) -> LevelConfig:
    """Build the preset configuration for level `name`."""
    try:
        factory = LEVELS[name]
    except KeyError as err:
        raise ValueError(f"Unknown level: {name}. Valid: {list_levels()}") from err
    return factory()

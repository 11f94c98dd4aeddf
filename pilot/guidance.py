"""Scripted autopilots for the maneuver levels.

Each autopilot reads a Telemetry snapshot and returns a PilotCommand; it
never touches the engine directly. `execute()` applies a command through the
engine's public control surface and `fly()` owns the loop:

    telemetry = engine.telemetry()
    cmd = autopilot.compute(telemetry)    # Decide
    execute(engine, cmd)                  # Command
    telemetry = engine.step()             # Advance

Strategies:
    InjectionAutopilot: hold the burn through each perigee pass until the
        stage target is reached, realigning pitch after every stage.
    RaisingAutopilot: plan the cheapest burn combination that lands apogee
        between the final target and the ceiling, then warp to perigee and
        fire it one burn per tick.
    EscapeAutopilot: lock the navigation computer, light the engine a fixed
        lead angle before perigee, and release at escape velocity.
"""

import itertools
import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import NamedTuple

from maneuver.levels import LevelConfig
from maneuver.mission.status import MissionStatus
from maneuver.mission.validator import CeilingValidator, VelocityBandValidator
from maneuver.orbit.window import WindowPolicy
from maneuver.propulsion.burn import BurnAction, DiscreteBurn
from maneuver.simulation.engine import ManeuverEngine
from maneuver.simulation.telemetry import Telemetry

logger = logging.getLogger(__name__)


class AutopilotPhase(IntEnum):
    """Autopilot phases."""
    PREFLIGHT = 1
    ALIGN = 2
    COAST = 3
    BURN = 4
    DONE = 5


class PilotCommand(NamedTuple):
    """Commands issued for one tick.

    Attributes:
        enable: Subsystems to switch on
        alignment: Alignment to set, None to leave unchanged
        begin_alignment: Start the alignment procedure
        arm: Set the arm switch
        strength: Discrete burn to select
        warp: Request time warp to perigee
        start_burn: Press the burn control
        stop_burn: Release the burn control
    """
    enable: tuple[str, ...] = ()
    alignment: float | None = None
    begin_alignment: bool = False
    arm: bool = False
    strength: str | None = None
    warp: bool = False
    start_burn: bool = False
    stop_burn: bool = False


def execute(engine: ManeuverEngine, command: PilotCommand) -> None:
    """Apply `command` to `engine` in a fixed order."""
    active = engine.telemetry().active_subsystems
    for name in command.enable:
        if name not in active:
            engine.toggle_subsystem(name)
    if command.alignment is not None:
        engine.set_alignment(command.alignment)
    if command.begin_alignment:
        engine.begin_alignment()
    if command.arm:
        engine.set_armed(True)
    if command.strength is not None:
        engine.select_burn_strength(command.strength)
    if command.warp:
        engine.request_time_warp()
    if command.stop_burn:
        engine.stop_burn()
    if command.start_burn:
        engine.start_burn()


def fly(engine: ManeuverEngine, autopilot, max_ticks: int = 50_000) -> Telemetry:
    """Run `autopilot` against `engine` until the mission ends.

    Args:
        engine: Engine to fly
        autopilot: Any object with `compute(telemetry) -> PilotCommand`
        max_ticks: Tick budget

    Returns:
        Final telemetry
    """
    telemetry = engine.telemetry()
    for _ in range(max_ticks):
        command = autopilot.compute(telemetry)
        if telemetry.status.is_terminal:
            break
        execute(engine, command)
        telemetry = engine.step()
    else:
        logger.warning("Autopilot did not finish within %d ticks", max_ticks)
    return engine.telemetry()


# =============================================================================
# Injection
# =============================================================================


@dataclass
class InjectionAutopilot:
    """Held-burn autopilot for the injection level.

    Attributes:
        subsystem: Subsystem that must be on before ignition
        pitch: Pitch to hold [deg]
    """
    subsystem: str = "ACS"
    pitch: float = 0.0

    # Internal state
    _phase: AutopilotPhase = field(default=AutopilotPhase.PREFLIGHT)

    @classmethod
    def from_level(cls, config: LevelConfig) -> "InjectionAutopilot":
        """Build an autopilot matching `config`."""
        if config.alignment is None or config.required_subsystem is None:
            raise ValueError(f"Level {config.name!r} is not an injection level")
        return cls(subsystem=config.required_subsystem, pitch=config.alignment.target)

    @property
    def phase(self) -> AutopilotPhase:
        return self._phase

    def compute(self, telemetry: Telemetry) -> PilotCommand:
        if telemetry.status.is_terminal:
            self._phase = AutopilotPhase.DONE
            return PilotCommand()

        if telemetry.burn_held:
            self._phase = AutopilotPhase.BURN
            # Cut off at target, or as soon as the pass ends
            done = telemetry.metric >= telemetry.stage_target
            return PilotCommand(stop_burn=done or not telemetry.in_window)

        if not telemetry.initialized:
            self._phase = AutopilotPhase.PREFLIGHT
        else:
            self._phase = AutopilotPhase.COAST

        ignite = (
            telemetry.in_window
            and not telemetry.lockout
            and telemetry.metric < telemetry.stage_target
        )
        return PilotCommand(
            enable=(self.subsystem,),
            alignment=self.pitch if telemetry.alignment != self.pitch else None,
            arm=not telemetry.armed,
            start_burn=ignite,
        )


# =============================================================================
# Orbit Raising
# =============================================================================


def plan_burns(
    apogee: float,
    fuel: float,
    actions: tuple[BurnAction, ...],
    goal: float,
    ceiling: float,
) -> list[str]:
    """Cheapest burn sequence taking `apogee` into `[goal, ceiling]`.

    Ties on fuel are broken by fewer burns. The sequence is ordered largest
    burn first.

    Raises:
        ValueError: If no combination affordable with `fuel` lands in range
    """
    ranges = [range(int(fuel // action.fuel_cost) + 1) for action in actions]
    best: tuple[tuple[float, int], tuple[int, ...]] | None = None

    for counts in itertools.product(*ranges):
        cost = sum(n * action.fuel_cost for n, action in zip(counts, actions))
        if cost > fuel:
            continue
        final = apogee + sum(n * action.gain for n, action in zip(counts, actions))
        if not goal <= final <= ceiling:
            continue
        key = (cost, sum(counts))
        if best is None or key < best[0]:
            best = (key, counts)

    if best is None:
        raise ValueError(
            f"No burn plan reaches [{goal:.0f}, {ceiling:.0f}] km from {apogee:.0f} km "
            f"with {fuel:.1f}% fuel"
        )

    ordered = sorted(zip(best[1], actions), key=lambda item: item[1].gain, reverse=True)
    return [action.key for n, action in ordered for _ in range(n)]


@dataclass
class RaisingAutopilot:
    """Discrete-burn autopilot for the orbit-raising level.

    Attributes:
        actions: Available burns
        goal: Final stage target [km]
        ceiling: Highest survivable apogee [km]
    """
    actions: tuple[BurnAction, ...]
    goal: float
    ceiling: float

    # Internal state
    _phase: AutopilotPhase = field(default=AutopilotPhase.PREFLIGHT)
    _plan: list[str] | None = field(default=None)

    @classmethod
    def from_level(cls, config: LevelConfig) -> "RaisingAutopilot":
        """Build an autopilot matching `config`."""
        if not isinstance(config.burn, DiscreteBurn) or not isinstance(config.validator, CeilingValidator):
            raise ValueError(f"Level {config.name!r} is not an orbit-raising level")
        return cls(
            actions=config.burn.actions,
            goal=config.stages[config.stages.last_index].target,
            ceiling=config.validator.ceiling,
        )

    @property
    def phase(self) -> AutopilotPhase:
        return self._phase

    @property
    def plan(self) -> list[str]:
        """Burns still to fire."""
        return list(self._plan or [])

    def compute(self, telemetry: Telemetry) -> PilotCommand:
        if telemetry.status.is_terminal:
            self._phase = AutopilotPhase.DONE
            return PilotCommand()

        if self._plan is None:
            self._plan = plan_burns(
                telemetry.apogee, telemetry.fuel, self.actions, self.goal, self.ceiling,
            )
            logger.info("Burn plan: %s", ", ".join(self._plan))

        if not telemetry.in_window:
            self._phase = AutopilotPhase.COAST
            return PilotCommand(warp=not telemetry.warping)

        if not self._plan:
            return PilotCommand()

        self._phase = AutopilotPhase.BURN
        return PilotCommand(strength=self._plan.pop(0), start_burn=True)


# =============================================================================
# Escape
# =============================================================================


@dataclass
class EscapeAutopilot:
    """Held-burn autopilot for the trans-planetary injection level.

    The engine is lit `lead_angle` degrees before perigee so that the
    low-efficiency pre-window burn plus the in-window burn reach the release
    velocity just after perigee.

    Attributes:
        window: Burn window
        release_velocity: Velocity at which to cut off [km/s]
        lead_angle: Ignition point before perigee [deg]
    """
    window: WindowPolicy
    release_velocity: float = 11.2
    lead_angle: float = 75.0

    # Internal state
    _phase: AutopilotPhase = field(default=AutopilotPhase.PREFLIGHT)

    @classmethod
    def from_level(cls, config: LevelConfig) -> "EscapeAutopilot":
        """Build an autopilot matching `config`."""
        if not isinstance(config.validator, VelocityBandValidator):
            raise ValueError(f"Level {config.name!r} is not an escape level")
        band = config.validator
        return cls(window=config.window, release_velocity=(band.minimum + band.maximum) / 2.0)

    @property
    def phase(self) -> AutopilotPhase:
        return self._phase

    def compute(self, telemetry: Telemetry) -> PilotCommand:
        if telemetry.status.is_terminal:
            self._phase = AutopilotPhase.DONE
            return PilotCommand()

        if telemetry.status is MissionStatus.IDLE:
            self._phase = AutopilotPhase.ALIGN
            return PilotCommand(begin_alignment=True)
        if telemetry.status is MissionStatus.ALIGNING:
            return PilotCommand()

        if telemetry.burn_held:
            self._phase = AutopilotPhase.BURN
            return PilotCommand(stop_burn=telemetry.metric >= self.release_velocity)

        self._phase = AutopilotPhase.COAST
        offset = self.window.offset(telemetry.orbital_anomaly)
        return PilotCommand(start_burn=-self.lead_angle <= offset < 0.0)

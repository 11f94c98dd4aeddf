"""Tick-driven maneuver engine.

The engine owns the truth state of one level and advances it one tick at a
time. Player (or autopilot) code drives it through a small set of commands:

    - engine.step() -> advance one tick, returns Telemetry
    - engine.start_burn() / engine.stop_burn() -> press/release the burn
    - engine.set_alignment(), engine.begin_alignment(), engine.set_armed()
    - engine.toggle_subsystem(), engine.select_burn_strength()
    - engine.request_time_warp(), engine.undo(), engine.reset()

Within one tick the order is fixed: orbit advance, window check, alignment
ramp, burn effect. Validation of a held burn happens on release, against the
window at that instant. Once the mission is terminal, `step()` stops mutating
anything until `reset()`.

Example:
    >>> from maneuver.levels import get_level
    >>> from maneuver.simulation import ManeuverEngine
    >>>
    >>> engine = ManeuverEngine(get_level("orbit_raising"))
    >>> engine.request_time_warp()
    True
    >>> while not engine.in_window:
    ...     telemetry = engine.step()
    >>> engine.select_burn_strength("MEDIUM")
    >>> engine.start_burn()
    True
    >>> engine.telemetry().apogee
    93500.0
"""

import logging
from dataclasses import dataclass, field

import numpy as np
from beartype import beartype

from maneuver.dynamics.state import SpacecraftState
from maneuver.levels import FAIL, LOCKOUT, LevelConfig
from maneuver.mission.history import UndoController
from maneuver.mission.status import (
    ACS_TUMBLED,
    ALIGNMENT_ERROR,
    VECTOR_MISALIGNED,
    Failure,
    Message,
    MissionStateMachine,
    MissionStatus,
)
from maneuver.mission.validator import Verdict, VerdictKind
from maneuver.orbit.integrator import OrbitalIntegrator, display_velocity
from maneuver.propulsion.burn import ContinuousBurn, DiscreteBurn
from maneuver.propulsion.ledger import FuelLedger
from maneuver.simulation.telemetry import Telemetry

logger = logging.getLogger(__name__)

RESET_MESSAGE = "Simulation Reset. Ready for liftoff."


@beartype
@dataclass
class ManeuverEngine:
    """Step-driven simulation of one maneuver level.

    Attributes:
        config: Level configuration
        seed: Seed for the alignment-drift random stream
    """
    config: LevelConfig
    seed: int = 0

    # Internal
    state: SpacecraftState = field(init=False, repr=False)
    machine: MissionStateMachine = field(init=False, repr=False)
    ledger: FuelLedger = field(init=False, repr=False)
    undo_controller: UndoController = field(init=False, repr=False)
    stage_index: int = field(default=0, init=False)
    tick_count: int = field(default=0, init=False)
    subsystems: dict[str, bool] = field(default_factory=dict, init=False)
    initialized: bool = field(default=False, init=False)
    warping: bool = field(default=False, init=False)
    aligning: bool = field(default=False, init=False)
    lockout_remaining: int = field(default=0, init=False)
    selected_burn: str | None = field(default=None, init=False)
    message: Message | None = field(default=None, init=False)
    _integrator: OrbitalIntegrator = field(init=False, repr=False)
    _rng: np.random.Generator = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._integrator = OrbitalIntegrator(self.config.orbit)
        self._initialize()

    def _initialize(self) -> None:
        """Put every piece of state back to its level-start value."""
        config = self.config
        self.state = config.initial_state()
        self.ledger = FuelLedger(self.state)
        self.machine = MissionStateMachine()
        self.undo_controller = UndoController()
        self.stage_index = 0
        self.tick_count = 0
        self.subsystems = {name: False for name in config.subsystems}
        self.initialized = not config.requires_initialization
        self.warping = False
        self.aligning = False
        self.lockout_remaining = 0
        self.selected_burn = config.burn.default_key if isinstance(config.burn, DiscreteBurn) else None
        self.message = Message(config.briefing) if config.briefing else None
        self._rng = np.random.default_rng(self.seed)

    # -------------------------------------------------------------------------
    # Read-only views
    # -------------------------------------------------------------------------

    @property
    def status(self) -> MissionStatus:
        """Current mission status."""
        return self.machine.status

    @property
    def failure(self) -> Failure | None:
        """Failure reason, if the mission failed."""
        return self.machine.failure

    @property
    def metric(self) -> float:
        """Current value of the level's progress metric."""
        return self.state.metric(self.config.metric)

    @property
    def in_window(self) -> bool:
        """Whether the craft is currently inside the burn window."""
        return self.config.window.contains(self.state.orbital_anomaly)

    @property
    def aligned(self) -> bool:
        """Whether alignment is within tolerance (always true without alignment control)."""
        policy = self.config.alignment
        return policy is None or policy.aligned(self.state.alignment)

    def telemetry(self) -> Telemetry:
        """Snapshot the current simulation state."""
        stage = self.config.stages.active(self.stage_index)
        return Telemetry(
            tick=self.tick_count,
            orbital_anomaly=self.state.orbital_anomaly,
            apogee=self.state.apogee,
            velocity=self.state.velocity,
            display_velocity=display_velocity(
                self.state.velocity,
                self.state.delta_v,
                self.state.orbital_anomaly,
                self.config.orbit.fluctuation,
            ),
            fuel=self.state.fuel,
            alignment=self.state.alignment,
            stage_index=self.stage_index,
            stage_label=stage.label,
            stage_target=stage.target,
            metric=self.metric,
            status=self.machine.status,
            failure=self.machine.failure,
            in_window=self.in_window,
            burn_held=self.machine.burn_held,
            armed=self.machine.armed,
            warping=self.warping,
            lockout=self.lockout_remaining > 0,
            initialized=self.initialized,
            active_subsystems=tuple(name for name, on in self.subsystems.items() if on),
            selected_burn=self.selected_burn,
            undo_available=self.undo_controller.available,
            message=self.message,
        )

    # -------------------------------------------------------------------------
    # Tick
    # -------------------------------------------------------------------------

    def step(self) -> Telemetry:
        """Advance the simulation by one tick."""
        if self.machine.is_terminal:
            return self.telemetry()

        self.tick_count += 1
        if self.lockout_remaining > 0:
            self.lockout_remaining -= 1

        self._check_initialization()
        if not self.initialized:
            return self.telemetry()

        orbit = self._integrator.advance(
            self.state.orbital_anomaly,
            self.state.apogee,
            self.warping,
        )
        self.state.orbital_anomaly = orbit.anomaly
        if orbit.warp_arrived:
            self.message = Message("Perigee Reached! Time warp disengaged. Fire engines now!", "success")
        self.warping = orbit.warping

        window = self.in_window

        if self.aligning:
            self._ramp_alignment()

        self._apply_held_burn(self.machine.burn_held, window)

        return self.telemetry()

    def run(self, ticks: int) -> Telemetry:
        """Advance `ticks` ticks, stopping early once the mission ends."""
        telemetry = self.telemetry()
        for _ in range(ticks):
            if self.machine.is_terminal:
                break
            telemetry = self.step()
        return telemetry

    def _check_initialization(self) -> None:
        """Latch `initialized` once pre-flight checks pass."""
        if self.initialized:
            return
        required = self.config.required_subsystem
        if required is not None and self.subsystems[required] and self.aligned:
            self.initialized = True
            self.message = Message("SYSTEMS GO. Orbit propagation started.", "success")
            logger.info("Pre-flight checks passed at tick %d", self.tick_count)

    def _ramp_alignment(self) -> None:
        policy = self.config.alignment
        self.state.alignment = policy.clamp(self.state.alignment + policy.ramp_rate)
        if policy.aligned(self.state.alignment):
            self._complete_alignment()

    def _complete_alignment(self) -> None:
        self.aligning = False
        self.machine.arm()
        self.message = Message("Vector locked. Ready to burn.", "success")
        logger.info("Alignment locked at %.1f", self.state.alignment)

    def _apply_held_burn(self, held: bool, in_window: bool) -> None:
        """Apply one tick of a held continuous burn."""
        burn = self.config.burn
        if not held or not isinstance(burn, ContinuousBurn):
            return

        policy = self.config.alignment
        if policy is not None and policy.misaligned == FAIL and not self.aligned:
            self._fail(Failure(VECTOR_MISALIGNED, "Tried to burn without aligning trajectory."))
            return

        effect = burn.tick(in_window)
        self.ledger.debit(effect.fuel_cost)
        if self.ledger.is_depleted:
            self._fail(self.config.depletion)
            return

        name = self.config.metric
        self.state.set_metric(name, self.state.metric(name) + effect.gain)
        self.state.delta_v += effect.delta_v

    # -------------------------------------------------------------------------
    # Burn commands
    # -------------------------------------------------------------------------

    def start_burn(self) -> bool:
        """Press the burn control.

        For continuous levels this begins a held burn; for discrete levels it
        fires the selected burn immediately. Returns whether anything fired.
        """
        if self.machine.is_terminal:
            logger.debug("Burn ignored: mission is %s", self.machine.status.value)
            return False
        if isinstance(self.config.burn, DiscreteBurn):
            return self._fire(self.config.burn)
        return self._ignite()

    def stop_burn(self) -> None:
        """Release the burn control and judge a held burn."""
        if not self.machine.burn_held:
            return
        self.machine.release()
        if self.machine.status is not MissionStatus.BURNING:
            return
        verdict = self.config.validator.evaluate(
            self.metric,
            self.stage_index,
            self.config.stages,
            self.in_window,
        )
        self._apply_verdict(verdict)

    def _ignite(self) -> bool:
        config = self.config
        required = config.required_subsystem
        if required is not None and not self.subsystems[required]:
            self._fail(Failure(ACS_TUMBLED, f"Ignition with {required} offline. Vehicle tumbled."))
            return False
        if config.requires_arming and not self.machine.armed:
            logger.debug("Burn ignored: engine not armed")
            return False
        if self.machine.burn_held:
            return False
        if self.lockout_remaining > 0:
            logger.debug("Burn ignored: lockout for %d more ticks", self.lockout_remaining)
            return False

        policy = config.alignment
        if policy is not None and not policy.aligned(self.state.alignment):
            if policy.misaligned == LOCKOUT:
                self.lockout_remaining = policy.lockout_ticks
                self.message = Message("PITCH MISALIGNED: BURN LOCKED OUT", "error")
                logger.debug("Burn locked out: alignment %.1f", self.state.alignment)
                return False
            self._fail(Failure(ALIGNMENT_ERROR, "Navigation computer not locked on Mars vector."))
            return False

        self.aligning = False
        self.machine.ignite()
        self.message = Message("Main engine ignition.")
        return True

    def _fire(self, burn: DiscreteBurn) -> bool:
        if self.ledger.is_depleted:
            self._fail(self.config.depletion)
            return False

        action = burn.action(self.selected_burn)
        window = self.in_window
        if window and not self.ledger.can_afford(action.fuel_cost):
            self.message = Message("Insufficient fuel for this burn strength!", "error")
            return False

        self.undo_controller.snapshot_before_action(self.stage_index, self.metric, self.state.fuel)
        effect = burn.fire(action.key, window)
        self.ledger.debit(effect.fuel_cost)
        logger.info(
            "Fired %s burn (in window: %s), fuel %.1f",
            action.key, window, self.state.fuel,
        )

        if effect.wasted:
            self.message = Message(
                "Burn wasted! You must fire when the satellite is at Perigee (the bottom).",
                "error",
            )
            self.machine.settle()
            return True

        name = self.config.metric
        self.state.set_metric(name, self.state.metric(name) + effect.gain)
        verdict = self.config.validator.evaluate(
            self.metric,
            self.stage_index,
            self.config.stages,
            window,
        )
        self._apply_verdict(verdict)
        return True

    def _apply_verdict(self, verdict: Verdict) -> None:
        if verdict.kind is VerdictKind.FAILED:
            self._fail(verdict.failure)
            return

        if verdict.message is not None:
            self.message = verdict.message

        if verdict.kind is VerdictKind.SUCCESS:
            self.stage_index = verdict.stage_index
            self.machine.transition(MissionStatus.SUCCESS)
            self.undo_controller.invalidate()
        elif verdict.kind is VerdictKind.STAGE_COMPLETE:
            self.stage_index = verdict.stage_index
            self.machine.transition(MissionStatus.STAGE_COMPLETE)
            logger.info("Stage complete, advancing to stage %d", self.stage_index)
            policy = self.config.alignment
            if policy is not None and policy.drift_on_stage:
                self._drift_alignment()
                self.machine.disarm()
        else:
            self.machine.settle()

    def _drift_alignment(self) -> None:
        """Knock alignment out of tolerance after a completed stage."""
        policy = self.config.alignment
        sign = 1.0 if self._rng.random() < 0.5 else -1.0
        drift = policy.drift_min + self._rng.random() * policy.drift_span
        self.state.alignment = policy.clamp(round(policy.target + sign * drift, 1))

    def _fail(self, failure: Failure) -> None:
        self.machine.fail(failure)
        self.undo_controller.invalidate()
        self.warping = False
        self.aligning = False
        self.message = Message(f"FAILURE: {failure.code}. {failure.cause}", "error")

    # -------------------------------------------------------------------------
    # Other commands
    # -------------------------------------------------------------------------

    def toggle_subsystem(self, name: str) -> bool:
        """Flip a subsystem on or off, returning its new state."""
        if name not in self.subsystems:
            raise ValueError(f"Unknown subsystem: {name!r}. Valid: {list(self.subsystems)}")
        if self.machine.is_terminal:
            return self.subsystems[name]

        enabled = not self.subsystems[name]
        self.subsystems[name] = enabled
        logger.info("Subsystem %s %s", name, "on" if enabled else "off")

        if not enabled and name == self.config.required_subsystem and self.machine.burn_held:
            self._fail(Failure(ACS_TUMBLED, f"{name} disabled during burn. Vehicle tumbled."))
            return enabled

        self._check_initialization()
        return enabled

    def set_alignment(self, value: float | int) -> bool:
        """Set the alignment value, returning whether it was accepted."""
        policy = self.config.alignment
        if policy is None:
            raise ValueError(f"Level {self.config.name!r} has no alignment control")
        if self.machine.is_terminal:
            return False
        required = self.config.required_subsystem
        if required is not None and not self.subsystems[required]:
            logger.debug("Alignment ignored: %s offline", required)
            return False
        if policy.locked_during_burn and self.machine.burn_held:
            logger.debug("Alignment ignored: burn in progress")
            return False

        self.state.alignment = policy.clamp(float(value))
        if self.machine.status is MissionStatus.ALIGNING and policy.aligned(self.state.alignment):
            self._complete_alignment()
        self._check_initialization()
        return True

    def begin_alignment(self) -> bool:
        """Start the alignment procedure, returning whether it started."""
        policy = self.config.alignment
        if policy is None:
            raise ValueError(f"Level {self.config.name!r} has no alignment control")
        if self.machine.status not in (MissionStatus.IDLE, MissionStatus.STAGE_COMPLETE):
            return False
        self.machine.transition(MissionStatus.ALIGNING)
        if policy.aligned(self.state.alignment):
            self._complete_alignment()
            return True
        self.aligning = policy.ramp_rate > 0.0
        self.message = Message("Aligning with target vector...")
        return True

    def set_armed(self, armed: bool) -> bool:
        """Set the arm switch, returning whether the change was accepted."""
        if not self.config.requires_arming:
            raise ValueError(f"Level {self.config.name!r} has no arm switch")
        if self.machine.is_terminal or self.machine.burn_held:
            return False
        if armed:
            self.machine.arm()
        else:
            self.machine.disarm()
        return True

    def select_burn_strength(self, key: str) -> None:
        """Select the discrete burn fired by the next `start_burn()`."""
        burn = self.config.burn
        if not isinstance(burn, DiscreteBurn):
            raise ValueError(f"Level {self.config.name!r} has no discrete burns")
        self.selected_burn = burn.action(key).key

    def request_time_warp(self) -> bool:
        """Warp to the next perigee, returning whether warp engaged."""
        if not self.config.orbit.supports_warp:
            raise ValueError(f"Level {self.config.name!r} has no time warp")
        if self.machine.is_terminal:
            return False
        if self.in_window:
            self.message = Message("You are already at Perigee!")
            return False
        self.warping = True
        self.message = Message("Warping to Perigee...")
        return True

    def undo(self) -> bool:
        """Revert the last discrete burn, returning whether anything changed."""
        if not self.config.undo_enabled or self.machine.is_terminal:
            return False
        snapshot = self.undo_controller.undo()
        if snapshot is None:
            return False
        self.stage_index = snapshot.stage_index
        self.state.set_metric(self.config.metric, snapshot.metric)
        self.state.fuel = snapshot.fuel
        self.machine.settle()
        self.message = Message("Last burn undone. Try again!")
        return True

    def reset(self) -> Telemetry:
        """Restore the level to its starting state."""
        self._initialize()
        self.message = Message(RESET_MESSAGE)
        logger.info("Engine reset (%s)", self.config.name)
        return self.telemetry()

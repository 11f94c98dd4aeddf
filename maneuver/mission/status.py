"""Mission status and the state machine that owns it.

States:
    idle -> aligning -> armed -> burning -> stage_complete / success / failed

`success` and `failed` are terminal: once entered, only `reset()` leaves
them. Failures are recorded as data (a short code plus a human-readable
cause) rather than raised, because a failed mission is a normal game
outcome.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple

from beartype import beartype

logger = logging.getLogger(__name__)


class MissionStatus(Enum):
    """Discrete mission status."""
    IDLE = "idle"
    ALIGNING = "aligning"
    ARMED = "armed"
    BURNING = "burning"
    STAGE_COMPLETE = "stage_complete"
    SUCCESS = "success"
    ORBIT_ACHIEVED = "success"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Whether the mission is over."""
        return self in (MissionStatus.SUCCESS, MissionStatus.FAILED)


class Failure(NamedTuple):
    """Reason a mission failed.

    Attributes:
        code: Short machine-readable label (e.g. "FUEL DEPLETED")
        cause: Human-readable explanation
    """
    code: str
    cause: str = ""


# Failure codes surfaced to the presentation layer
FUEL_DEPLETED = "FUEL DEPLETED"
FUEL_EXHAUSTED = "FUEL EXHAUSTED"
OVERBURN_UNSTABLE = "OVERBURN: ORBIT UNSTABLE"
ACS_TUMBLED = "ACS OFF: TUMBLED"
CRITICAL_OVERSHOOT = "CRITICAL OVERSHOOT"
ALIGNMENT_ERROR = "ALIGNMENT ERROR"
VECTOR_MISALIGNED = "VECTOR MISALIGNED"
TIMING_ERROR = "TIMING ERROR"
UNDERBURN = "UNDERBURN"
OVERBURN = "OVERBURN"


_S = MissionStatus

_TRANSITIONS: dict[MissionStatus, frozenset[MissionStatus]] = {
    _S.IDLE: frozenset({_S.ALIGNING, _S.ARMED, _S.BURNING, _S.STAGE_COMPLETE, _S.SUCCESS}),
    _S.ALIGNING: frozenset({_S.IDLE, _S.ARMED, _S.BURNING}),
    _S.ARMED: frozenset({_S.IDLE, _S.ALIGNING, _S.BURNING, _S.STAGE_COMPLETE, _S.SUCCESS}),
    _S.BURNING: frozenset({_S.IDLE, _S.ARMED, _S.STAGE_COMPLETE, _S.SUCCESS}),
    _S.STAGE_COMPLETE: frozenset({_S.IDLE, _S.ALIGNING, _S.ARMED, _S.BURNING, _S.SUCCESS}),
    _S.SUCCESS: frozenset(),
    _S.FAILED: frozenset(),
}


@beartype
@dataclass
class MissionStateMachine:
    """Owns the mission status and the flags that drive burns.

    The burn-held flag lives here rather than in the UI: press/release events
    toggle it, and the tick reads it.

    Attributes:
        status: Current mission status
        failure: Why the mission failed, if it did
        burn_held: Whether a hold-to-burn action is currently pressed
        armed: Whether the engine arm switch is set
    """
    status: MissionStatus = MissionStatus.IDLE
    failure: Failure | None = None
    burn_held: bool = False
    armed: bool = False

    # Internal
    _log: list[MissionStatus] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        self._log = [self.status]

    @property
    def is_terminal(self) -> bool:
        """Whether the mission has ended (success or failure)."""
        return self.status.is_terminal

    @property
    def history(self) -> list[MissionStatus]:
        """Statuses entered since the last reset, oldest first."""
        return self._log.copy()

    def can_transition(self, target: MissionStatus) -> bool:
        """Check whether moving to `target` is legal from the current status."""
        if self.is_terminal:
            return False
        if target is MissionStatus.FAILED or target is self.status:
            return True
        return target in _TRANSITIONS[self.status]

    def transition(self, target: MissionStatus) -> None:
        """Move to `target`, raising ValueError on an illegal transition."""
        if not self.can_transition(target):
            raise ValueError(
                f"Illegal mission transition: {self.status.value} -> {target.value}"
            )
        if target is self.status:
            return
        logger.info("Mission status %s -> %s", self.status.value, target.value)
        self.status = target
        self._log.append(target)
        if target.is_terminal:
            self.burn_held = False

    def arm(self) -> None:
        """Set the arm switch; a resting mission shows as armed."""
        self.armed = True
        if self.status in (MissionStatus.IDLE, MissionStatus.STAGE_COMPLETE, MissionStatus.ALIGNING):
            self.transition(MissionStatus.ARMED)

    def disarm(self) -> None:
        """Clear the arm switch."""
        self.armed = False
        if self.status is MissionStatus.ARMED:
            self.transition(MissionStatus.IDLE)

    def ignite(self) -> None:
        """Start a hold-to-burn action."""
        self.transition(MissionStatus.BURNING)
        self.burn_held = True

    def release(self) -> None:
        """End a hold-to-burn action without deciding its outcome."""
        self.burn_held = False

    def settle(self) -> None:
        """Return to the resting status after a burn that changed nothing."""
        self.transition(MissionStatus.ARMED if self.armed else MissionStatus.IDLE)

    def fail(self, failure: Failure) -> None:
        """Enter the terminal failed state with a recorded reason."""
        if self.is_terminal:
            return
        logger.info("Mission failed: %s (%s)", failure.code, failure.cause)
        self.failure = failure
        self.armed = False
        self.transition(MissionStatus.FAILED)


class Message(NamedTuple):
    """Player-facing status line.

    Attributes:
        text: Message text
        tone: One of "neutral", "success", "error"
    """
    text: str
    tone: str = "neutral"

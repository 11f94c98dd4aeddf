"""Stage/target validation.

A validator compares the progress metric against the active stage after a
burn and returns a Verdict. The three levels need three different decision
tables, so there is one validator class per table, all sharing the same
`evaluate` signature:

- ToleranceValidator: held apogee burn, judged on release against
  `target +/- tolerance`.
- CeilingValidator: discrete apogee burns, judged after each fire against a
  hard ceiling and then the ordered stage targets.
- VelocityBandValidator: escape burn, judged on release against an absolute
  velocity band and the burn window.
"""

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple

from beartype import beartype

from maneuver.mission.stages import StageTable
from maneuver.mission.status import (
    CRITICAL_OVERSHOOT,
    OVERBURN,
    OVERBURN_UNSTABLE,
    TIMING_ERROR,
    UNDERBURN,
    Failure,
    Message,
)


class VerdictKind(Enum):
    """Outcome category of a validation."""
    CONTINUE = "continue"
    STAGE_COMPLETE = "stage_complete"
    SUCCESS = "success"
    FAILED = "failed"


class Verdict(NamedTuple):
    """Outcome of validating a burn.

    Attributes:
        kind: Outcome category
        stage_index: Stage index after the verdict
        failure: Failure reason when kind is FAILED
        message: Player-facing message
    """
    kind: VerdictKind
    stage_index: int
    failure: Failure | None = None
    message: Message | None = None


# =============================================================================
# Tolerance Validator
# =============================================================================


@beartype
@dataclass(frozen=True)
class ToleranceValidator:
    """Accept the metric when it lands within `target +/- tolerance`.

    Landing above the band is a fatal overburn; landing below it changes
    nothing, the player simply needs another pass.

    Attributes:
        success_text: Message shown when the final stage is accepted
    """
    success_text: str = "PARKING ORBIT STABLE. MISSION COMPLETE."

    def evaluate(
        self,
        metric: float,
        stage_index: int,
        stages: StageTable,
        in_window: bool = True,
    ) -> Verdict:
        stage = stages.active(stage_index)

        if stage.accepts(metric):
            if stages.is_last(stage_index):
                return Verdict(
                    VerdictKind.SUCCESS,
                    stage_index,
                    message=Message(self.success_text, "success"),
                )
            next_stage = stages[stage_index + 1]
            return Verdict(
                VerdictKind.STAGE_COMPLETE,
                stage_index + 1,
                message=Message(
                    f"{stage.label} complete. Realign pitch for {next_stage.label}.",
                    "success",
                ),
            )

        if metric > stage.upper:
            return Verdict(
                VerdictKind.FAILED,
                stage_index,
                failure=Failure(
                    OVERBURN_UNSTABLE,
                    f"Apogee {metric:.0f} km overshot {stage.label} "
                    f"(limit {stage.upper:.0f} km).",
                ),
            )

        return Verdict(
            VerdictKind.CONTINUE,
            stage_index,
            message=Message(
                f"Apogee {metric:.0f} km. Target {stage.target:.0f} km, keep burning.",
            ),
        )


# =============================================================================
# Ceiling Validator
# =============================================================================


@beartype
@dataclass(frozen=True)
class CeilingValidator:
    """Advance through ordered targets, failing above a hard ceiling.

    The ceiling is checked first, so an overshoot is fatal even if the new
    metric would also satisfy a stage.

    Attributes:
        ceiling: Highest survivable metric value
    """
    ceiling: float = 300000.0

    def evaluate(
        self,
        metric: float,
        stage_index: int,
        stages: StageTable,
        in_window: bool = True,
    ) -> Verdict:
        if metric > self.ceiling:
            return Verdict(
                VerdictKind.FAILED,
                stage_index,
                failure=Failure(
                    CRITICAL_OVERSHOOT,
                    f"Apogee {metric / 1000:.0f}k km exceeds safe limits. "
                    "Orbit destabilized.",
                ),
            )

        new_index = stages.first_above(metric)

        if new_index >= len(stages):
            return Verdict(
                VerdictKind.SUCCESS,
                len(stages),
                message=Message("MISSION SUCCESS! Orbit matches TMI requirements.", "success"),
            )
        if new_index > stage_index:
            return Verdict(
                VerdictKind.STAGE_COMPLETE,
                new_index,
                message=Message(
                    f"Great job! Orbit raised. Next target: "
                    f"{stages[new_index].target / 1000:.0f}k km.",
                    "success",
                ),
            )
        return Verdict(
            VerdictKind.CONTINUE,
            stage_index,
            message=Message("Orbit raised! But we need to go higher. Wait for another pass."),
        )


# =============================================================================
# Velocity Band Validator
# =============================================================================


@beartype
@dataclass(frozen=True)
class VelocityBandValidator:
    """Accept the release velocity inside `[minimum, maximum]`, in the window.

    Band membership is decided first; only a velocity inside the band is then
    checked against the window.

    Attributes:
        minimum: Lowest accepted velocity [km/s]
        maximum: Highest accepted velocity [km/s]
    """
    minimum: float = 11.1
    maximum: float = 11.3

    def __post_init__(self) -> None:
        if self.minimum > self.maximum:
            raise ValueError(
                f"minimum ({self.minimum}) must not exceed maximum ({self.maximum})"
            )

    def evaluate(
        self,
        metric: float,
        stage_index: int,
        stages: StageTable,
        in_window: bool = True,
    ) -> Verdict:
        if self.minimum <= metric <= self.maximum:
            if in_window:
                return Verdict(
                    VerdictKind.SUCCESS,
                    stage_index,
                    message=Message("TRANS-MARS INJECTION COMPLETE. Trajectory locked.", "success"),
                )
            return Verdict(
                VerdictKind.FAILED,
                stage_index,
                failure=Failure(
                    TIMING_ERROR,
                    "Correct velocity, but wrong position. Trajectory misses Mars.",
                ),
            )
        if metric < self.minimum:
            return Verdict(
                VerdictKind.FAILED,
                stage_index,
                failure=Failure(
                    UNDERBURN,
                    f"Reached {metric:.2f} km/s. Needed at least {self.minimum} km/s "
                    "to escape Earth.",
                ),
            )
        return Verdict(
            VerdictKind.FAILED,
            stage_index,
            failure=Failure(
                OVERBURN,
                f"Reached {metric:.2f} km/s. Velocity too high (> {self.maximum}), "
                "overshooting Mars interception.",
            ),
        )


Validator = ToleranceValidator | CeilingValidator | VelocityBandValidator

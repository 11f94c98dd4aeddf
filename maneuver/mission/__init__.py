"""Mission logic: stages, validation, status, and undo.

Example:
    >>> from maneuver.mission import CeilingValidator, MissionStage, StageTable
    >>>
    >>> stages = StageTable((MissionStage("Burn 1", 40000.0), MissionStage("Burn 2", 71600.0)))
    >>> CeilingValidator().evaluate(50000.0, 0, stages).stage_index
    1
"""

from maneuver.mission.history import HistorySnapshot, UndoController
from maneuver.mission.stages import MissionStage, StageTable
from maneuver.mission.status import (
    ACS_TUMBLED,
    ALIGNMENT_ERROR,
    CRITICAL_OVERSHOOT,
    FUEL_DEPLETED,
    FUEL_EXHAUSTED,
    OVERBURN,
    OVERBURN_UNSTABLE,
    TIMING_ERROR,
    UNDERBURN,
    VECTOR_MISALIGNED,
    Failure,
    Message,
    MissionStateMachine,
    MissionStatus,
)
from maneuver.mission.validator import (
    CeilingValidator,
    ToleranceValidator,
    Validator,
    VelocityBandValidator,
    Verdict,
    VerdictKind,
)

__all__ = [
    # Stages
    "MissionStage",
    "StageTable",
    # Status
    "MissionStatus",
    "MissionStateMachine",
    "Failure",
    "Message",
    # Failure codes
    "ACS_TUMBLED",
    "ALIGNMENT_ERROR",
    "CRITICAL_OVERSHOOT",
    "FUEL_DEPLETED",
    "FUEL_EXHAUSTED",
    "OVERBURN",
    "OVERBURN_UNSTABLE",
    "TIMING_ERROR",
    "UNDERBURN",
    "VECTOR_MISALIGNED",
    # Validators
    "Validator",
    "Verdict",
    "VerdictKind",
    "ToleranceValidator",
    "CeilingValidator",
    "VelocityBandValidator",
    # Undo
    "HistorySnapshot",
    "UndoController",
]

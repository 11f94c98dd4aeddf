"""Single-level undo and full reset support."""

import logging
from dataclasses import dataclass
from typing import NamedTuple

from beartype import beartype

logger = logging.getLogger(__name__)


class HistorySnapshot(NamedTuple):
    """State captured immediately before a discrete burn.

    Attributes:
        stage_index: Stage index before the burn
        metric: Progress metric before the burn
        fuel: Fuel before the burn [%]
    """
    stage_index: int
    metric: float
    fuel: float


@beartype
@dataclass
class UndoController:
    """Holds at most one snapshot; undo consumes it.

    This is deliberately not a stack: a new action replaces the snapshot, and
    a hard failure discards it.
    """
    snapshot: HistorySnapshot | None = None

    @property
    def available(self) -> bool:
        """Whether an undo is possible."""
        return self.snapshot is not None

    def snapshot_before_action(
        self,
        stage_index: int,
        metric: float,
        fuel: float,
    ) -> HistorySnapshot:
        """Record the pre-action state, replacing any previous snapshot."""
        self.snapshot = HistorySnapshot(stage_index, metric, fuel)
        return self.snapshot

    def undo(self) -> HistorySnapshot | None:
        """Pop the stored snapshot; None when there is nothing to undo."""
        snapshot, self.snapshot = self.snapshot, None
        if snapshot is not None:
            logger.info(
                "Undo to stage %d, metric %.1f, fuel %.1f",
                snapshot.stage_index, snapshot.metric, snapshot.fuel,
            )
        return snapshot

    def invalidate(self) -> None:
        """Discard the stored snapshot."""
        self.snapshot = None

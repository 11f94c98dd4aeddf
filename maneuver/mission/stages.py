"""Mission stages: ordered targets with acceptance bands."""

from dataclasses import dataclass

from beartype import beartype


@beartype
@dataclass(frozen=True)
class MissionStage:
    """One mission milestone.

    Attributes:
        label: Stage name shown to the player
        target: Target value of the progress metric
        tolerance: Half-width of the acceptance band
    """
    label: str
    target: float
    tolerance: float = 0.0

    def __post_init__(self) -> None:
        if self.tolerance < 0.0:
            raise ValueError(f"tolerance must be non-negative, got {self.tolerance}")

    @property
    def lower(self) -> float:
        """Lowest accepted metric value."""
        return self.target - self.tolerance

    @property
    def upper(self) -> float:
        """Highest accepted metric value."""
        return self.target + self.tolerance

    def accepts(self, metric: float) -> bool:
        """Check whether `metric` lies inside the acceptance band."""
        return abs(metric - self.target) <= self.tolerance


@beartype
@dataclass(frozen=True)
class StageTable:
    """Ordered sequence of mission stages.

    Attributes:
        stages: Stages in flight order
    """
    stages: tuple[MissionStage, ...]

    def __post_init__(self) -> None:
        if not self.stages:
            raise ValueError("A mission needs at least one stage")

    def __len__(self) -> int:
        return len(self.stages)

    def __getitem__(self, index: int) -> MissionStage:
        return self.stages[index]

    @property
    def last_index(self) -> int:
        """Index of the final stage."""
        return len(self.stages) - 1

    def active(self, index: int) -> MissionStage:
        """Stage at `index`, clamped to the last stage once all are consumed."""
        return self.stages[min(max(index, 0), self.last_index)]

    def is_last(self, index: int) -> bool:
        """Whether `index` is the final stage."""
        return index >= self.last_index

    def first_above(self, metric: float) -> int:
        """Index of the first stage whose target exceeds `metric`.

        Returns `len(self)` when every target has been reached.
        """
        for index, stage in enumerate(self.stages):
            if stage.target > metric:
                return index
        return len(self.stages)

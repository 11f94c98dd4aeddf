"""Burn models.

Two ways of spending fuel coexist across the levels:

- ContinuousBurn: a held thruster. Every tick it is held, it costs fuel and
  adds to the progress metric. Outside the window it still idles at a
  fraction of the nominal cost and only delivers a fraction of the gain.
- DiscreteBurn: a menu of fixed-size burns fired with a single press. A
  mistimed press burns half the propellant for nothing.

Both models only compute the effect of a burn; applying it to the state is
left to the engine.
"""

from dataclasses import dataclass, field
from typing import NamedTuple

from beartype import beartype


class BurnEffect(NamedTuple):
    """Effect of one burn tick or one discrete fire.

    Attributes:
        fuel_cost: Fuel consumed [%]
        gain: Increase of the progress metric [km or km/s]
        delta_v: Increase of the displayed speed offset [km/s]
        wasted: True if the burn was fired outside the window
    """
    fuel_cost: float
    gain: float
    delta_v: float = 0.0
    wasted: bool = False


# =============================================================================
# Continuous Burn
# =============================================================================


@beartype
@dataclass(frozen=True)
class ContinuousBurn:
    """Hold-to-burn thruster.

    Attributes:
        gain: Metric gain per tick inside the window
        fuel_rate: Fuel cost per tick inside the window [%]
        idle_fraction: Fraction of `fuel_rate` spent per tick outside the window
        out_of_window_efficiency: Fraction of `gain` delivered outside the window
        delta_v_gain: Displayed speed offset added per in-window tick [km/s]
    """
    gain: float
    fuel_rate: float
    idle_fraction: float = 0.1
    out_of_window_efficiency: float = 0.0
    delta_v_gain: float = 0.0

    def __post_init__(self) -> None:
        if self.gain <= 0.0:
            raise ValueError(f"gain must be positive, got {self.gain}")
        if self.fuel_rate <= 0.0:
            raise ValueError(f"fuel_rate must be positive, got {self.fuel_rate}")
        if not 0.0 <= self.idle_fraction <= 1.0:
            raise ValueError(f"idle_fraction must be in [0, 1], got {self.idle_fraction}")
        if not 0.0 <= self.out_of_window_efficiency <= 1.0:
            raise ValueError(
                f"out_of_window_efficiency must be in [0, 1], got {self.out_of_window_efficiency}"
            )

    def tick(self, in_window: bool) -> BurnEffect:
        """Effect of holding the burn for one tick."""
        if in_window:
            return BurnEffect(
                fuel_cost=self.fuel_rate,
                gain=self.gain,
                delta_v=self.delta_v_gain,
            )
        return BurnEffect(
            fuel_cost=self.fuel_rate * self.idle_fraction,
            gain=self.gain * self.out_of_window_efficiency,
            wasted=True,
        )


# =============================================================================
# Discrete Burn
# =============================================================================


@beartype
@dataclass(frozen=True)
class BurnAction:
    """A named, fixed-size burn.

    Attributes:
        key: Selection key (e.g. "MEDIUM")
        label: Human-readable name
        gain: Apogee gain when correctly timed [km]
        fuel_cost: Fuel cost when correctly timed [%]
        description: Short player hint
    """
    key: str
    label: str
    gain: float
    fuel_cost: float
    description: str = ""

    def __post_init__(self) -> None:
        if self.gain <= 0.0:
            raise ValueError(f"gain must be positive, got {self.gain}")
        if self.fuel_cost <= 0.0:
            raise ValueError(f"fuel_cost must be positive, got {self.fuel_cost}")


SMALL_BURN = BurnAction("SMALL", "Small Burn", 30000.0, 10.0, "Best Efficiency (30k km)")
MEDIUM_BURN = BurnAction("MEDIUM", "Medium Burn", 70000.0, 25.0, "Balanced (70k km)")
STRONG_BURN = BurnAction("STRONG", "Strong Burn", 110000.0, 55.0, "Inefficient (110k km)")


@beartype
@dataclass(frozen=True)
class DiscreteBurn:
    """Menu of fixed-size burns fired one press at a time.

    Attributes:
        actions: Available burns, in menu order
        default_key: Burn selected at level start
        wasted_cost_fraction: Fraction of the cost charged for a mistimed burn
    """
    actions: tuple[BurnAction, ...] = field(
        default_factory=lambda: (SMALL_BURN, MEDIUM_BURN, STRONG_BURN)
    )
    default_key: str = "MEDIUM"
    wasted_cost_fraction: float = 0.5

    def __post_init__(self) -> None:
        keys = [action.key for action in self.actions]
        if not keys:
            raise ValueError("DiscreteBurn needs at least one action")
        if len(set(keys)) != len(keys):
            raise ValueError(f"Duplicate burn keys: {keys}")
        if self.default_key not in keys:
            raise ValueError(f"Default burn {self.default_key!r} not in {keys}")
        if not 0.0 <= self.wasted_cost_fraction <= 1.0:
            raise ValueError(
                f"wasted_cost_fraction must be in [0, 1], got {self.wasted_cost_fraction}"
            )

    @property
    def keys(self) -> list[str]:
        """Selection keys in menu order."""
        return [action.key for action in self.actions]

    def action(self, key: str) -> BurnAction:
        """Look up a burn by key."""
        for action in self.actions:
            if action.key == key:
                return action
        raise ValueError(f"Unknown burn strength: {key!r}. Valid: {self.keys}")

    def fire(self, key: str, in_window: bool) -> BurnEffect:
        """Effect of firing the burn `key` once."""
        action = self.action(key)
        if not in_window:
            return BurnEffect(
                fuel_cost=action.fuel_cost * self.wasted_cost_fraction,
                gain=0.0,
                wasted=True,
            )
        return BurnEffect(fuel_cost=action.fuel_cost, gain=action.gain)


BurnModel = ContinuousBurn | DiscreteBurn

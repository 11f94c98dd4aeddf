"""Fuel accounting.

The ledger is the only thing allowed to change the fuel reserve during a
burn. It never lets fuel go negative; running dry while a burn is active is
a mission failure, decided by the engine from `is_depleted`.

Example:
    >>> from maneuver.dynamics import SpacecraftState
    >>> from maneuver.propulsion import FuelLedger
    >>>
    >>> ledger = FuelLedger(SpacecraftState(fuel=0.01))
    >>> ledger.debit(0.02)
    0.0
    >>> ledger.is_depleted
    True
"""

from dataclasses import dataclass

from beartype import beartype

from maneuver.dynamics.state import SpacecraftState


@beartype
@dataclass
class FuelLedger:
    """Bounded, depleting fuel reserve backed by a spacecraft state.

    Attributes:
        state: Spacecraft state whose `fuel` field is debited
    """
    state: SpacecraftState

    @property
    def fuel(self) -> float:
        """Remaining fuel [%]."""
        return self.state.fuel

    @property
    def is_depleted(self) -> bool:
        """True once the tanks are empty."""
        return self.state.fuel <= 0.0

    def can_afford(self, amount: float) -> bool:
        """Check whether `amount` can be paid in full."""
        return self.state.fuel >= amount

    def debit(self, amount: float) -> float:
        """Consume fuel, clamping at zero.

        Args:
            amount: Fuel to consume [%]

        Returns:
            Remaining fuel after the debit [%]
        """
        if amount < 0.0:
            raise ValueError(f"Debit amount must be non-negative, got {amount}")
        self.state.fuel = max(0.0, self.state.fuel - amount)
        return self.state.fuel

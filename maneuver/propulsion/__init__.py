"""Propulsion: fuel accounting and burn models.

Example:
    >>> from maneuver.propulsion import DiscreteBurn
    >>>
    >>> burns = DiscreteBurn()
    >>> burns.fire("MEDIUM", in_window=True).gain
    70000.0
"""

from maneuver.propulsion.burn import (
    MEDIUM_BURN,
    SMALL_BURN,
    STRONG_BURN,
    BurnAction,
    BurnEffect,
    BurnModel,
    ContinuousBurn,
    DiscreteBurn,
)
from maneuver.propulsion.ledger import FuelLedger

__all__ = [
    # Ledger
    "FuelLedger",
    # Burn models
    "BurnEffect",
    "BurnModel",
    "ContinuousBurn",
    "DiscreteBurn",
    "BurnAction",
    "SMALL_BURN",
    "MEDIUM_BURN",
    "STRONG_BURN",
]

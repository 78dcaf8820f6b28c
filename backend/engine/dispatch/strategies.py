"""Battery control strategies and their behavioural traits.

Each :class:`Strategy` maps to exactly one :class:`StrategyTraits` entry in
:data:`STRATEGY_TRAITS`.  The dispatch step reads traits rather than
comparing strategy names, so adding a strategy means adding one enum member
and one table row.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

# ======================================================================
# Constants
# ======================================================================

#: Amounts below this (kWh) are treated as rounding noise.
FLOAT_TOLERANCE: float = 1e-3

#: Hours ahead of a force-charge window in which export-style strategies
#: empty the battery.
PRE_CHARGE_LOOKAHEAD_HOURS: int = 4

#: Nov--Feb: months in which the balanced strategy keeps its charge.
HEATING_SEASON_MONTHS: frozenset[int] = frozenset({11, 12, 1, 2})

#: Fraction of average daily consumption that tomorrow's solar must exceed
#: for the forecast strategy to skip a grid charge.
FORECAST_SOLAR_THRESHOLD: float = 0.75


class Strategy(str, enum.Enum):
    """Closed set of battery control strategies."""

    SELF_CONSUMPTION = "self-consumption"
    EXPORT_MAXIMISER = "export-maximiser"
    BALANCED_EXPORT_MAXIMISER = "balanced-export-maximiser"
    IMPORT_MINIMISER = "import-minimiser"
    HISTORICAL_FORECAST = "historical-forecast"

    @property
    def traits(self) -> "StrategyTraits":
        return STRATEGY_TRAITS[self]

    @property
    def label(self) -> str:
        return self.value.replace("-", " ").title()


@dataclass(frozen=True)
class StrategyTraits:
    """Which branches of the interval dispatch a strategy activates.

    Parameters
    ----------
    force_charges : bool
        Charges from the grid during force-charge hours and suspends
        battery discharge to the home during them.
    pre_charge_export : bool
        Export-style behaviour: in the hours before a force-charge window,
        exports all surplus solar and dumps stored energy to the grid.
    heating_season_hold : bool
        Skips the pre-emptive dump during heating-season months.
    forecast_gate : bool
        Skips the grid charge when tomorrow's generation is expected to
        cover the household.  Tomorrow's *actual* generation is used as a
        perfect-foresight forecast.
    """

    force_charges: bool = False
    pre_charge_export: bool = False
    heating_season_hold: bool = False
    forecast_gate: bool = False


STRATEGY_TRAITS: dict[Strategy, StrategyTraits] = {
    Strategy.SELF_CONSUMPTION: StrategyTraits(),
    Strategy.EXPORT_MAXIMISER: StrategyTraits(
        force_charges=True, pre_charge_export=True,
    ),
    Strategy.BALANCED_EXPORT_MAXIMISER: StrategyTraits(
        force_charges=True, pre_charge_export=True, heating_season_hold=True,
    ),
    Strategy.IMPORT_MINIMISER: StrategyTraits(force_charges=True),
    Strategy.HISTORICAL_FORECAST: StrategyTraits(
        force_charges=True, forecast_gate=True,
    ),
}

_missing = set(Strategy) - set(STRATEGY_TRAITS)
if _missing:  # pragma: no cover
    raise RuntimeError(f"Strategies without traits: {sorted(s.value for s in _missing)}")
del _missing


def parse_strategy(value: str | Strategy) -> Strategy:
    """Resolve a strategy from its enum member, value or member name."""
    if isinstance(value, Strategy):
        return value
    key = str(value).strip().lower().replace("_", "-")
    for strategy in Strategy:
        if strategy.value == key:
            return strategy
    raise ValueError(
        f"Unknown strategy '{value}'. "
        f"Choose from: {[s.value for s in Strategy]}"
    )

"""Battery dispatch for a grid-tied home with solar.

Available strategies:

* **self-consumption** -- store surplus solar, serve the home from it.
* **export-maximiser** -- grid-charge in the force-charge window and empty
  the battery to the grid in the hours before it.
* **balanced-export-maximiser** -- as above, but keeps stored energy for
  the home in the heating season (Nov -- Feb).
* **import-minimiser** -- grid-charge in the force-charge window only.
* **historical-forecast** -- grid-charge unless tomorrow's solar will cover
  the household (perfect foresight from the recorded data).
"""

from .strategies import (
    FLOAT_TOLERANCE,
    FORECAST_SOLAR_THRESHOLD,
    HEATING_SEASON_MONTHS,
    PRE_CHARGE_LOOKAHEAD_HOURS,
    STRATEGY_TRAITS,
    Strategy,
    StrategyTraits,
    parse_strategy,
)
from .interval import IntervalResult, dispatch_interval

__all__ = [
    "FLOAT_TOLERANCE",
    "FORECAST_SOLAR_THRESHOLD",
    "HEATING_SEASON_MONTHS",
    "PRE_CHARGE_LOOKAHEAD_HOURS",
    "STRATEGY_TRAITS",
    "Strategy",
    "StrategyTraits",
    "parse_strategy",
    "IntervalResult",
    "dispatch_interval",
]

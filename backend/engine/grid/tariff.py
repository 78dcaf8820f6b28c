"""Hour-of-day tariff schedule for household import/export pricing.

A :class:`TariffSchedule` carries 24 import prices, 24 export prices and a
24-hour force-charge mask.  All lookups use the UTC hour of the interval
being priced.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence

HOURS_PER_DAY: int = 24


def _as_hourly(values: Sequence[float], name: str) -> tuple[float, ...]:
    """Coerce *values* to a 24-tuple of finite, non-negative floats."""
    prices = tuple(float(v) for v in values)
    if len(prices) != HOURS_PER_DAY:
        raise ValueError(
            f"{name} must have {HOURS_PER_DAY} entries, got {len(prices)}"
        )
    for hour, price in enumerate(prices):
        if not math.isfinite(price) or price < 0:
            raise ValueError(f"{name}[{hour}] must be finite and >= 0, got {price}")
    return prices


def _mask_from_hours(hours: Iterable[int]) -> tuple[bool, ...]:
    mask = [False] * HOURS_PER_DAY
    for h in hours:
        h = int(h)
        if not 0 <= h < HOURS_PER_DAY:
            raise ValueError(f"force-charge hour must be in 0..23, got {h}")
        mask[h] = True
    return tuple(mask)


# ======================================================================
# Tariff schedule
# ======================================================================

@dataclass(frozen=True)
class TariffSchedule:
    """Hourly import/export prices plus a force-charge window.

    Parameters
    ----------
    import_prices : Sequence[float]
        Cost to buy 1 kWh in each hour of the day (currency/kWh).
    export_prices : Sequence[float]
        Revenue for selling 1 kWh in each hour of the day.
    force_charge_hours : Sequence[bool]
        ``True`` for hours in which the battery should be charged from the
        grid (typically a cheap night rate).
    """

    import_prices: tuple[float, ...]
    export_prices: tuple[float, ...]
    force_charge_hours: tuple[bool, ...] = (False,) * HOURS_PER_DAY

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "import_prices", _as_hourly(self.import_prices, "import_prices")
        )
        object.__setattr__(
            self, "export_prices", _as_hourly(self.export_prices, "export_prices")
        )
        mask = tuple(bool(v) for v in self.force_charge_hours)
        if len(mask) != HOURS_PER_DAY:
            raise ValueError(
                f"force_charge_hours must have {HOURS_PER_DAY} entries, "
                f"got {len(mask)}"
            )
        object.__setattr__(self, "force_charge_hours", mask)

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def flat(
        cls,
        buy_rate: float,
        sell_rate: float,
        force_charge_hours: Iterable[int] = (),
    ) -> "TariffSchedule":
        """Single import and export rate for every hour."""
        return cls(
            import_prices=(buy_rate,) * HOURS_PER_DAY,
            export_prices=(sell_rate,) * HOURS_PER_DAY,
            force_charge_hours=_mask_from_hours(force_charge_hours),
        )

    @classmethod
    def from_config(cls, cfg: dict | None) -> "TariffSchedule":
        """Build a schedule from a configuration dict.

        Recognised shapes::

            {"type": "flat", "buy_rate": 0.30, "sell_rate": 0.15,
             "force_charge_hours": [2, 3, 4]}

            {"type": "hourly", "import_prices": [...24], "export_prices": [...24],
             "force_charge_hours": [2, 3, 4]}

        ``force_charge_hours`` may be given either as a list of hour numbers
        or as a 24-element boolean mask.
        """
        cfg = cfg or {}
        tariff_type = cfg.get("type", "flat")
        hours = cfg.get("force_charge_hours", ())
        if len(hours) == HOURS_PER_DAY and all(isinstance(v, bool) for v in hours):
            mask = tuple(hours)
        else:
            mask = _mask_from_hours(hours)

        if tariff_type == "flat":
            return cls(
                import_prices=(float(cfg.get("buy_rate", 0.30)),) * HOURS_PER_DAY,
                export_prices=(float(cfg.get("sell_rate", 0.15)),) * HOURS_PER_DAY,
                force_charge_hours=mask,
            )
        if tariff_type == "hourly":
            imports = cfg.get("import_prices")
            exports = cfg.get("export_prices")
            if imports is None or exports is None:
                raise ValueError("hourly tariffs need import_prices and export_prices")
            return cls(
                import_prices=tuple(imports),
                export_prices=tuple(exports),
                force_charge_hours=mask,
            )
        raise ValueError(
            f"Unknown tariff type '{tariff_type}'. Choose from: ['flat', 'hourly']"
        )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def buy_price(self, hour: int) -> float:
        return self.import_prices[hour]

    def sell_price(self, hour: int) -> float:
        return self.export_prices[hour]

    def is_force_charge_hour(self, hour: int) -> bool:
        return self.force_charge_hours[hour]

    @property
    def has_force_charge_hours(self) -> bool:
        return any(self.force_charge_hours)

    def force_charge_within(self, hour: int, lookahead_hours: int) -> bool:
        """Return ``True`` if any of the next *lookahead_hours* hours is a
        force-charge hour.  The current hour is not included and the window
        wraps past midnight.
        """
        return any(
            self.force_charge_hours[(hour + offset) % HOURS_PER_DAY]
            for offset in range(1, lookahead_hours + 1)
        )

    def to_dict(self) -> dict:
        return {
            "import_prices": list(self.import_prices),
            "export_prices": list(self.export_prices),
            "force_charge_hours": [
                h for h, flagged in enumerate(self.force_charge_hours) if flagged
            ],
        }

"""Resolved battery, grid and tariff parameters for one simulation run."""

from __future__ import annotations

import math
from dataclasses import dataclass, fields, replace

from engine.dispatch.strategies import Strategy, parse_strategy
from engine.grid.tariff import TariffSchedule

HOURS_PER_DAY: float = 24.0


# ======================================================================
# Errors
# ======================================================================

class ConfigurationError(ValueError):
    """Parameters or inputs that make a run meaningless.

    Raised before the first interval is simulated; no partial run is ever
    produced.
    """


class StrategyPreconditionError(ConfigurationError):
    """A grid-charging strategy was selected without any force-charge hour."""


# ======================================================================
# Parameters
# ======================================================================

@dataclass(frozen=True)
class SimulationParameters:
    """Everything a single run needs besides the readings.

    Parameters
    ----------
    battery_capacity_kwh : float
        Nameplate battery capacity.
    usable_capacity_kwh : float
        Usable part of the nameplate capacity (<= nameplate).
    min_soc_pct, max_soc_pct : float
        SOC window as a percentage of usable capacity (0 -- 100).
    max_charge_rate_kw, max_discharge_rate_kw : float
        Battery power limits.
    roundtrip_efficiency : float
        Round-trip efficiency in (0, 1].
    strategy : Strategy
        Battery control strategy.
    mic_kw, mec_kw : float
        Maximum grid import / export power.
    tariff : TariffSchedule
        Hourly prices and force-charge mask.
    system_cost : float
        Installed cost of the battery, for payback.
    average_daily_consumption_kwh : float or None
        Used by the forecast strategy; derived from the readings by the
        runner when left as ``None``.
    interval_hours : float
        Length of one reading interval in hours.
    """

    battery_capacity_kwh: float
    usable_capacity_kwh: float
    min_soc_pct: float
    max_soc_pct: float
    max_charge_rate_kw: float
    max_discharge_rate_kw: float
    roundtrip_efficiency: float
    strategy: Strategy
    mic_kw: float
    mec_kw: float
    tariff: TariffSchedule
    system_cost: float = 0.0
    average_daily_consumption_kwh: float | None = None
    interval_hours: float = 0.5

    def __post_init__(self) -> None:
        object.__setattr__(self, "strategy", parse_strategy(self.strategy))

    # ------------------------------------------------------------------
    # Derived quantities
    # ------------------------------------------------------------------

    @property
    def min_soc_kwh(self) -> float:
        return self.usable_capacity_kwh * self.min_soc_pct / 100.0

    @property
    def max_soc_kwh(self) -> float:
        return self.usable_capacity_kwh * self.max_soc_pct / 100.0

    @property
    def usable_capacity_pct(self) -> float:
        if self.battery_capacity_kwh <= 0:
            return 100.0
        return self.usable_capacity_kwh / self.battery_capacity_kwh * 100.0

    @property
    def efficiency_sqrt(self) -> float:
        return math.sqrt(self.roundtrip_efficiency)

    @property
    def intervals_per_day(self) -> int:
        return int(round(HOURS_PER_DAY / self.interval_hours))

    # ------------------------------------------------------------------
    # Copies
    # ------------------------------------------------------------------

    def with_capacity(self, capacity_kwh: float) -> "SimulationParameters":
        """Return a copy resized to *capacity_kwh*, keeping the usable share."""
        usable = capacity_kwh * self.usable_capacity_pct / 100.0
        return replace(
            self, battery_capacity_kwh=capacity_kwh, usable_capacity_kwh=usable
        )

    def with_strategy(self, strategy: Strategy | str) -> "SimulationParameters":
        return replace(self, strategy=parse_strategy(strategy))

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self) -> None:
        """Raise :class:`ConfigurationError` for unusable parameters.

        Raises
        ------
        StrategyPreconditionError
            If the strategy charges from the grid but no hour is flagged in
            the force-charge mask.
        ConfigurationError
            For any non-finite, negative or inconsistent value.
        """
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, float | int) and not isinstance(value, bool):
                if not math.isfinite(value):
                    raise ConfigurationError(f"{f.name} must be finite, got {value}")

        non_negative = (
            "battery_capacity_kwh", "usable_capacity_kwh",
            "max_charge_rate_kw", "max_discharge_rate_kw",
            "mic_kw", "mec_kw", "system_cost",
        )
        for name in non_negative:
            value = getattr(self, name)
            if value < 0:
                raise ConfigurationError(f"{name} must be >= 0, got {value}")

        if self.usable_capacity_kwh > self.battery_capacity_kwh + 1e-9:
            raise ConfigurationError(
                f"usable_capacity_kwh ({self.usable_capacity_kwh}) exceeds "
                f"battery_capacity_kwh ({self.battery_capacity_kwh})"
            )
        for name in ("min_soc_pct", "max_soc_pct"):
            value = getattr(self, name)
            if not 0.0 <= value <= 100.0:
                raise ConfigurationError(f"{name} must be in [0, 100], got {value}")
        if self.min_soc_pct > self.max_soc_pct:
            raise ConfigurationError(
                f"min_soc_pct ({self.min_soc_pct}) exceeds "
                f"max_soc_pct ({self.max_soc_pct})"
            )
        if not 0.0 < self.roundtrip_efficiency <= 1.0:
            raise ConfigurationError(
                f"roundtrip_efficiency must be in (0, 1], "
                f"got {self.roundtrip_efficiency}"
            )
        if self.interval_hours <= 0 or self.interval_hours > HOURS_PER_DAY:
            raise ConfigurationError(
                f"interval_hours must be in (0, 24], got {self.interval_hours}"
            )
        if (
            self.average_daily_consumption_kwh is not None
            and self.average_daily_consumption_kwh < 0
        ):
            raise ConfigurationError(
                "average_daily_consumption_kwh must be >= 0, "
                f"got {self.average_daily_consumption_kwh}"
            )

        if self.strategy.traits.force_charges and not self.tariff.has_force_charge_hours:
            raise StrategyPreconditionError(
                f"Strategy '{self.strategy.value}' charges from the grid but no "
                "force-charge hour is selected in the tariff"
            )

    # ------------------------------------------------------------------
    # Config dicts
    # ------------------------------------------------------------------

    @classmethod
    def from_config(cls, cfg: dict) -> "SimulationParameters":
        """Build parameters from a plain configuration dict.

        Expected shape::

            {
                "strategy": "self-consumption",
                "system_cost": 6000,
                "battery": {"capacity_kwh": 10, "usable_capacity_pct": 90,
                            "min_soc": 10, "max_soc": 100,
                            "max_charge_rate_kw": 5,
                            "max_discharge_rate_kw": 5,
                            "round_trip_efficiency": 0.9},
                "grid": {"mic_kw": 12, "mec_kw": 6},
                "tariff": {"type": "flat", "buy_rate": 0.3, "sell_rate": 0.15,
                           "force_charge_hours": [2, 3, 4]},
            }

        ``max_discharge_rate_kw`` defaults to ``max_charge_rate_kw``.
        """
        battery = cfg.get("battery", {})
        grid = cfg.get("grid", {})

        try:
            capacity = float(battery["capacity_kwh"])
        except KeyError:
            raise ConfigurationError("battery.capacity_kwh is required") from None

        usable_pct = float(battery.get("usable_capacity_pct", 100.0))
        charge_kw = float(battery.get("max_charge_rate_kw", capacity / 2.0))
        try:
            tariff = TariffSchedule.from_config(cfg.get("tariff"))
            strategy = parse_strategy(cfg.get("strategy", Strategy.SELF_CONSUMPTION))
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc

        avg = cfg.get("average_daily_consumption_kwh")
        return cls(
            battery_capacity_kwh=capacity,
            usable_capacity_kwh=capacity * usable_pct / 100.0,
            min_soc_pct=float(battery.get("min_soc", 10.0)),
            max_soc_pct=float(battery.get("max_soc", 100.0)),
            max_charge_rate_kw=charge_kw,
            max_discharge_rate_kw=float(battery.get("max_discharge_rate_kw", charge_kw)),
            roundtrip_efficiency=float(battery.get("round_trip_efficiency", 0.90)),
            strategy=strategy,
            mic_kw=float(grid.get("mic_kw", 12.0)),
            mec_kw=float(grid.get("mec_kw", 6.0)),
            tariff=tariff,
            system_cost=float(cfg.get("system_cost", 0.0)),
            average_daily_consumption_kwh=None if avg is None else float(avg),
            interval_hours=float(cfg.get("interval_hours", 0.5)),
        )

"""Single-interval energy dispatch for a home solar + battery system.

:func:`dispatch_interval` decides, for one reading, how energy moves between
solar, battery, home and grid.  The steps run in a fixed order and each one
works on what the previous ones left over:

1. Solar serves the home directly.
2. The battery serves the remaining demand (not during force-charge hours).
3. The grid covers whatever demand is still unmet.
4. Surplus solar charges the battery, or is exported outright during the
   pre-charge hours of export-style strategies.
5. a. Export-style strategies dump stored energy to the grid in pre-charge
      hours (the balanced variant holds it in the heating season).
   b. Grid-charging strategies charge from the grid in force-charge hours,
      within the import limit.  The forecast strategy skips the charge when
      tomorrow's generation is expected to cover the household.
6. Export is clipped to the export limit; the clipped energy is curtailed.

Each step is capped by the full charge or discharge rate on its own; only
the state of charge carries over between steps.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from engine.battery.soc_tracker import SOCTracker
from engine.dispatch.strategies import (
    FLOAT_TOLERANCE,
    FORECAST_SOLAR_THRESHOLD,
    HEATING_SEASON_MONTHS,
    PRE_CHARGE_LOOKAHEAD_HOURS,
)
from engine.load.readings import IntervalReading

if TYPE_CHECKING:
    from engine.simulation.parameters import SimulationParameters


@dataclass(frozen=True)
class IntervalResult:
    """Energy flows for one interval (all kWh).

    ``to_battery_kwh`` is the energy sent towards the battery before charge
    losses; ``from_battery_kwh`` is the energy drawn out of the battery
    before discharge losses.
    """

    grid_import_kwh: float
    grid_export_kwh: float
    to_battery_kwh: float
    from_battery_kwh: float
    new_soc_kwh: float
    force_charge_scheduled_today: bool
    self_use_kwh: float = 0.0
    curtailed_kwh: float = 0.0


def is_force_charge_hour(params: SimulationParameters, hour: int) -> bool:
    return params.strategy.traits.force_charges and params.tariff.is_force_charge_hour(hour)


def is_pre_charge_hour(params: SimulationParameters, hour: int) -> bool:
    """Hour leading up to a force-charge window, for export-style strategies."""
    if not params.strategy.traits.pre_charge_export:
        return False
    if is_force_charge_hour(params, hour):
        return False
    return params.tariff.force_charge_within(hour, PRE_CHARGE_LOOKAHEAD_HOURS)


def dispatch_interval(
    reading: IntervalReading,
    soc_kwh: float,
    params: SimulationParameters,
    force_charge_scheduled_today: bool,
    next_day_generation_kwh: float | None = None,
) -> IntervalResult:
    """Resolve the energy flows of one interval.

    Parameters
    ----------
    reading : IntervalReading
        Consumption and generation for the interval.
    soc_kwh : float
        Battery state of charge at the start of the interval.
    params : SimulationParameters
        Validated run parameters.
    force_charge_scheduled_today : bool
        Whether a grid charge has already gone ahead earlier today.
    next_day_generation_kwh : float or None
        Total generation over the next full day of readings, used by the
        forecast strategy.  ``None`` when fewer than a full day remains.

    Returns
    -------
    IntervalResult
    """
    traits = params.strategy.traits
    dt = params.interval_hours
    hour = reading.hour

    battery = SOCTracker(
        params.min_soc_kwh,
        params.max_soc_kwh,
        params.roundtrip_efficiency,
        initial_soc_kwh=soc_kwh,
    )
    max_charge = params.max_charge_rate_kw * dt
    max_discharge = params.max_discharge_rate_kw * dt

    force_charge_hour = is_force_charge_hour(params, hour)
    pre_charge_hour = is_pre_charge_hour(params, hour)

    grid_import = 0.0
    grid_export = 0.0
    to_battery = 0.0
    from_battery = 0.0

    # 1. Direct solar self-consumption
    self_use = min(reading.consumption, reading.generation)
    remaining_demand = reading.consumption - self_use
    excess_solar = reading.generation - self_use

    # 2. Battery to home
    if not force_charge_hour:
        delivered = min(remaining_demand, battery.deliverable_kwh(), max_discharge)
        if delivered > FLOAT_TOLERANCE:
            from_battery += battery.discharge(delivered)
            remaining_demand -= delivered

    # 3. Grid import for the rest
    grid_import += remaining_demand

    # 4. Surplus solar
    if excess_solar > 0:
        if pre_charge_hour:
            grid_export += excess_solar
        else:
            charge = min(excess_solar, battery.acceptable_kwh(), max_charge)
            if charge > FLOAT_TOLERANCE:
                to_battery += battery.charge(charge)
                excess_solar -= charge
            grid_export += excess_solar

    # 5a. Pre-emptive discharge ahead of a force-charge window
    if pre_charge_hour and not (
        traits.heating_season_hold and reading.month in HEATING_SEASON_MONTHS
    ):
        export_headroom = max(0.0, params.mec_kw - grid_export / dt) * dt
        dump = min(battery.deliverable_kwh(), max_discharge, export_headroom)
        if dump > FLOAT_TOLERANCE:
            from_battery += battery.discharge(dump)
            grid_export += dump

    # 5b. Force charge from the grid
    if force_charge_hour and not _solar_covers_tomorrow(params, next_day_generation_kwh):
        force_charge_scheduled_today = True
        home_import_kw = remaining_demand / dt
        charge_kw = min(params.max_charge_rate_kw, params.mic_kw - home_import_kw)
        energy = min(max(0.0, charge_kw * dt), battery.acceptable_kwh())
        if energy > FLOAT_TOLERANCE:
            accepted = battery.charge(energy)
            to_battery += accepted
            grid_import += accepted

    # 6. Export clipping
    curtailed = 0.0
    export_cap = params.mec_kw * dt
    if grid_export > export_cap:
        curtailed = grid_export - export_cap
        grid_export = export_cap

    return IntervalResult(
        grid_import_kwh=grid_import,
        grid_export_kwh=grid_export,
        to_battery_kwh=to_battery,
        from_battery_kwh=from_battery,
        new_soc_kwh=battery.soc_kwh,
        force_charge_scheduled_today=force_charge_scheduled_today,
        self_use_kwh=self_use,
        curtailed_kwh=curtailed,
    )


def _solar_covers_tomorrow(
    params: SimulationParameters, next_day_generation_kwh: float | None
) -> bool:
    """Forecast gate: tomorrow's actual generation stands in for a forecast."""
    if not params.strategy.traits.forecast_gate:
        return False
    if next_day_generation_kwh is None or params.average_daily_consumption_kwh is None:
        return False
    return next_day_generation_kwh > (
        params.average_daily_consumption_kwh * FORECAST_SOLAR_THRESHOLD
    )

"""Simulation orchestrator for home solar + battery analysis.

``SimulationRunner`` drives :func:`~engine.dispatch.interval.dispatch_interval`
across an ordered sequence of readings.  It owns the battery state for the
run, keeps monthly running totals, tracks the daily "force charge fell
short" bookkeeping, and hands everything to the aggregator at the end.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Sequence

import numpy as np
from numpy.typing import NDArray

from engine.dispatch.interval import dispatch_interval
from engine.economics.aggregator import SimulationResult, aggregate_results
from engine.load.readings import IntervalReading, validate_intervals
from engine.simulation.parameters import ConfigurationError, SimulationParameters
from engine.simulation.records import LogEntry, MonthlyAccumulator

logger = logging.getLogger(__name__)

# ======================================================================
# Constants
# ======================================================================

#: A force-charge day counts as "missed" if the battery peaked below this
#: fraction of its maximum SOC.
FULL_CHARGE_FRACTION: float = 0.99

DEFAULT_PROGRESS_EVERY: int = 1000

ProgressCallback = Callable[[int, int], None]


# ======================================================================
# Forecast look-ahead
# ======================================================================

def next_day_generation(
    intervals: Sequence[IntervalReading], intervals_per_day: int
) -> list[float | None]:
    """Generation summed over the *intervals_per_day* readings after each one.

    Entry ``i`` covers readings ``i+1 .. i+intervals_per_day``; it is ``None``
    when fewer than a full day of readings remains.  This reads the real
    future record, which the forecast strategy treats as a perfect forecast.
    """
    n = len(intervals)
    generation: NDArray[np.float64] = np.fromiter(
        (r.generation for r in intervals), dtype=np.float64, count=n
    )
    cumulative = np.concatenate(([0.0], np.cumsum(generation)))

    lookahead: list[float | None] = [None] * n
    last_full = n - intervals_per_day - 1
    if last_full >= 0:
        idx = np.arange(last_full + 1)
        sums = cumulative[idx + 1 + intervals_per_day] - cumulative[idx + 1]
        lookahead[: last_full + 1] = sums.tolist()
    return lookahead


def average_daily_consumption(
    intervals: Sequence[IntervalReading], intervals_per_day: int
) -> float:
    days = len(intervals) / intervals_per_day
    if days <= 0:
        return 0.0
    return sum(r.consumption for r in intervals) / days


# ======================================================================
# Runner
# ======================================================================

class SimulationRunner:
    """Run one strategy over one dataset.

    Parameters
    ----------
    intervals : Sequence[IntervalReading]
        Readings in strictly ascending timestamp order.  The runner does not
        sort them.
    params : SimulationParameters
        Battery, grid, tariff and strategy settings.
    progress_callback : callable or None
        Optional ``callback(index, total)`` invoked every *progress_every*
        intervals and once at completion.  Errors raised by the callback are
        logged and otherwise ignored; results do not depend on it.
    progress_every : int
        Callback cadence in intervals.
    record_log : bool
        Keep the per-interval detailed log.  Sweeps turn this off.
    """

    def __init__(
        self,
        intervals: Sequence[IntervalReading],
        params: SimulationParameters,
        progress_callback: ProgressCallback | None = None,
        progress_every: int = DEFAULT_PROGRESS_EVERY,
        record_log: bool = True,
    ) -> None:
        self.intervals = intervals
        self.params = params
        self._progress = progress_callback
        self.progress_every = max(1, int(progress_every))
        self.record_log = record_log

    # ------------------------------------------------------------------
    # Progress reporting
    # ------------------------------------------------------------------

    def _report(self, index: int, total: int) -> None:
        """Fire the progress callback if one was provided."""
        if self._progress is None:
            return
        try:
            self._progress(index, total)
        except Exception:
            logger.warning("Progress callback failed at %d/%d", index, total, exc_info=True)

    # ------------------------------------------------------------------
    # Preparation
    # ------------------------------------------------------------------

    def _resolve_params(self) -> SimulationParameters:
        """Validate inputs and fill in data-derived parameters."""
        try:
            validate_intervals(self.intervals)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc

        params = self.params
        params.validate()

        if (
            params.strategy.traits.forecast_gate
            and params.average_daily_consumption_kwh is None
        ):
            avg = average_daily_consumption(self.intervals, params.intervals_per_day)
            params = replace(params, average_daily_consumption_kwh=avg)
            logger.debug("Average daily consumption for forecast gate: %.3f kWh", avg)
        return params

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def run(self) -> SimulationResult:
        """Simulate every interval and aggregate the outcome.

        Raises
        ------
        ConfigurationError
            If parameters or readings are unusable.  Nothing is simulated.
        """
        params = self._resolve_params()
        intervals = self.intervals
        total = len(intervals)
        tariff = params.tariff

        if params.strategy.traits.forecast_gate:
            lookahead = next_day_generation(intervals, params.intervals_per_day)
        else:
            lookahead = [None] * total

        monthly: dict[str, MonthlyAccumulator] = {}
        log: list[LogEntry] = []

        soc = params.min_soc_kwh
        daily_peak = soc
        force_charge_today = False
        previous: IntervalReading | None = None

        for i, reading in enumerate(intervals):
            if i > 0 and i % self.progress_every == 0:
                self._report(i, total)

            month_key = reading.month_key
            month = monthly.get(month_key)
            if month is None:
                month = monthly[month_key] = MonthlyAccumulator()

            # Day rollover (UTC)
            if previous is not None and reading.day != previous.day:
                if force_charge_today and daily_peak < params.max_soc_kwh * FULL_CHARGE_FRACTION:
                    monthly[previous.month_key].missed_full_charges += 1
                daily_peak = soc
                force_charge_today = False

            result = dispatch_interval(
                reading,
                soc,
                params,
                force_charge_today,
                next_day_generation_kwh=lookahead[i],
            )
            soc = result.new_soc_kwh
            force_charge_today = result.force_charge_scheduled_today

            buy = tariff.buy_price(reading.hour)
            sell = tariff.sell_price(reading.hour)
            import_without = max(0.0, reading.consumption - reading.generation)
            export_without = max(0.0, reading.generation - reading.consumption)

            month.consumption += reading.consumption
            month.generation += reading.generation
            month.import_with_battery += result.grid_import_kwh
            month.export_with_battery += result.grid_export_kwh
            month.charged_to_battery += result.to_battery_kwh
            month.discharged_from_battery += result.from_battery_kwh
            month.curtailed += result.curtailed_kwh
            month.cost_with_battery += result.grid_import_kwh * buy
            month.export_revenue += result.grid_export_kwh * sell
            month.import_without_battery += import_without
            month.export_without_battery += export_without
            month.cost_without_battery += import_without * buy
            month.export_revenue_without_battery += export_without * sell

            if self.record_log:
                log.append(
                    LogEntry(
                        timestamp=reading.timestamp,
                        consumption=reading.consumption,
                        generation=reading.generation,
                        grid_import=result.grid_import_kwh,
                        grid_export=result.grid_export_kwh,
                        battery_charge=result.to_battery_kwh,
                        battery_discharge=result.from_battery_kwh,
                        battery_soc=soc,
                    )
                )

            if force_charge_today:
                daily_peak = max(daily_peak, soc)
            previous = reading

        self._report(total, total)

        outcome = aggregate_results(
            monthly,
            log,
            total,
            strategy=params.strategy,
            system_cost=params.system_cost,
            intervals_per_day=params.intervals_per_day,
        )
        logger.info(
            "Simulated %d intervals (%s, %.1f kWh): annual savings %.2f",
            total,
            params.strategy.value,
            params.battery_capacity_kwh,
            outcome.annual_savings,
        )
        return outcome


def run_simulation(
    intervals: Sequence[IntervalReading],
    params: SimulationParameters,
    progress_callback: ProgressCallback | None = None,
    progress_every: int = DEFAULT_PROGRESS_EVERY,
    record_log: bool = True,
) -> SimulationResult:
    """Convenience wrapper around :class:`SimulationRunner`."""
    return SimulationRunner(
        intervals,
        params,
        progress_callback=progress_callback,
        progress_every=progress_every,
        record_log=record_log,
    ).run()

"""Battery size sweep: annual savings as a function of capacity.

Re-runs the full simulation for each candidate capacity (and each strategy
of interest) to give the savings-vs-size curve.  Only the nameplate and
usable capacity change between runs; power limits, SOC window percentages,
tariff and grid limits stay as the user set them.

The default candidate ladder is 5 -- 40 kWh in 5 kWh steps, plus the
user's own battery size when it is not already on the ladder.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from engine.dispatch.strategies import Strategy, parse_strategy
from engine.load.readings import IntervalReading
from engine.simulation.parallel import map_runs
from engine.simulation.parameters import ConfigurationError, SimulationParameters
from engine.simulation.runner import SimulationRunner

logger = logging.getLogger(__name__)

DEFAULT_SIZE_LADDER_KWH: tuple[float, ...] = (5, 10, 15, 20, 25, 30, 35, 40)


@dataclass(frozen=True)
class SweepPoint:
    """Annual savings for one (strategy, capacity) pair."""

    strategy: Strategy
    size_kwh: float
    annual_savings: float
    payback_period_years: float

    def to_dict(self) -> dict[str, Any]:
        payback = self.payback_period_years
        return {
            "size_kwh": self.size_kwh,
            "annual_savings": round(self.annual_savings, 2),
            "payback_period_years": None if math.isinf(payback) else round(payback, 2),
        }


def candidate_sizes(
    user_size_kwh: float | None = None,
    ladder: Iterable[float] = DEFAULT_SIZE_LADDER_KWH,
) -> list[float]:
    """Sorted, de-duplicated candidate capacities including the user's size."""
    sizes = {float(s) for s in ladder}
    if user_size_kwh is not None:
        sizes.add(float(user_size_kwh))
    for size in sizes:
        if not math.isfinite(size) or size <= 0:
            raise ConfigurationError(f"candidate size must be a positive number, got {size}")
    return sorted(sizes)


def _evaluate_size(
    task: tuple[Sequence[IntervalReading], SimulationParameters],
) -> float:
    intervals, params = task
    return SimulationRunner(intervals, params, record_log=False).run().annual_savings


def sweep_battery_sizes(
    intervals: Sequence[IntervalReading],
    base_params: SimulationParameters,
    candidate_sizes_kwh: Iterable[float] | None = None,
    strategies: Iterable[Strategy | str] | None = None,
    concurrency: str = "process",
    max_workers: int | None = None,
) -> dict[Strategy, list[SweepPoint]]:
    """Savings-by-size series for each strategy.

    Parameters
    ----------
    intervals : Sequence[IntervalReading]
        Readings shared by every run.
    base_params : SimulationParameters
        The user's parameters; each run gets a resized copy.
    candidate_sizes_kwh : iterable of float or None
        Capacities to try.  ``None`` uses the default ladder plus the size
        in *base_params*.
    strategies : iterable or None
        Strategies to sweep.  ``None`` sweeps only the strategy in
        *base_params*.
    concurrency : str
        ``"process"``, ``"thread"`` or ``"serial"``.
    max_workers : int or None
        Pool size for parallel modes.

    Returns
    -------
    dict[Strategy, list[SweepPoint]]
        One ascending-size series per strategy.
    """
    if candidate_sizes_kwh is None:
        sizes = candidate_sizes(base_params.battery_capacity_kwh)
    else:
        sizes = candidate_sizes(None, ladder=candidate_sizes_kwh)
    if not sizes:
        raise ConfigurationError("no candidate battery sizes to sweep")

    chosen = [parse_strategy(s) for s in (strategies or [base_params.strategy])]
    chosen = list(dict.fromkeys(chosen))

    jobs: list[tuple[Strategy, float, SimulationParameters]] = []
    for strategy in chosen:
        for size in sizes:
            params = base_params.with_strategy(strategy).with_capacity(size)
            params.validate()
            jobs.append((strategy, size, params))

    intervals = tuple(intervals)
    logger.info(
        "Sweeping %d sizes x %d strategies (%s)", len(sizes), len(chosen), concurrency
    )
    savings = map_runs(
        _evaluate_size,
        [(intervals, params) for _, _, params in jobs],
        concurrency=concurrency,
        max_workers=max_workers,
    )

    curves: dict[Strategy, list[SweepPoint]] = {s: [] for s in chosen}
    for (strategy, size, params), annual_savings in zip(jobs, savings):
        if params.system_cost > 0 and annual_savings > 0:
            payback = params.system_cost / annual_savings
        else:
            payback = math.inf
        curves[strategy].append(
            SweepPoint(
                strategy=strategy,
                size_kwh=size,
                annual_savings=annual_savings,
                payback_period_years=payback,
            )
        )
    return curves


def best_size(points: Sequence[SweepPoint]) -> SweepPoint | None:
    """Point with the highest savings; the smaller battery wins ties."""
    if not points:
        return None
    return max(points, key=lambda p: (p.annual_savings, -p.size_kwh))

"""Run several strategies on the same data and line the results up."""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from engine.dispatch.strategies import Strategy, parse_strategy
from engine.economics.aggregator import SimulationResult
from engine.load.readings import IntervalReading
from engine.simulation.parallel import map_runs
from engine.simulation.parameters import SimulationParameters
from engine.simulation.runner import SimulationRunner

logger = logging.getLogger(__name__)


def _run_one(
    task: tuple[Sequence[IntervalReading], SimulationParameters, bool],
) -> SimulationResult:
    intervals, params, record_log = task
    return SimulationRunner(intervals, params, record_log=record_log).run()


def compare_strategies(
    intervals: Sequence[IntervalReading],
    base_params: SimulationParameters,
    strategies: Iterable[Strategy | str] | None = None,
    concurrency: str = "process",
    max_workers: int | None = None,
    record_log: bool = True,
) -> dict[Strategy, SimulationResult]:
    """Simulate each strategy with otherwise identical parameters.

    Every parameter set is validated before any run starts, so a bad
    strategy/tariff combination fails the whole comparison up front.

    Returns
    -------
    dict[Strategy, SimulationResult]
        Keyed in the order the strategies were given.
    """
    chosen = [parse_strategy(s) for s in (strategies or list(Strategy))]
    chosen = list(dict.fromkeys(chosen))
    param_sets = [base_params.with_strategy(s) for s in chosen]
    for params in param_sets:
        params.validate()

    intervals = tuple(intervals)
    results = map_runs(
        _run_one,
        [(intervals, params, record_log) for params in param_sets],
        concurrency=concurrency,
        max_workers=max_workers,
    )
    logger.info("Compared %d strategies over %d intervals", len(chosen), len(intervals))
    return dict(zip(chosen, results))

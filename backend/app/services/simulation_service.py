"""Translate API requests into engine calls and engine results into responses."""

from __future__ import annotations

import logging

from app.config import settings
from app.core.logging import progress_logger
from app.schemas.simulation import SimulationRequest, SweepRequest
from engine.advisor.size_sweep import best_size, candidate_sizes, sweep_battery_sizes
from engine.dispatch.strategies import Strategy
from engine.economics.aggregator import SimulationResult
from engine.economics.baseline import baseline_summary
from engine.grid.tariff import TariffSchedule
from engine.load.readings import IntervalReading
from engine.simulation.comparison import compare_strategies
from engine.simulation.parameters import ConfigurationError, SimulationParameters
from engine.simulation.runner import run_simulation

logger = logging.getLogger(__name__)


def readings_from_request(body: SimulationRequest) -> list[IntervalReading]:
    readings = [
        IntervalReading(timestamp=r.timestamp, consumption=r.consumption, generation=r.generation)
        for r in body.readings
    ]
    readings.sort(key=lambda r: r.timestamp)
    return readings


def tariff_from_request(body: SimulationRequest) -> TariffSchedule:
    try:
        return TariffSchedule.from_config(body.tariff.model_dump())
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc


def parameters_from_request(
    body: SimulationRequest, strategy: Strategy | None = None
) -> SimulationParameters:
    battery = body.battery
    charge_kw = battery.max_charge_rate_kw
    discharge_kw = (
        battery.max_discharge_rate_kw
        if battery.max_discharge_rate_kw is not None
        else charge_kw
    )
    return SimulationParameters(
        battery_capacity_kwh=battery.capacity_kwh,
        usable_capacity_kwh=battery.capacity_kwh * battery.usable_capacity_pct / 100.0,
        min_soc_pct=battery.min_soc_pct,
        max_soc_pct=battery.max_soc_pct,
        max_charge_rate_kw=charge_kw,
        max_discharge_rate_kw=discharge_kw,
        roundtrip_efficiency=battery.roundtrip_efficiency,
        strategy=strategy or body.strategies[0],
        mic_kw=body.grid.mic_kw,
        mec_kw=body.grid.mec_kw,
        tariff=tariff_from_request(body),
        system_cost=battery.system_cost,
        interval_hours=settings.interval_hours,
    )


def run_comparison(body: SimulationRequest) -> dict:
    """Simulate every requested strategy plus the no-battery baseline."""
    readings = readings_from_request(body)
    params = parameters_from_request(body)
    results = compare_strategies(
        readings,
        params,
        strategies=body.strategies,
        concurrency=settings.sweep_executor,
        max_workers=settings.sweep_max_workers,
        record_log=body.include_log,
    )
    baseline = baseline_summary(readings, params.tariff, params.interval_hours)
    return {
        "baseline": baseline.to_dict(),
        "results": [r.to_dict(include_log=body.include_log) for r in results.values()],
    }


def run_single(body: SimulationRequest, strategy: Strategy) -> SimulationResult:
    readings = readings_from_request(body)
    return run_simulation(
        readings,
        parameters_from_request(body, strategy),
        progress_callback=progress_logger(f"simulate {strategy.value}"),
    )


def run_sweep(body: SweepRequest) -> dict:
    """Savings-by-size curves for each requested strategy."""
    readings = readings_from_request(body)
    params = parameters_from_request(body)
    ladder = body.sizes_kwh if body.sizes_kwh is not None else settings.sweep_sizes_kwh
    sizes = candidate_sizes(params.battery_capacity_kwh, ladder=ladder)

    curves = sweep_battery_sizes(
        readings,
        params,
        candidate_sizes_kwh=sizes,
        strategies=body.strategies,
        concurrency=settings.sweep_executor,
        max_workers=settings.sweep_max_workers,
    )
    out = []
    for strategy, points in curves.items():
        best = best_size(points)
        out.append({
            "strategy": strategy.value,
            "points": [p.to_dict() for p in points],
            "best_size_kwh": best.size_kwh if best else None,
        })
    logger.info("Sweep finished: %d strategies, %d sizes", len(curves), len(sizes))
    return {"sizes_kwh": sizes, "curves": out}

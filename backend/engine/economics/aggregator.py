"""Annual financial and energy metrics from a finished simulation run.

:func:`aggregate_results` turns the monthly running totals and the
detailed log into a :class:`SimulationResult`.  Additive annual figures are
extrapolated linearly from the simulated span to a 365-day year, so a
dataset covering 300 or 400 days still reports per-year numbers.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Mapping, Sequence

from engine.dispatch.strategies import Strategy
from engine.simulation.records import LogEntry, MonthlyAccumulator, MonthlySummary

DAYS_IN_YEAR: int = 365


def _safe_float(value: float | None) -> float | None:
    """Map inf/nan to None so the value survives JSON encoding."""
    if value is None or math.isinf(value) or math.isnan(value):
        return None
    return value


@dataclass(frozen=True)
class SimulationResult:
    """Outcome of one (strategy, parameters) run.

    Money figures are annualised; ``payback_period_years`` is ``inf`` when
    the battery never pays back.
    """

    strategy: Strategy
    annual_savings: float
    payback_period_years: float
    self_sufficiency_pct: float
    annual_bill_before: float
    annual_bill_after: float
    annual_import_before: float
    annual_export_before: float
    annual_import_after: float
    annual_export_after: float
    annual_charged_kwh: float
    annual_discharged_kwh: float
    missed_full_charges: int
    total_intervals: int
    days_simulated: float
    scaling_factor: float
    monthly_data: dict[str, MonthlySummary] = field(default_factory=dict)
    detailed_log: tuple[LogEntry, ...] = ()

    # ------------------------------------------------------------------
    # Drill-down
    # ------------------------------------------------------------------

    def days_in_month(self, month_key: str) -> list[date]:
        """Distinct UTC dates in the log that fall in *month_key* (``YYYY-MM``)."""
        seen: dict[date, None] = {}
        for entry in self.detailed_log:
            ts = entry.timestamp
            if f"{ts.year:04d}-{ts.month:02d}" == month_key:
                seen.setdefault(ts.date(), None)
        return list(seen)

    def log_for_day(self, day: date) -> list[LogEntry]:
        return [e for e in self.detailed_log if e.timestamp.date() == day]

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------

    def to_dict(self, include_log: bool = False) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        data: dict[str, Any] = {
            "strategy": self.strategy.value,
            "annual_savings": round(self.annual_savings, 2),
            "payback_period_years": _safe_float(self.payback_period_years),
            "self_sufficiency_pct": round(self.self_sufficiency_pct, 2),
            "annual_bill_before": round(self.annual_bill_before, 2),
            "annual_bill_after": round(self.annual_bill_after, 2),
            "annual_import_before": round(self.annual_import_before, 3),
            "annual_export_before": round(self.annual_export_before, 3),
            "annual_import_after": round(self.annual_import_after, 3),
            "annual_export_after": round(self.annual_export_after, 3),
            "annual_charged_kwh": round(self.annual_charged_kwh, 3),
            "annual_discharged_kwh": round(self.annual_discharged_kwh, 3),
            "missed_full_charges": self.missed_full_charges,
            "total_intervals": self.total_intervals,
            "days_simulated": self.days_simulated,
            "scaling_factor": self.scaling_factor,
            "monthly_data": {k: v.to_dict() for k, v in self.monthly_data.items()},
        }
        if include_log:
            data["detailed_log"] = [e.to_dict() for e in self.detailed_log]
        return data


def annualisation_factor(total_intervals: int, intervals_per_day: int) -> float:
    """Scale factor from the simulated span to a 365-day year."""
    days = total_intervals / intervals_per_day if intervals_per_day > 0 else 0.0
    if days <= 0:
        return 1.0
    return DAYS_IN_YEAR / days


def aggregate_results(
    monthly_data: Mapping[str, MonthlyAccumulator],
    detailed_log: Sequence[LogEntry],
    total_intervals: int,
    strategy: Strategy,
    system_cost: float,
    intervals_per_day: int = 48,
) -> SimulationResult:
    """Finalise months and compute annual metrics.

    Pure: *monthly_data* is read, never modified, so calling this twice on
    the same inputs gives equal results.

    Parameters
    ----------
    monthly_data : Mapping[str, MonthlyAccumulator]
        Running totals keyed by ``"YYYY-MM"``.
    detailed_log : Sequence[LogEntry]
        Per-interval log, in input order.
    total_intervals : int
        Number of intervals simulated.
    strategy : Strategy
        Strategy the run used.
    system_cost : float
        Installed battery cost, for payback.
    intervals_per_day : int
        Intervals per day at the run's resolution.

    Returns
    -------
    SimulationResult
    """
    months = {
        key: MonthlySummary.from_accumulator(acc)
        for key, acc in sorted(monthly_data.items())
    }

    scale = annualisation_factor(total_intervals, intervals_per_day)
    days = total_intervals / intervals_per_day if intervals_per_day > 0 else 0.0

    def total(attr: str) -> float:
        return sum(getattr(m, attr) for m in months.values())

    consumption = total("consumption")
    import_after = total("import_with_battery")
    annual_savings = total("savings") * scale

    if consumption > 0:
        self_sufficiency = (1.0 - import_after / consumption) * 100.0
    else:
        self_sufficiency = 0.0

    if system_cost > 0 and annual_savings > 0:
        payback = system_cost / annual_savings
    else:
        payback = math.inf

    return SimulationResult(
        strategy=strategy,
        annual_savings=annual_savings,
        payback_period_years=payback,
        self_sufficiency_pct=self_sufficiency,
        annual_bill_before=total("cost_without_battery") * scale,
        annual_bill_after=total("bill_after") * scale,
        annual_import_before=total("import_without_battery") * scale,
        annual_export_before=total("export_without_battery") * scale,
        annual_import_after=import_after * scale,
        annual_export_after=total("export_with_battery") * scale,
        annual_charged_kwh=total("charged_to_battery") * scale,
        annual_discharged_kwh=total("discharged_from_battery") * scale,
        missed_full_charges=sum(m.missed_full_charges for m in months.values()),
        total_intervals=total_intervals,
        days_simulated=days,
        scaling_factor=scale,
        monthly_data=months,
        detailed_log=tuple(detailed_log),
    )

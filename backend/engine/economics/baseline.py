"""The household's position without a battery."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from engine.economics.aggregator import annualisation_factor
from engine.grid.tariff import TariffSchedule
from engine.load.readings import IntervalReading


@dataclass(frozen=True)
class BaselineSummary:
    """Annualised import, export and bill with solar but no battery."""

    annual_import_kwh: float
    annual_export_kwh: float
    annual_bill: float
    annual_export_revenue: float
    scaling_factor: float

    def to_dict(self) -> dict:
        return {
            "annual_import_kwh": round(self.annual_import_kwh, 1),
            "annual_export_kwh": round(self.annual_export_kwh, 1),
            "annual_bill": round(self.annual_bill, 2),
            "annual_export_revenue": round(self.annual_export_revenue, 2),
            "scaling_factor": self.scaling_factor,
        }


def baseline_summary(
    readings: Sequence[IntervalReading],
    tariff: TariffSchedule,
    interval_hours: float = 0.5,
) -> BaselineSummary:
    """Net each interval's consumption against generation and price the
    remainder at that hour's rates.  The bill counts imports only.
    """
    total_import = total_export = bill = revenue = 0.0
    for r in readings:
        imp = max(0.0, r.consumption - r.generation)
        exp = max(0.0, r.generation - r.consumption)
        total_import += imp
        total_export += exp
        bill += imp * tariff.buy_price(r.hour)
        revenue += exp * tariff.sell_price(r.hour)

    scale = annualisation_factor(len(readings), int(round(24 / interval_hours)))
    return BaselineSummary(
        annual_import_kwh=total_import * scale,
        annual_export_kwh=total_export * scale,
        annual_bill=bill * scale,
        annual_export_revenue=revenue * scale,
        scaling_factor=scale,
    )

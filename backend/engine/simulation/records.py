"""Per-interval log entries and per-month running totals."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from datetime import datetime


@dataclass(frozen=True)
class LogEntry:
    """One row of the detailed log: a reading plus its dispatch outcome."""

    timestamp: datetime
    consumption: float
    generation: float
    grid_import: float
    grid_export: float
    battery_charge: float
    battery_discharge: float
    battery_soc: float

    def to_dict(self) -> dict:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data


@dataclass
class MonthlyAccumulator:
    """Running sums for one calendar month (energy in kWh, money in currency)."""

    cost_without_battery: float = 0.0
    cost_with_battery: float = 0.0
    export_revenue: float = 0.0
    export_revenue_without_battery: float = 0.0
    consumption: float = 0.0
    generation: float = 0.0
    import_without_battery: float = 0.0
    import_with_battery: float = 0.0
    export_without_battery: float = 0.0
    export_with_battery: float = 0.0
    charged_to_battery: float = 0.0
    discharged_from_battery: float = 0.0
    curtailed: float = 0.0
    missed_full_charges: int = 0


@dataclass(frozen=True)
class MonthlySummary:
    """Finalised month: the accumulated totals plus derived money figures."""

    cost_without_battery: float
    cost_with_battery: float
    export_revenue: float
    export_revenue_without_battery: float
    consumption: float
    generation: float
    import_without_battery: float
    import_with_battery: float
    export_without_battery: float
    export_with_battery: float
    charged_to_battery: float
    discharged_from_battery: float
    curtailed: float
    missed_full_charges: int
    savings: float
    bill_after: float

    @classmethod
    def from_accumulator(cls, acc: MonthlyAccumulator) -> "MonthlySummary":
        bill_after = acc.cost_with_battery - acc.export_revenue
        totals = {f.name: getattr(acc, f.name) for f in fields(acc)}
        return cls(
            **totals,
            savings=acc.cost_without_battery - bill_after,
            bill_after=bill_after,
        )

    def to_dict(self) -> dict:
        return asdict(self)

"""CSV exports of simulation results.

The detailed export has one row per interval with the flows the dispatch
chose; the monthly export has one row per calendar month.
"""

from __future__ import annotations

import csv
import io
from typing import Iterable

from engine.economics.aggregator import SimulationResult
from engine.simulation.records import LogEntry

DETAILED_HEADERS: list[str] = [
    "Timestamp (UTC)",
    "Consumption (kWh)",
    "Generation (kWh)",
    "Grid Import (kWh)",
    "Grid Export (kWh)",
    "Battery Charge (kWh)",
    "Battery Discharge (kWh)",
    "Battery SoC (kWh)",
]

MONTHLY_HEADERS: list[str] = [
    "Month",
    "Consumption (kWh)",
    "Generation (kWh)",
    "Import Without Battery (kWh)",
    "Import With Battery (kWh)",
    "Export With Battery (kWh)",
    "Charged (kWh)",
    "Discharged (kWh)",
    "Bill Before",
    "Bill After",
    "Savings",
    "Missed Full Charges",
]


def _detailed_row(entry: LogEntry) -> list[str]:
    return [
        entry.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
        f"{entry.consumption:.4f}",
        f"{entry.generation:.4f}",
        f"{entry.grid_import:.4f}",
        f"{entry.grid_export:.4f}",
        f"{entry.battery_charge:.4f}",
        f"{entry.battery_discharge:.4f}",
        f"{entry.battery_soc:.4f}",
    ]


def iter_detailed_csv(log: Iterable[LogEntry]) -> Iterable[str]:
    """Yield the detailed CSV line by line, header first."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")

    def flush() -> str:
        text = buf.getvalue()
        buf.seek(0)
        buf.truncate()
        return text

    writer.writerow(DETAILED_HEADERS)
    yield flush()
    for entry in log:
        writer.writerow(_detailed_row(entry))
        yield flush()


def detailed_log_csv(result: SimulationResult) -> str:
    """The whole detailed log as one CSV string."""
    if not result.detailed_log:
        raise ValueError("result has no detailed log to export")
    return "".join(iter_detailed_csv(result.detailed_log))


def monthly_summary_csv(result: SimulationResult) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(MONTHLY_HEADERS)
    for key, m in result.monthly_data.items():
        writer.writerow([
            key,
            f"{m.consumption:.4f}",
            f"{m.generation:.4f}",
            f"{m.import_without_battery:.4f}",
            f"{m.import_with_battery:.4f}",
            f"{m.export_with_battery:.4f}",
            f"{m.charged_to_battery:.4f}",
            f"{m.discharged_from_battery:.4f}",
            f"{m.cost_without_battery:.2f}",
            f"{m.bill_after:.2f}",
            f"{m.savings:.2f}",
            m.missed_full_charges,
        ])
    return buf.getvalue()

"""PVGIS hourly PV output parsing and alignment with meter readings.

PVGIS ``seriescalc`` returns hourly average PV power ``P`` (W) stamped
``YYYYMMDD:HHMM``.  These helpers turn that into half-hourly generation in
kWh and graft it onto a consumption series by calendar position, ignoring
the year.
"""

from __future__ import annotations

import csv
import math
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone

from engine.load.readings import IntervalReading

_PEAKPOWER_RE = re.compile(r"peakpower=([0-9.]+)")


@dataclass(frozen=True)
class PVGISRecord:
    """One hourly PVGIS row: the raw time label and average power in W."""

    time: str
    power_w: float

    @property
    def year(self) -> int:
        return int(self.time[0:4])

    def start(self) -> datetime | None:
        """Start of the hour in UTC, or ``None`` for a malformed label."""
        try:
            return datetime(
                int(self.time[0:4]),
                int(self.time[4:6]),
                int(self.time[6:8]),
                int(self.time[9:11]),
                tzinfo=timezone.utc,
            )
        except ValueError:
            return None


@dataclass
class PVGISSeries:
    """Parsed PVGIS file: hourly records plus the peak power it was run for."""

    records: list[PVGISRecord] = field(default_factory=list)
    specified_peak_power_kw: float | None = None


@dataclass(frozen=True)
class PVGISSummary:
    """Generation statistics for the most recent year in a PVGIS series."""

    monthly_generation_kwh: list[float]
    total_annual_generation_kwh: float
    peak_power_kw: float
    year_used: int
    is_multi_year: bool

    def to_dict(self) -> dict:
        return {
            "monthly_generation_kwh": [round(v, 2) for v in self.monthly_generation_kwh],
            "total_annual_generation_kwh": round(self.total_annual_generation_kwh, 2),
            "peak_power_kw": round(self.peak_power_kw, 3),
            "year_used": self.year_used,
            "is_multi_year": self.is_multi_year,
        }


# ======================================================================
# Parsing
# ======================================================================

def parse_pvgis_csv(csv_text: str) -> PVGISSeries:
    """Parse PVGIS ``seriescalc`` CSV output.

    Metadata lines precede the table; a ``peakpower=`` value on a ``#`` line
    is picked up.  The table starts at the line beginning ``time,P,``.

    Raises
    ------
    ValueError
        If the data header or the ``P`` column is missing.
    """
    lines = csv_text.strip().splitlines()
    series = PVGISSeries()

    data_start = -1
    for i, line in enumerate(lines):
        if line.startswith("#") and "peakpower=" in line:
            match = _PEAKPOWER_RE.search(line)
            if match:
                series.specified_peak_power_kw = float(match.group(1))
        if line.lower().startswith("time,p,"):
            data_start = i
            break

    if data_start == -1:
        raise ValueError(
            "Could not find a valid data header row in the PVGIS file. "
            'Expected a line starting with "time,P,...".'
        )

    reader = csv.reader(lines[data_start:])
    header = [h.strip() for h in next(reader)]
    if "P" not in header:
        raise ValueError('PVGIS file is missing the required "P" (power) column.')
    p_idx = header.index("P")

    for row in reader:
        if len(row) <= p_idx or not row[0][:8].isdigit():
            # PVGIS appends a legend after the table.
            continue
        try:
            power = float(row[p_idx])
        except ValueError:
            continue
        if math.isfinite(power):
            series.records.append(PVGISRecord(time=row[0].strip(), power_w=power))
    return series


def records_from_json(hourly: list[dict]) -> list[PVGISRecord]:
    """Records from the ``outputs.hourly`` list of a JSON response."""
    return [
        PVGISRecord(time=str(item["time"]), power_w=float(item["P"]))
        for item in hourly
        if "time" in item and "P" in item
    ]


# ======================================================================
# Transformation
# ======================================================================

def expand_to_intervals(
    records: list[PVGISRecord], interval_hours: float = 0.5
) -> list[tuple[datetime, float]]:
    """Split each hourly record into equal sub-hour intervals of energy.

    Average power ``P`` W over an hour becomes ``P * interval_hours / 1000``
    kWh per interval, stamped at the interval start.
    """
    steps = int(round(1.0 / interval_hours))
    minutes = int(round(interval_hours * 60))
    out: list[tuple[datetime, float]] = []
    for rec in records:
        start = rec.start()
        if start is None:
            continue
        energy = rec.power_w * interval_hours / 1000.0
        for k in range(steps):
            out.append((start.replace(minute=k * minutes), energy))
    return out


def _calendar_key(ts: datetime) -> str:
    return f"{ts.month:02d}-{ts.day:02d}T{ts.hour:02d}:{ts.minute:02d}"


def merge_generation(
    readings: list[IntervalReading],
    generation: list[tuple[datetime, float]],
    scale: float = 1.0,
) -> list[IntervalReading]:
    """Replace each reading's generation with the PVGIS value for the same
    month, day and time of day, multiplied by *scale*.

    Feb 29 falls back to Feb 28 when the PVGIS year has no leap day.
    Positions without a match get zero generation.
    """
    by_key: dict[str, float] = {}
    for ts, kwh in generation:
        by_key[_calendar_key(ts)] = kwh

    merged: list[IntervalReading] = []
    for reading in readings:
        key = _calendar_key(reading.timestamp)
        value = by_key.get(key, 0.0)
        if value == 0.0 and key.startswith("02-29"):
            value = by_key.get("02-28" + key[5:], 0.0)
        merged.append(
            IntervalReading(
                timestamp=reading.timestamp,
                consumption=reading.consumption,
                generation=value * scale,
            )
        )
    return merged


def summarize_pvgis(records: list[PVGISRecord], interval_hours: float = 0.5) -> PVGISSummary:
    """Monthly and annual generation for the latest year in *records*."""
    if not records:
        raise ValueError("PVGIS series is empty")
    years = {r.year for r in records}
    latest = max(years)
    single_year = [r for r in records if r.year == latest]

    monthly = [0.0] * 12
    for ts, kwh in expand_to_intervals(single_year, interval_hours):
        monthly[ts.month - 1] += kwh

    peak_w = max((r.power_w for r in single_year), default=0.0)
    return PVGISSummary(
        monthly_generation_kwh=monthly,
        total_annual_generation_kwh=sum(monthly),
        peak_power_kw=max(0.0, peak_w) / 1000.0,
        year_used=latest,
        is_multi_year=len(years) > 1,
    )


def scale_records(records: list[PVGISRecord], factor: float) -> list[PVGISRecord]:
    """Records with power multiplied by *factor*, e.g. to resize the array."""
    if not math.isfinite(factor) or factor < 0:
        raise ValueError(f"scale factor must be finite and >= 0, got {factor}")
    return [PVGISRecord(time=r.time, power_w=r.power_w * factor) for r in records]

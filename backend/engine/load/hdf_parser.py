"""Smart-meter HDF (half-hourly data file) parsing utilities.

An HDF export is a CSV with some preamble lines followed by a table that has
at least a "Read Date", a "Read Type" and a "Read Value" column.  Each row
is one register read; import and export reads for the same half hour are
combined into a single :class:`IntervalReading`.
"""

from __future__ import annotations

import csv
import io
import math
import re
from datetime import datetime, timezone

from engine.load.readings import IntervalReading

_DATE_RE = re.compile(r"(\d{2})[/-](\d{2})[/-](\d{4})\s(\d{2}):(\d{2})")


def _is_header(line: str) -> bool:
    lower = line.lower()
    return (
        "read date" in lower
        and "read type" in lower
        and ("read value" in lower or "read val" in lower)
    )


def _column(header: list[str], *needles: str) -> int:
    for idx, name in enumerate(header):
        lower = name.lower()
        if any(n in lower for n in needles):
            return idx
    return -1


def _parse_read_date(text: str) -> datetime | None:
    """Parse ``DD/MM/YYYY HH:MM`` (or with dashes) as UTC, bucketed to the half hour."""
    match = _DATE_RE.search(text)
    if match is None:
        return None
    day, month, year, hour, minute = (int(g) for g in match.groups())
    try:
        ts = datetime(year, month, day, hour, minute, tzinfo=timezone.utc)
    except ValueError:
        return None
    return ts.replace(minute=(ts.minute // 30) * 30)


def parse_hdf(csv_text: str) -> list[IntervalReading]:
    """Parse HDF CSV text into half-hourly readings sorted by time.

    "Active import" reads add to consumption and "active export" reads add to
    generation; reactive and other register types are ignored.  Rows with an
    unparseable date, type or value are skipped.

    Raises
    ------
    ValueError
        If no header row is found, a required column is missing, or no
        usable rows remain.
    """
    lines = csv_text.strip().splitlines()

    header_idx = next((i for i, line in enumerate(lines) if _is_header(line)), -1)
    if header_idx == -1:
        raise ValueError(
            'Could not find a valid header row in HDF file. Expected "Read Date", '
            '"Read Type", and "Read Value" columns.'
        )

    reader = csv.reader(io.StringIO("\n".join(lines[header_idx:])))
    header = [h.strip().replace('"', "") for h in next(reader)]
    date_idx = _column(header, "read date")
    type_idx = _column(header, "read type")
    value_idx = _column(header, "read value", "read val")
    if min(date_idx, type_idx, value_idx) == -1:
        raise ValueError("HDF file is missing required columns (Date, Type, or Value).")

    needed = max(date_idx, type_idx, value_idx)
    buckets: dict[datetime, list[float]] = {}
    for row in reader:
        if len(row) <= needed:
            continue
        ts = _parse_read_date(row[date_idx].strip())
        if ts is None:
            continue
        read_type = row[type_idx].strip().lower()
        try:
            value = float(row[value_idx])
        except ValueError:
            continue
        if not read_type or not math.isfinite(value):
            continue

        entry = buckets.setdefault(ts, [0.0, 0.0])
        if read_type.startswith("active import"):
            entry[0] += value
        elif read_type.startswith("active export"):
            entry[1] += value

    if not buckets:
        raise ValueError("HDF file contains no usable half-hourly reads.")

    return [
        IntervalReading(timestamp=ts, consumption=cons, generation=gen)
        for ts, (cons, gen) in sorted(buckets.items())
    ]


# ======================================================================
# Analysis window
# ======================================================================

def filter_last_12_full_months(
    readings: list[IntervalReading],
) -> list[IntervalReading]:
    """Keep the 12 calendar months that end before the last reading's month.

    The partial month containing the final reading is dropped so annual
    figures rest on complete months.
    """
    if not readings:
        return []
    last = readings[-1].timestamp
    end = last.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    start = end.replace(year=end.year - 1)
    return [r for r in readings if start <= r.timestamp < end]


def count_months(readings: list[IntervalReading]) -> int:
    """Number of distinct ``YYYY-MM`` months covered by *readings*."""
    return len({r.month_key for r in readings})

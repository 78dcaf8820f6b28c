"""Half-hourly meter readings consumed by the simulation engine."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Sequence


@dataclass(frozen=True)
class IntervalReading:
    """Energy consumed and generated during one interval.

    Parameters
    ----------
    timestamp : datetime
        Interval start, timezone-aware UTC.  Naive datetimes are taken to
        be UTC.
    consumption : float
        Household consumption in kWh (>= 0).
    generation : float
        Solar generation in kWh (>= 0).
    """

    timestamp: datetime
    consumption: float = 0.0
    generation: float = 0.0

    def __post_init__(self) -> None:
        ts = self.timestamp
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        else:
            ts = ts.astimezone(timezone.utc)
        object.__setattr__(self, "timestamp", ts)

    @property
    def hour(self) -> int:
        return self.timestamp.hour

    @property
    def month(self) -> int:
        return self.timestamp.month

    @property
    def month_key(self) -> str:
        """Calendar month as ``"YYYY-MM"``."""
        return f"{self.timestamp.year:04d}-{self.timestamp.month:02d}"

    @property
    def day(self) -> date:
        return self.timestamp.date()


def validate_intervals(intervals: Sequence[IntervalReading]) -> None:
    """Reject sequences the engine cannot simulate.

    Raises
    ------
    ValueError
        If the sequence is empty, not strictly ascending, or holds negative
        or non-finite readings.
    """
    if len(intervals) == 0:
        raise ValueError("interval sequence is empty")

    previous: datetime | None = None
    for idx, reading in enumerate(intervals):
        if previous is not None and reading.timestamp <= previous:
            raise ValueError(
                f"intervals must be strictly ascending; index {idx} "
                f"({reading.timestamp.isoformat()}) follows {previous.isoformat()}"
            )
        for name in ("consumption", "generation"):
            value = getattr(reading, name)
            if not math.isfinite(value) or value < 0:
                raise ValueError(
                    f"{name} at index {idx} must be finite and >= 0, got {value}"
                )
        previous = reading.timestamp

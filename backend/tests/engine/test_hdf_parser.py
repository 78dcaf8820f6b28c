"""Tests for engine.load -- HDF parsing, reading validation and analysis window."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from engine.load.hdf_parser import count_months, filter_last_12_full_months, parse_hdf
from engine.load.readings import IntervalReading, validate_intervals

UTC = timezone.utc

HDF_SAMPLE = """\
MPRN,10012345678
Meter Serial,ABC123
MPRN,Meter Serial Number,Read Value,Read Type,Read Date and End Time
10012345678,ABC123,0.412,Active Import Interval (kW),01-03-2024 00:30
10012345678,ABC123,0.000,Active Export Interval (kW),01-03-2024 00:30
10012345678,ABC123,0.350,Active Import Interval (kW),01-03-2024 00:00
10012345678,ABC123,0.100,Active Import Interval (kW),01-03-2024 12:00
10012345678,ABC123,0.900,Active Export Interval (kW),01-03-2024 12:00
10012345678,ABC123,n/a,Active Import Interval (kW),01-03-2024 12:30
10012345678,ABC123,0.200,Active Import Interval (kW),not a date
10012345678,ABC123,0.500,Reactive Import Interval (kvar),01-03-2024 13:00
"""


class TestParseHDF:

    def test_parses_and_sorts(self):
        readings = parse_hdf(HDF_SAMPLE)
        times = [r.timestamp for r in readings]
        assert times == sorted(times)
        assert times[0] == datetime(2024, 3, 1, 0, 0, tzinfo=UTC)
        first, second = readings[0], readings[1]
        assert first.consumption == pytest.approx(0.350)
        assert second.consumption == pytest.approx(0.412)
        assert second.generation == 0.0

    def test_import_and_export_combined(self):
        noon = next(r for r in parse_hdf(HDF_SAMPLE) if r.hour == 12)
        assert noon.consumption == pytest.approx(0.100)
        assert noon.generation == pytest.approx(0.900)

    def test_bad_rows_skipped(self):
        readings = parse_hdf(HDF_SAMPLE)
        assert datetime(2024, 3, 1, 12, 30, tzinfo=UTC) not in {r.timestamp for r in readings}

    def test_other_read_types_ignored(self):
        reactive = next(r for r in parse_hdf(HDF_SAMPLE) if r.hour == 13)
        assert reactive.consumption == 0.0
        assert reactive.generation == 0.0

    def test_minutes_bucketed_to_half_hour(self):
        text = (
            "Read Value,Read Type,Read Date and End Time\n"
            "0.2,Active Import,05/06/2024 10:44\n"
            "0.3,Active Import,05/06/2024 10:31\n"
        )
        readings = parse_hdf(text)
        assert len(readings) == 1
        assert readings[0].timestamp == datetime(2024, 6, 5, 10, 30, tzinfo=UTC)
        assert readings[0].consumption == pytest.approx(0.5)

    def test_missing_header(self):
        with pytest.raises(ValueError, match="header row"):
            parse_hdf("a,b,c\n1,2,3\n")

    def test_no_usable_rows(self):
        text = "Read Value,Read Type,Read Date\nx,Active Import,bad\n"
        with pytest.raises(ValueError, match="no usable"):
            parse_hdf(text)


class TestAnalysisWindow:

    def _monthly_readings(self, start: datetime, months: int) -> list[IntervalReading]:
        readings = []
        ts = start
        for _ in range(months):
            readings.append(IntervalReading(ts, 1.0, 0.0))
            readings.append(IntervalReading(ts + timedelta(days=10), 1.0, 0.0))
            ts = (ts.replace(day=1) + timedelta(days=32)).replace(day=1)
        return readings

    def test_keeps_twelve_complete_months(self):
        readings = self._monthly_readings(datetime(2022, 11, 1, tzinfo=UTC), 16)
        kept = filter_last_12_full_months(readings)
        # Data ends in Feb 2024, so Feb 2023 .. Jan 2024 remain
        assert kept[0].month_key == "2023-02"
        assert kept[-1].month_key == "2024-01"
        assert count_months(kept) == 12

    def test_short_data_drops_last_partial_month(self):
        readings = self._monthly_readings(datetime(2024, 1, 1, tzinfo=UTC), 3)
        kept = filter_last_12_full_months(readings)
        assert {r.month_key for r in kept} == {"2024-01", "2024-02"}

    def test_empty(self):
        assert filter_last_12_full_months([]) == []


class TestIntervalReading:

    def test_naive_timestamp_is_utc(self):
        r = IntervalReading(datetime(2023, 7, 1, 9, 30), 1.0, 0.5)
        assert r.timestamp.tzinfo is not None
        assert r.hour == 9
        assert r.month == 7
        assert r.month_key == "2023-07"

    def test_offset_timestamp_converted(self):
        cet = timezone(timedelta(hours=1))
        r = IntervalReading(datetime(2023, 1, 1, 0, 30, tzinfo=cet), 0.0, 0.0)
        assert r.timestamp == datetime(2022, 12, 31, 23, 30, tzinfo=UTC)
        assert r.month_key == "2022-12"

    def test_validation(self):
        t0 = datetime(2023, 1, 1, tzinfo=UTC)
        with pytest.raises(ValueError, match="empty"):
            validate_intervals([])
        with pytest.raises(ValueError, match="ascending"):
            validate_intervals([IntervalReading(t0, 1, 0), IntervalReading(t0, 1, 0)])
        with pytest.raises(ValueError, match="consumption at index 0"):
            validate_intervals([IntervalReading(t0, -1.0, 0)])
        with pytest.raises(ValueError, match="generation at index 0"):
            validate_intervals([IntervalReading(t0, 1.0, float("inf"))])

"""Tests for engine.reporting.csv_export."""

from __future__ import annotations

import csv
import io

import pytest

from engine.reporting.csv_export import (
    DETAILED_HEADERS,
    MONTHLY_HEADERS,
    detailed_log_csv,
    iter_detailed_csv,
    monthly_summary_csv,
)
from engine.simulation.runner import run_simulation


@pytest.fixture
def two_day_result(base_params, sample_fortnight):
    return run_simulation(sample_fortnight[:96], base_params)


class TestDetailedCSV:

    def test_header_and_rows(self, two_day_result):
        rows = list(csv.reader(io.StringIO(detailed_log_csv(two_day_result))))
        assert rows[0] == DETAILED_HEADERS
        assert len(rows) == 97
        assert rows[1][0] == "2023-05-01 00:00:00"
        assert rows[2][0] == "2023-05-01 00:30:00"

    def test_four_decimals(self, two_day_result):
        rows = list(csv.reader(io.StringIO(detailed_log_csv(two_day_result))))
        for value in rows[1][1:]:
            assert len(value.split(".")[1]) == 4

    def test_streamed_lines(self, two_day_result):
        lines = list(iter_detailed_csv(two_day_result.detailed_log))
        assert len(lines) == 97
        assert all(line.endswith("\n") for line in lines)

    def test_requires_log(self, base_params, sample_fortnight):
        result = run_simulation(sample_fortnight[:48], base_params, record_log=False)
        with pytest.raises(ValueError, match="no detailed log"):
            detailed_log_csv(result)


class TestMonthlyCSV:

    def test_one_row_per_month(self, base_params, sample_year):
        result = run_simulation(sample_year, base_params, record_log=False)
        rows = list(csv.reader(io.StringIO(monthly_summary_csv(result))))
        assert rows[0] == MONTHLY_HEADERS
        assert [r[0] for r in rows[1:]] == [f"2023-{m:02d}" for m in range(1, 13)]
        jan = result.monthly_data["2023-01"]
        assert rows[1][-2] == f"{jan.savings:.2f}"

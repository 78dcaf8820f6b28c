"""Meter file ingestion: HDF parsing, analysis window and optional PVGIS merge."""

from __future__ import annotations

import logging

from engine.load.hdf_parser import count_months, filter_last_12_full_months, parse_hdf
from engine.load.readings import IntervalReading
from engine.weather.pvgis_parser import (
    expand_to_intervals,
    merge_generation,
    parse_pvgis_csv,
    summarize_pvgis,
)

logger = logging.getLogger(__name__)

MONTHS_FOR_FULL_YEAR = 12


def _summary(readings: list[IntervalReading]) -> dict:
    return {
        "intervals": len(readings),
        "months": count_months(readings),
        "start": readings[0].timestamp if readings else None,
        "end": readings[-1].timestamp if readings else None,
        "total_consumption_kwh": round(sum(r.consumption for r in readings), 3),
        "total_generation_kwh": round(sum(r.generation for r in readings), 3),
    }


def ingest(
    hdf_text: str,
    pvgis_text: str | None = None,
    pvgis_scale: float = 1.0,
    interval_hours: float = 0.5,
) -> dict:
    """Parse an HDF export, keep the last 12 full months, and optionally
    replace its generation with a PVGIS series.

    Raises
    ------
    ValueError
        If either file cannot be parsed or no readings remain.
    """
    readings = filter_last_12_full_months(parse_hdf(hdf_text))
    if not readings:
        raise ValueError("HDF file holds no complete calendar month of readings.")

    warnings: list[str] = []
    months = count_months(readings)
    if months < MONTHS_FOR_FULL_YEAR:
        warnings.append(
            f"Data covers only {months} month(s); annual figures are extrapolated."
        )

    out: dict = {"warnings": warnings, "pvgis": None, "specified_peak_power_kw": None}
    if pvgis_text is not None:
        series = parse_pvgis_csv(pvgis_text)
        pv_summary = summarize_pvgis(series.records, interval_hours)
        generation = expand_to_intervals(series.records, interval_hours)
        readings = merge_generation(readings, generation, scale=pvgis_scale)
        out["pvgis"] = pv_summary.to_dict()
        out["specified_peak_power_kw"] = series.specified_peak_power_kw
        if pv_summary.is_multi_year:
            warnings.append(
                f"PVGIS file spans several years; summary uses {pv_summary.year_used}."
            )

    for w in warnings:
        logger.warning(w)

    out["readings"] = [
        {"timestamp": r.timestamp, "consumption": r.consumption, "generation": r.generation}
        for r in readings
    ]
    out["summary"] = _summary(readings)
    return out

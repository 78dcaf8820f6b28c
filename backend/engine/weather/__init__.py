"""Solar generation data module (PVGIS parsing and client)."""

from .pvgis_parser import (
    PVGISRecord,
    PVGISSeries,
    PVGISSummary,
    expand_to_intervals,
    merge_generation,
    parse_pvgis_csv,
    records_from_json,
    scale_records,
    summarize_pvgis,
)
from .pvgis_client import fetch_pv_series, to_pvgis_aspect

__all__ = [
    "PVGISRecord",
    "PVGISSeries",
    "PVGISSummary",
    "expand_to_intervals",
    "merge_generation",
    "parse_pvgis_csv",
    "records_from_json",
    "scale_records",
    "summarize_pvgis",
    "fetch_pv_series",
    "to_pvgis_aspect",
]

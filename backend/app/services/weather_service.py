import logging

import httpx

from app.config import settings
from app.schemas.weather import PVGISRequest
from engine.weather.pvgis_client import fetch_pv_series
from engine.weather.pvgis_parser import expand_to_intervals, scale_records, summarize_pvgis

logger = logging.getLogger(__name__)


async def fetch_pvgis_generation(
    body: PVGISRequest, client: httpx.AsyncClient | None = None
) -> dict:
    """Fetch a PVGIS hourly series and return it as half-hourly generation.

    Raises
    ------
    ValueError
        If PVGIS returns no usable series.
    httpx.HTTPError
        If the PVGIS request fails.
    """
    records = await fetch_pv_series(
        body.latitude,
        body.longitude,
        body.peakpower_kw,
        loss_pct=body.loss_pct,
        tilt_deg=body.tilt_deg,
        azimuth_deg=body.azimuth_deg,
        year=body.year,
        base_url=settings.pvgis_base_url,
        client=client,
    )
    if not records:
        raise ValueError("PVGIS returned an empty series")
    if body.scale != 1.0:
        records = scale_records(records, body.scale)

    summary = summarize_pvgis(records, settings.interval_hours)
    generation = [
        {"timestamp": ts, "generation": kwh}
        for ts, kwh in expand_to_intervals(records, settings.interval_hours)
    ]
    logger.info(
        "PVGIS series for (%.3f, %.3f): %.0f kWh in %d",
        body.latitude, body.longitude,
        summary.total_annual_generation_kwh, summary.year_used,
    )
    return {
        "summary": summary.to_dict(),
        "specified_peak_power_kw": body.peakpower_kw,
        "generation": generation,
    }

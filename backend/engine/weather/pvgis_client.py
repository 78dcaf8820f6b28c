"""PVGIS API client for fetching hourly PV output series."""

from __future__ import annotations

import logging

import httpx

from engine.weather.pvgis_parser import PVGISRecord, records_from_json

logger = logging.getLogger(__name__)

PVGIS_BASE_URL = "https://re.jrc.ec.europa.eu/api/v5_3"


def to_pvgis_aspect(azimuth_deg: float) -> float:
    """Compass azimuth (180 = south) to PVGIS aspect (0 = south, -90 = east)."""
    return azimuth_deg - 180.0


async def fetch_pv_series(
    lat: float,
    lon: float,
    peakpower_kw: float,
    loss_pct: float = 14.0,
    tilt_deg: float = 35.0,
    azimuth_deg: float = 180.0,
    year: int | None = None,
    base_url: str = PVGIS_BASE_URL,
    client: httpx.AsyncClient | None = None,
) -> list[PVGISRecord]:
    """Fetch an hourly PV output series from PVGIS ``seriescalc``.

    Args:
        lat: Latitude (-90 to 90)
        lon: Longitude (-180 to 180)
        peakpower_kw: Installed PV peak power in kWp
        loss_pct: System losses in percent
        tilt_deg: Panel tilt in degrees
        azimuth_deg: Panel azimuth, 0=N, 90=E, 180=S, 270=W
        year: Single year to fetch; PVGIS picks its full range when omitted
        base_url: API root, overridable for mirrors
        client: Optional client to reuse (a fresh one is created otherwise)

    Returns:
        Hourly records with average power in W
    """
    params: dict = {
        "lat": lat,
        "lon": lon,
        "peakpower": peakpower_kw,
        "loss": loss_pct,
        "angle": tilt_deg,
        "aspect": to_pvgis_aspect(azimuth_deg),
        "outputformat": "json",
        "pvcalculation": 1,
    }
    if year is not None:
        params["startyear"] = year
        params["endyear"] = year

    url = f"{base_url}/seriescalc"
    if client is None:
        async with httpx.AsyncClient(timeout=60.0) as own_client:
            response = await own_client.get(url, params=params)
    else:
        response = await client.get(url, params=params)
    response.raise_for_status()

    payload = response.json()
    try:
        hourly = payload["outputs"]["hourly"]
    except (KeyError, TypeError):
        raise ValueError("PVGIS response has no outputs.hourly series") from None

    records = records_from_json(hourly)
    logger.info("Fetched %d hourly PVGIS records for (%.3f, %.3f)", len(records), lat, lon)
    return records
